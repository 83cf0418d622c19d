from fastapi import FastAPI

from diffset.api.routes import router
from diffset.config.settings import settings
from diffset.shared.logging import setup_logging
from diffset.middleware.request_context import RequestContextMiddleware
from diffset.exceptions.handlers import register_exception_handlers


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(
        title="diffset",
        version="0.1.0",
        description="Per-file diffs, numbered line changes and numstat statistics of a local git repository",
    )
    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
