from __future__ import annotations

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from diffset.core.context import run_id_var
from diffset.domain.diff.errors import MalformedDiffSegment
from diffset.tools.git_diff import GitError

logger = logging.getLogger("diffset")


def register_exception_handlers(app) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        run_id = run_id_var.get()
        logger.warning(
            "VALIDATION run_id=%s path=%s errors=%s",
            run_id,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(status_code=422, content={"detail": exc.errors(), "run_id": run_id})

    @app.exception_handler(MalformedDiffSegment)
    async def malformed_segment_handler(request: Request, exc: MalformedDiffSegment):
        run_id = run_id_var.get()
        logger.warning(
            "MALFORMED_SEGMENT run_id=%s path=%s file=%s reason=%s",
            run_id,
            request.url.path,
            exc.path,
            exc.reason,
        )
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "file": exc.path, "run_id": run_id},
        )

    @app.exception_handler(GitError)
    async def git_error_handler(request: Request, exc: GitError):
        run_id = run_id_var.get()
        logger.error("GIT_ERROR run_id=%s path=%s error=%s", run_id, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": str(exc), "run_id": run_id})
