from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from diffset.core.context import run_id_var

logger = logging.getLogger("diffset")

RUN_ID_HEADER = "X-Run-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with a run_id (reused from the caller's X-Run-Id when
    present) and logs one line per request, including the compared
    endpoints when a diff route recorded them on request.state.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        run_id = request.headers.get(RUN_ID_HEADER) or str(uuid.uuid4())
        token = run_id_var.set(run_id)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            run_id_var.reset(token)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[RUN_ID_HEADER] = run_id

        compare = getattr(request.state, "compare", None)
        if compare is None:
            logger.info(
                "REQ run_id=%s %s %s status=%s elapsed=%.1fms",
                run_id, request.method, request.url.path, response.status_code, elapsed_ms,
            )
        else:
            logger.info(
                "REQ_DIFF run_id=%s %s %s compare=%s filter=%s files=%s status=%s elapsed=%.1fms",
                run_id,
                request.method,
                request.url.path,
                compare,
                getattr(request.state, "filter", None) or "-",
                getattr(request.state, "files", None),
                response.status_code,
                elapsed_ms,
            )
        return response
