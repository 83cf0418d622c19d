from __future__ import annotations
from contextvars import ContextVar

# set per request by RequestContextMiddleware; read by the exception handlers
run_id_var: ContextVar[str] = ContextVar("run_id", default="unknown")
