# democracy_lens/middleware.py
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .logging_setup import request_id_var, get_logger

logger = get_logger("democracy_lens.http")

SLOW_REQUEST_MS = 2000
QUIET_PATHS = {"/health"}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id (the caller's X-Request-ID when present),
    echoes it back on the response and logs one REQUEST_DONE line per call.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        token = request_id_var.set(req_id)
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = req_id
            return response
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 1)
            fields = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "elapsed_ms": elapsed_ms,
            }
            if elapsed_ms > SLOW_REQUEST_MS:
                logger.warning("REQUEST_SLOW", extra=fields)
            elif request.url.path in QUIET_PATHS:
                logger.debug("REQUEST_DONE", extra=fields)
            else:
                logger.info("REQUEST_DONE", extra=fields)
            request_id_var.reset(token)
