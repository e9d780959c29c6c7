# democracy_lens/exception_handling.py
"""
Every error leaves the API as {"success": false, "detail": ...}, the same
envelope successful responses use with "data".
"""
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_setup import get_logger, request_id_var

logger = get_logger("democracy_lens.exceptions")


def _error(detail, status_code: int, headers=None) -> JSONResponse:
    return JSONResponse({"success": False, "detail": detail}, status_code=status_code, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    fields = {"handled": True, "path": request.url.path, "status_code": exc.status_code, "detail": exc.detail}
    if exc.status_code >= 500:
        logger.error("HTTP_EXCEPTION", extra=fields)
    else:
        logger.warning("HTTP_EXCEPTION", extra=fields)
    return _error(exc.detail, exc.status_code, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(
        "REQUEST_INVALID",
        extra={"handled": True, "path": request.url.path, "fields": [".".join(map(str, e.get("loc", ()))) for e in errors]},
    )
    return _error(jsonable_encoder(errors), 422)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "UNHANDLED_EXCEPTION",
        extra={"handled": False, "path": request.url.path, "error": type(exc).__name__},
    )
    return _error("Internal Server Error", 500, headers={"X-Request-ID": request_id_var.get()})


def register_exception_handlers(app: FastAPI) -> None:
    """Called from create_app() right after the FastAPI app is built."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
