"""Structured error responses."""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from .correlation import get_correlation_id

log = structlog.get_logger()


def error_body(error: str, message, status_code: int, path: str, **extra) -> dict:
    body = {
        "error": error,
        "message": message,
        "status_code": status_code,
        "correlation_id": get_correlation_id(),
        "path": path,
    }
    body.update(extra)
    return body


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turns unhandled exceptions into a structured 500 response."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            log.error(
                "unhandled.exception",
                error=str(exc),
                error_type=exc.__class__.__name__,
                path=request.url.path,
                exc_info=True,
            )
            return JSONResponse(
                status_code=500,
                content=error_body(
                    "InternalServerError",
                    "An unexpected error occurred",
                    500,
                    request.url.path,
                ),
            )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    log.warning(
        "http.exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.__class__.__name__, exc.detail, exc.status_code, request.url.path),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Payloads that do not decode into the expected shape are client errors."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    log.warning("payload.invalid", errors=errors, path=request.url.path)
    return JSONResponse(
        status_code=400,
        content=error_body("InvalidPayload", "Request payload could not be decoded", 400, request.url.path, detail=errors),
    )


class InvalidJSONError(Exception):
    """Raised when a request body is not valid JSON."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


def invalid_json_response(path: str, detail: str) -> JSONResponse:
    log.warning("invalid.json", error=detail, path=path)
    return JSONResponse(
        status_code=400,
        content=error_body("InvalidJSON", "Request body is not valid JSON", 400, path, detail=detail),
    )


async def invalid_json_handler(request: Request, exc: InvalidJSONError):
    return invalid_json_response(request.url.path, exc.detail)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidJSONError, invalid_json_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
