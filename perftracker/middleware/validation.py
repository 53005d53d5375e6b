"""Validation middleware for request payload size and JSON structure."""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import structlog
import orjson
from .error_handler import error_body, invalid_json_response

log = structlog.get_logger()


class ValidationMiddleware(BaseHTTPMiddleware):
    """Rejects oversized bodies and bodies that are not valid JSON."""

    def __init__(self, app, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    def _too_large(self, request: Request, size: int) -> JSONResponse:
        log.warning("payload.too_large", size=size, max_size=self.max_size, path=request.url.path)
        return JSONResponse(
            status_code=413,
            content=error_body(
                "PayloadTooLarge",
                f"Request payload exceeds maximum size of {self.max_size} bytes",
                413,
                request.url.path,
                max_size=self.max_size,
                received_size=size,
            ),
        )

    async def dispatch(self, request: Request, call_next):
        if request.method not in ("POST", "PUT", "PATCH"):
            return await call_next(request)

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            return self._too_large(request, int(content_length))

        body = await request.body()
        if len(body) > self.max_size:
            return self._too_large(request, len(body))

        # Any content type: sendBeacon posts JSON as text/plain
        if body:
            try:
                orjson.loads(body)
            except orjson.JSONDecodeError as e:
                return invalid_json_response(request.url.path, str(e))

        return await call_next(request)
