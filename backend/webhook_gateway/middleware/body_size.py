from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from webhook_gateway.core.config import get_settings


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body is larger than max_body_size."""

    def __init__(self, app, max_body_size: int | None = None):
        super().__init__(app)
        if max_body_size is None:
            max_body_size = get_settings().max_body_size
        self.max_body_size = max_body_size

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            if int(content_length) > self.max_body_size:
                return JSONResponse({"error": "Payload too large"}, status_code=413)
        return await call_next(request)
