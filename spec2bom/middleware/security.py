"""Security headers middleware."""

from fastapi import Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000",
}

# Headers an upstream answer must never leak back to the browser
STRIPPED_HEADERS = ("Authorization", "Set-Cookie")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response and drop credential headers."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        for header_name in STRIPPED_HEADERS:
            if header_name in response.headers:
                del response.headers[header_name]
        for header_name, header_value in SECURITY_HEADERS.items():
            response.headers[header_name] = header_value

        return response
