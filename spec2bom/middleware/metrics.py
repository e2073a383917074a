"""Request metrics middleware for Prometheus monitoring."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from spec2bom.core.events import REQUESTS_TOTAL, RESPONSES_TOTAL
from spec2bom.core.logging import get_logger

logger = get_logger(__name__)


def _metric_path(path: str, prefix: str) -> str:
    """Collapse proxied paths to their first segment to bound label cardinality."""
    path = path.rstrip("/")
    if prefix and path.startswith(prefix + "/"):
        rest = path[len(prefix) + 1 :]
        head = rest.split("/", 1)[0]
        if head.startswith("object-"):
            head = "object-{id}"
        return f"{prefix}/{head}"
    return path


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect request/response metrics.

    Records:
    - Total requests by method and path
    - Total responses by status code
    """

    def __init__(self, app: ASGIApp, proxy_prefix: str = "/api/vertesia") -> None:
        """
        Initialize middleware.

        Args:
        ----
            app: The ASGI application
            proxy_prefix: Prefix under which proxied paths are collapsed
        """
        super().__init__(app)
        self.proxy_prefix = proxy_prefix.rstrip("/")

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = _metric_path(str(request.url.path), self.proxy_prefix)
        REQUESTS_TOTAL.labels(method=request.method, path=path).inc()

        try:
            start_time = time.time()
            response = await call_next(request)
            duration = time.time() - start_time

            RESPONSES_TOTAL.labels(status_code=str(response.status_code)).inc()
            logger.info(
                "request_processed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration=duration,
            )
            return response

        except Exception as e:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                error=str(e),
            )
            raise
