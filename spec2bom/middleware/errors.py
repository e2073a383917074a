"""Error handling middleware."""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.status import (
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from spec2bom.core.errors import (
    NotFoundError,
    Spec2BomError,
    UploadTransportError,
    UpstreamError,
)
from spec2bom.core.logging import get_logger

logger = get_logger(__name__)

# Named constant was renamed in recent Starlette releases
HTTP_422_UNPROCESSABLE = 422

# Map exception types to status codes; subclasses match via the MRO
ErrorMapping = dict[type[Exception], int]

ERROR_MAPPING: ErrorMapping = {
    NotFoundError: HTTP_404_NOT_FOUND,
    UpstreamError: HTTP_502_BAD_GATEWAY,
    UploadTransportError: HTTP_502_BAD_GATEWAY,
    RequestValidationError: HTTP_422_UNPROCESSABLE,
}


def _get_error_detail(exc: Exception) -> tuple[str, int]:
    """Get error detail and status code from exception."""
    if isinstance(exc, StarletteHTTPException):
        return str(exc.detail), exc.status_code
    if isinstance(exc, RequestValidationError):
        return str(exc.errors()), HTTP_422_UNPROCESSABLE

    status_code = HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type in type(exc).__mro__:
        if exc_type in ERROR_MAPPING:
            status_code = ERROR_MAPPING[exc_type]
            break

    detail = str(exc.args[0] if exc.args else str(exc))
    return detail, status_code


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an exception and turn it into the standard JSON error body."""
    correlation_id = getattr(request.state, "correlation_id", None)
    error_type = exc.__class__.__name__
    detail, status_code = _get_error_detail(exc)

    logger.error(
        "request_error",
        error_type=error_type,
        error_message=detail,
        status_code=status_code,
        path=request.url.path,
        method=request.method,
        correlation_id=correlation_id,
    )

    response = JSONResponse(
        status_code=status_code,
        content={
            "error": error_type,
            "message": detail,
            "status_code": status_code,
            "correlation_id": correlation_id if correlation_id else "unknown",
        },
    )
    if correlation_id:
        response.headers["X-Request-ID"] = correlation_id
    return response


async def handle_exception(request: Request, exc: Exception) -> Response:
    return error_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Route framework and domain exceptions through :func:`error_response`."""
    app.add_exception_handler(StarletteHTTPException, handle_exception)
    app.add_exception_handler(RequestValidationError, handle_exception)
    app.add_exception_handler(Spec2BomError, handle_exception)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into consistent JSON error responses.

    Error responses produced downstream (including upstream errors relayed
    by the proxy) pass through untouched.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """
        Process the request/response cycle and handle errors.

        Args:
        ----
            request: The incoming request
            call_next: The next handler in the middleware chain

        Returns:
        -------
            The response from downstream handlers or error response
        """
        try:
            return await call_next(request)
        except Exception as exc:
            return error_response(request, exc)
