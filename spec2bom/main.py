"""Main FastAPI application module."""

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette import status

from spec2bom.api.proxy import router as proxy_router
from spec2bom.api.router import router as service_router
from spec2bom.core.config import Settings
from spec2bom.core.events import create_lifespan
from spec2bom.middleware.correlation import CorrelationMiddleware
from spec2bom.middleware.errors import (
    ErrorHandlingMiddleware,
    register_exception_handlers,
)
from spec2bom.middleware.metrics import MetricsMiddleware
from spec2bom.middleware.security import SecurityHeadersMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the proxy application."""
    settings = settings or Settings()

    app = FastAPI(
        title=settings.app_name,
        description="Credential-holding relay for the Spec-to-BOM client",
        version=settings.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=JSONResponse,
        lifespan=create_lifespan(settings),
    )
    app.state.settings = settings

    # Middleware, outermost first:
    # 1. CORS
    # 2. Security headers
    # 3. Correlation (adds request ID)
    # 4. Metrics (tracks all requests)
    # 5. Error handling (handles all errors)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(MetricsMiddleware, proxy_prefix=settings.api_prefix)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )
    register_exception_handlers(app)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose Prometheus metrics."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", include_in_schema=False)
    async def root_redirect() -> Response:
        """Redirect root path to docs."""
        return RedirectResponse(
            url="/docs", status_code=status.HTTP_307_TEMPORARY_REDIRECT
        )

    app.include_router(service_router)
    app.include_router(proxy_router, prefix=settings.api_prefix)
    return app


app = create_app()
