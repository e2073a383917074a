"""Service router: health and readiness."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from spec2bom.api.proxy import get_settings
from spec2bom.core.config import Settings

router = APIRouter(default_response_class=JSONResponse)


@router.get("/health")
async def health_check(
    request: Request, settings: Settings = Depends(get_settings)
) -> dict[str, Any]:
    """Report service health.

    The proxy is ``degraded`` when no upstream credential is configured,
    since every relayed call would be refused. The credential itself is
    never included.
    """
    return {
        "status": "healthy" if settings.has_credential else "degraded",
        "version": settings.version,
        "upstream": settings.VERTESIA_API_BASE,
        "credential_configured": settings.has_credential,
        "correlation_id": getattr(request.state, "correlation_id", None),
    }
