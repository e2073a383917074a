"""Relay of browser calls to the upstream Vertesia API.

The bearer credential is injected here, server side, and never returned
to the caller.
"""

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from starlette.status import HTTP_502_BAD_GATEWAY, HTTP_503_SERVICE_UNAVAILABLE

from spec2bom.core.config import Settings
from spec2bom.core.config import settings as app_settings
from spec2bom.core.events import UPSTREAM_REQUESTS_TOTAL
from spec2bom.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]
BODYLESS_METHODS = {"GET", "HEAD"}


def get_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return getattr(request.app.state, "settings", app_settings)


def get_upstream_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream client opened at startup, created lazily otherwise."""
    client: httpx.AsyncClient | None = getattr(request.app.state, "upstream", None)
    if client is None:
        client = httpx.AsyncClient()
        request.app.state.upstream = client
    return client


def _auth_headers(settings: Settings) -> dict[str, str]:
    if not settings.has_credential:
        raise HTTPException(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            detail="Upstream credential is not configured",
        )
    return {"Authorization": f"Bearer {settings.VERTESIA_API_KEY}"}


async def _relay(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None = None,
) -> Response:
    try:
        upstream = await client.request(method, url, headers=headers, content=body)
    except httpx.HTTPError as e:
        logger.error("upstream_unreachable", method=method, url=url, error=str(e))
        UPSTREAM_REQUESTS_TOTAL.labels(method=method, status_code="error").inc()
        raise HTTPException(
            status_code=HTTP_502_BAD_GATEWAY, detail="Upstream request failed"
        ) from e

    UPSTREAM_REQUESTS_TOTAL.labels(
        method=method, status_code=str(upstream.status_code)
    ).inc()
    logger.info(
        "upstream_relayed", method=method, url=url, status_code=upstream.status_code
    )
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )


@router.api_route("/object-{object_id}", methods=PROXY_METHODS)
async def proxy_object(
    object_id: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    """Relay a single-object call, taking the id from the ``object-<id>`` segment."""
    headers = _auth_headers(settings)
    url = f"{settings.VERTESIA_API_BASE}/objects/{object_id}"
    return await _relay(client, request.method, url, headers)


@router.api_route("/{path:path}", methods=PROXY_METHODS)
async def proxy(
    path: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_upstream_client),
) -> Response:
    """Relay any other call with its method, body and query string."""
    headers = {"Content-Type": "application/json", **_auth_headers(settings)}
    url = f"{settings.VERTESIA_API_BASE}/{path}"
    if request.url.query:
        url = f"{url}?{request.url.query}"
    body = None if request.method in BODYLESS_METHODS else await request.body()
    return await _relay(client, request.method, url, headers, body)
