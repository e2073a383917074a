"""Tests for security headers and credential stripping."""

from typing import AsyncGenerator, cast

import pytest
import pytest_asyncio
from fastapi import FastAPI, Response
from httpx import ASGITransport, AsyncClient
from starlette.types import ASGIApp

from spec2bom.middleware.security import SECURITY_HEADERS, SecurityHeadersMiddleware


@pytest.fixture
def security_app() -> FastAPI:
    app = FastAPI()

    @app.get("/leaky")
    async def leaky() -> Response:
        return Response(
            content=b"{}",
            headers={"Authorization": "Bearer secret", "Set-Cookie": "session=1"},
        )

    app.add_middleware(SecurityHeadersMiddleware)
    return app


@pytest_asyncio.fixture
async def security_client(security_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=cast(ASGIApp, security_app))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def test_security_headers_added(security_client: AsyncClient) -> None:
    response = await security_client.get("/leaky")

    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


async def test_credential_headers_stripped(security_client: AsyncClient) -> None:
    response = await security_client.get("/leaky")

    assert "authorization" not in response.headers
    assert "set-cookie" not in response.headers
