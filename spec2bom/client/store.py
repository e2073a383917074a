"""Client for the upstream object store and execution API."""

from types import TracebackType
from typing import Any

import httpx

from spec2bom.client.models import ContentRef, StoredObject, UploadResult
from spec2bom.core.errors import NotFoundError, UploadTransportError, UpstreamError
from spec2bom.core.logging import get_logger

logger = get_logger(__name__)


class ObjectStoreClient:
    """Thin async wrapper around the object store REST endpoints.

    Every method is a single network call with no retry or backoff. Any
    non-2xx answer is raised as :class:`UpstreamError` carrying the status
    code. When pointed at the proxy service no credential is needed; the
    ``api_key`` argument exists for server-side use only.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._headers = headers
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def __aenter__(self) -> "ObjectStoreClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        response = await self._client.request(
            method, url, json=json, params=params, headers=self._headers
        )
        if response.status_code == 404:
            logger.warning("upstream_not_found", method=method, path=path)
            raise NotFoundError(response.text[:200], path=path)
        if not response.is_success:
            logger.error(
                "upstream_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise UpstreamError(response.status_code, response.text[:200], path=path)
        if not response.content:
            return None
        return response.json()

    async def request_upload_url(self, name: str, mime_type: str) -> UploadResult:
        """Ask for a signed URL the file bytes can be written to."""
        data = await self._request(
            "POST", "objects/upload-url", json={"name": name, "mime_type": mime_type}
        )
        return UploadResult.model_validate(data)

    async def put_bytes(self, url: str, data: bytes, mime_type: str) -> None:
        """Write raw bytes to a signed storage URL.

        Raises:
            UploadTransportError: If the write fails or is rejected
        """
        try:
            response = await self._client.put(
                url, content=data, headers={"Content-Type": mime_type}
            )
        except httpx.HTTPError as e:
            raise UploadTransportError(f"Storage write failed: {e}") from e
        if not response.is_success:
            raise UploadTransportError(
                f"Storage write rejected with status {response.status_code}"
            )

    async def create_object(
        self,
        name: str,
        content: ContentRef,
        properties: dict[str, Any] | None = None,
    ) -> StoredObject:
        """Register an object record pointing at previously uploaded bytes."""
        payload = {
            "name": name,
            "content": content.model_dump(exclude_none=True),
            "properties": properties or {},
        }
        data = await self._request("POST", "objects", json=payload)
        return StoredObject.model_validate(data)

    async def list_objects(
        self, filter: dict[str, str] | None = None, limit: int = 100
    ) -> list[StoredObject]:
        """List objects matching an opaque key/value filter.

        Upstream order is preserved; callers sort when order matters.
        """
        params: dict[str, Any] = dict(filter or {})
        params["limit"] = limit
        data = await self._request("GET", "objects", params=params)
        if not isinstance(data, list):
            return []
        return [StoredObject.model_validate(item) for item in data]

    async def get_object(self, object_id: str) -> StoredObject:
        data = await self._request("GET", f"objects/{object_id}")
        return StoredObject.model_validate(data)

    async def request_download_url(self, content_source: str) -> str:
        data = await self._request(
            "POST", "objects/download-url", json={"file": content_source}
        )
        return str(data["url"])

    async def delete_object(self, object_id: str) -> None:
        await self._request("DELETE", f"objects/{object_id}")

    async def execute_async(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Start an asynchronous execution on the upstream platform."""
        data = await self._request("POST", "execute-async", json=payload)
        return data if isinstance(data, dict) else {}

    async def fetch_bytes(self, url: str) -> bytes:
        """Download the bytes behind a signed download URL."""
        response = await self._client.get(url)
        if not response.is_success:
            raise UpstreamError(response.status_code, path=url)
        return response.content
