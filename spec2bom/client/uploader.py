"""Three-step upload: signed URL, byte transfer, object record."""

from collections.abc import Iterable
from typing import Any

from spec2bom.client.models import ContentRef, FileUpload, StoredObject
from spec2bom.client.store import ObjectStoreClient
from spec2bom.core.logging import get_logger

logger = get_logger(__name__)


class Uploader:
    """Upload local files and register them as object records.

    Each step depends on the previous one succeeding. There is no rollback:
    if the object record cannot be created after a successful byte transfer,
    the bytes stay orphaned in storage and the failure is logged as
    ``orphaned_upload`` before the error propagates.
    """

    def __init__(self, store: ObjectStoreClient) -> None:
        self.store = store

    async def upload(
        self, file: FileUpload, properties: dict[str, Any] | None = None
    ) -> StoredObject:
        """Upload one file and return the created object record.

        Args:
            file: Name, bytes and optional MIME type of the file
            properties: Properties to tag the record with, e.g. ``{"kind": "spec"}``

        Returns:
            The created object, whose ``content.source`` is the upload id
        """
        mime_type = file.effective_mime_type
        log = logger.bind(file_name=file.name, mime_type=mime_type)
        log.info("upload_started", size=len(file.data))

        signed = await self.store.request_upload_url(file.name, mime_type)
        await self.store.put_bytes(signed.url, file.data, mime_type)

        content = ContentRef(source=signed.id, type=mime_type, name=file.name)
        try:
            stored = await self.store.create_object(
                file.name, content, properties or {}
            )
        except Exception:
            log.warning("orphaned_upload", upload_id=signed.id)
            raise

        log.info("upload_completed", object_id=stored.id, upload_id=signed.id)
        return stored

    async def upload_many(
        self, files: Iterable[FileUpload], properties: dict[str, Any] | None = None
    ) -> list[StoredObject]:
        """Upload files one after another; the first failure propagates."""
        return [await self.upload(file, properties) for file in files]
