"""Data models for the upstream object store."""

import mimetypes
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MIME_TYPE = "application/octet-stream"


class ObjectKind(str, Enum):
    """Classification stored in ``properties.kind`` of every object."""

    SPEC = "spec"
    CATALOG_ITEM = "catalog_item"
    BOM = "bom"


class ContentRef(BaseModel):
    """Reference from an object record to its uploaded bytes."""

    model_config = ConfigDict(extra="allow")

    source: str
    type: str = DEFAULT_MIME_TYPE
    name: str | None = None


class StoredObject(BaseModel):
    """Metadata record describing an uploaded file."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    created_at: datetime | None = None
    content: ContentRef | None = None
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> ObjectKind | None:
        """Classification read from ``properties.kind``, if recognised."""
        value = self.properties.get("kind")
        try:
            return ObjectKind(value)
        except ValueError:
            return None


class UploadResult(BaseModel):
    """Signed upload URL and the upload id it is bound to."""

    model_config = ConfigDict(extra="allow")

    id: str
    url: str


class FileUpload(BaseModel):
    """A local file about to be uploaded."""

    name: str
    data: bytes
    mime_type: str | None = None

    @property
    def effective_mime_type(self) -> str:
        return self.mime_type or DEFAULT_MIME_TYPE

    @classmethod
    def from_path(cls, path: str | Path) -> "FileUpload":
        """Read a file from disk, guessing its MIME type from the extension."""
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type)
