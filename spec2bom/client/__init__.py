"""Client for the upstream object store: uploads and job launches."""

from spec2bom.client.launcher import JobLauncher
from spec2bom.client.models import (
    ContentRef,
    FileUpload,
    ObjectKind,
    StoredObject,
    UploadResult,
)
from spec2bom.client.store import ObjectStoreClient
from spec2bom.client.uploader import Uploader

__all__ = [
    "ContentRef",
    "FileUpload",
    "JobLauncher",
    "ObjectKind",
    "ObjectStoreClient",
    "StoredObject",
    "UploadResult",
    "Uploader",
]
