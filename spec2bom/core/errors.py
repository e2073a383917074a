"""Error taxonomy shared by the client library, the CLI and the proxy."""


class Spec2BomError(Exception):
    """Base class for all errors raised by this package."""


class UpstreamError(Spec2BomError):
    """Raised when the object store or execution endpoint answers non-2xx."""

    def __init__(self, status_code: int, message: str = "", path: str = "") -> None:
        self.status_code = status_code
        self.message = message
        self.path = path
        detail = f"Upstream call failed: {status_code}"
        if path:
            detail += f" {path}"
        if message:
            detail += f" ({message})"
        super().__init__(detail)


class NotFoundError(UpstreamError):
    """Raised when an object id is absent upstream."""

    def __init__(self, message: str = "", path: str = "") -> None:
        super().__init__(404, message, path)


class UploadTransportError(Spec2BomError):
    """Raised when writing bytes to a signed storage URL fails."""


class UserCancelled(Spec2BomError):
    """Raised when the user declines a confirmation prompt.

    Action boundaries treat this as a no-op, not as a failure.
    """
