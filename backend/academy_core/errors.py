"""Error taxonomy for the record synchronisation core."""

from __future__ import annotations


class SyncError(Exception):
    """Base class for every error raised by :mod:`academy_core`."""


class RemoteUnavailable(SyncError):
    """Remote configuration is absent or malformed (local-only mode)."""


class RemoteRequestFailed(SyncError):
    """A live call to the remote record service failed."""

    def __init__(self, diagnostic: str, status_code: int | None = None) -> None:
        self.diagnostic = diagnostic.strip() or "Remote request failed"
        self.status_code = status_code
        super().__init__(self.diagnostic)


class AssetUploadFailed(RemoteRequestFailed):
    """Uploading an image to remote asset storage failed."""


class StorageMisconfigured(AssetUploadFailed):
    """The asset bucket is missing; it has to be created before uploads work."""


class LocalCacheCorrupt(SyncError):
    """A snapshot in the durable local cache could not be decoded."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt local cache {path}: {reason}")
