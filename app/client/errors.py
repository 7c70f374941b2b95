"""Field client exception hierarchy."""
from typing import Optional


class ClientError(Exception):
    """Base class for field client errors."""


class NotAuthenticatedError(ClientError):
    """An operation needs a logged-in session."""


class ApiError(ClientError):
    """The server answered with a non-success status that is not auth related."""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}" if detail else f"HTTP {status_code}")


class SyncError(ClientError):
    """A sync round-trip did not complete. The pending queue is unchanged."""


class SyncTransportError(SyncError):
    """No usable answer from the server: connection error, timeout or 5xx. Retryable."""


class SyncAuthError(SyncError):
    """The server refused the session (401/403). Retry only after logging in again."""


class StorageError(ClientError):
    """Local storage could not satisfy a request."""


class DuplicateLocalIdError(StorageError):
    """A different response is already stored under the same local id."""

    def __init__(self, local_id: str):
        self.local_id = local_id
        super().__init__(f"Local response id already in use: {local_id}")


class InvalidSyncTransition(ClientError):
    """Sync status may only move from pending to synced or failed."""

    def __init__(self, local_id: str, current, requested):
        self.local_id = local_id
        self.current = current
        self.requested = requested
        super().__init__(f"Response {local_id} cannot move from {current} to {requested}")
