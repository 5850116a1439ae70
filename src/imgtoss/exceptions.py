"""Error taxonomy shared by the signing engine, adapters and services."""

from __future__ import annotations

__all__ = [
    "AppError",
    "SigningError",
    "ConfigurationError",
    "UnsupportedProvider",
    "StorageOperationError",
    "UploadFailed",
    "DeleteFailed",
    "ListFailed",
    "ProbeFailed",
]


class AppError(Exception):
    """Base class for storage client errors."""


class SigningError(AppError):
    """Raised when a request cannot be signed with the supplied key material."""


class ConfigurationError(AppError):
    """Raised when a storage configuration cannot be used as given."""


class UnsupportedProvider(ConfigurationError):
    """Raised when no adapter exists for a provider tag."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported storage provider '{provider}'")
        self.provider = provider


class StorageOperationError(AppError):
    """Network or server-reported failure of a single storage operation.

    ``status`` is the HTTP status code when the server answered, ``None``
    when the request never completed (transport error, expired deadline).
    """

    operation = "storage operation"

    def __init__(self, status: int | None, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(self._format())

    def _format(self) -> str:
        if self.status is None:
            return f"{self.operation.capitalize()} failed: {self.body or 'no response'}"
        detail = self.body.strip()
        if detail:
            return f"{self.operation.capitalize()} failed (status={self.status}): {detail}"
        return f"{self.operation.capitalize()} failed (status={self.status})"


class UploadFailed(StorageOperationError):
    """Raised when an object could not be uploaded."""

    operation = "upload"


class DeleteFailed(StorageOperationError):
    """Raised when an object could not be deleted."""

    operation = "delete"


class ListFailed(StorageOperationError):
    """Raised when listing a bucket prefix failed."""

    operation = "list"


class ProbeFailed(StorageOperationError):
    """Raised when a connectivity probe did not reach a usable bucket."""

    operation = "connection test"

    def __init__(
        self,
        status: int | None,
        body: str = "",
        *,
        bucket_exists: bool | None = None,
        available_buckets: list[str] | None = None,
    ) -> None:
        super().__init__(status, body)
        self.bucket_exists = bucket_exists
        self.available_buckets = available_buckets
