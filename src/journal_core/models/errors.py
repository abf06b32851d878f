"""Custom exception classes for the photo journal sync layer."""

from typing import Any

from journal_core.utils.constants import (
    ERROR_CODE_DATA_STORE,
    ERROR_CODE_DOWNLOAD_FAILED,
    ERROR_CODE_NOT_FOUND_OR_FORBIDDEN,
    ERROR_CODE_OBJECT_STORE,
    ERROR_CODE_TRANSFORM_FAILED,
    ERROR_CODE_UNAUTHENTICATED,
    ERROR_CODE_VALIDATION_FAILED,
)


class JournalSyncError(Exception):
    """
    Base exception for all journal sync errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class ValidationError(JournalSyncError):
    """Raised when caller-supplied input is invalid."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class UnauthenticatedError(JournalSyncError):
    """Raised when a per-user operation is attempted without a session."""

    def __init__(
        self,
        *,
        message: str = "User not authenticated",
        error_code: str = ERROR_CODE_UNAUTHENTICATED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class NotFoundError(JournalSyncError):
    """Raised when a record does not exist or is not owned by the caller.

    Both cases raise the same error.
    """

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_NOT_FOUND_OR_FORBIDDEN,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class DataStoreError(JournalSyncError):
    """Raised when a remote data store operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_DATA_STORE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ObjectStoreError(JournalSyncError):
    """Raised when a remote object storage operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_OBJECT_STORE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class TransformApiError(JournalSyncError):
    """Raised when the image transformation API rejects or fails a request."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_TRANSFORM_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class DownloadError(JournalSyncError):
    """Raised when downloading a remote image fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_DOWNLOAD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )
