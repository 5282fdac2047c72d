"""
Custom exception classes for unified error handling.

`message` is safe to show to the user, `detail` is internal and only logged.
"""

from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    UNSUPPORTED_FORMAT = "unsupported_format"
    EXTRACTION_FAILED = "extraction_failed"
    UPSTREAM_FAILURE = "upstream_failure"
    STORAGE_FAILURE = "storage_failure"
    REQUEST_FAILED = "request_failed"
    VALIDATION_FAILED = "validation_failed"
    PAYLOAD_TOO_LARGE = "payload_too_large"


# Kinds whose message can be shown as-is; everything else gets a generic message.
CLIENT_SAFE_KINDS = {
    ErrorKind.UNAUTHENTICATED,
    ErrorKind.NOT_FOUND,
    ErrorKind.UNSUPPORTED_FORMAT,
    ErrorKind.VALIDATION_FAILED,
    ErrorKind.PAYLOAD_TOO_LARGE,
}


class AppBaseError(Exception):
    """Base exception for all application errors."""
    kind: ErrorKind = ErrorKind.REQUEST_FAILED
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class UnauthenticatedError(AppBaseError):
    """Raised when there is no valid user session."""
    kind = ErrorKind.UNAUTHENTICATED
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message)


class NotFoundError(AppBaseError):
    """Raised when a referenced class or document does not exist for the user."""
    kind = ErrorKind.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: str):
        super().__init__(message=f"{entity} not found", detail=f"{entity} id={entity_id}")


class UnsupportedFormatError(AppBaseError):
    """Raised when the extractor does not handle a media type."""
    kind = ErrorKind.UNSUPPORTED_FORMAT
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE

    def __init__(self, media_type: str):
        self.media_type = media_type
        super().__init__(message=f"Unsupported file type: {media_type or 'unknown'}")


class ExtractionFailedError(AppBaseError):
    """Raised when a supported file cannot be parsed."""
    kind = ErrorKind.EXTRACTION_FAILED
    status_code = 422

    def __init__(self, message: str = "Failed to extract text from document", detail: str | None = None):
        super().__init__(message=message, detail=detail)


class UpstreamFailureError(AppBaseError):
    """Raised when the embeddings, search or completion service fails."""
    kind = ErrorKind.UPSTREAM_FAILURE
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str, original_error: str):
        super().__init__(message=f"{service} request failed", detail=original_error)


class StorageFailureError(AppBaseError):
    """Raised when a blob or record write/delete fails."""
    kind = ErrorKind.STORAGE_FAILURE

    def __init__(self, operation: str, original_error: str):
        super().__init__(message=f"Storage operation '{operation}' failed", detail=original_error)


class RequestFailedError(AppBaseError):
    """Generic failure of a chat request; upstream cause is kept in detail."""
    kind = ErrorKind.REQUEST_FAILED

    def __init__(self, original_error: str | None = None):
        super().__init__(message="Failed to process request", detail=original_error)


class ValidationFailedError(AppBaseError):
    """Raised when caller input is rejected before touching the backend."""
    kind = ErrorKind.VALIDATION_FAILED
    status_code = 422


class PayloadTooLargeError(AppBaseError):
    """Raised when an uploaded file exceeds MAX_UPLOAD_BYTES."""
    kind = ErrorKind.PAYLOAD_TOO_LARGE
    status_code = 413

    def __init__(self, filename: str, limit: int):
        super().__init__(
            message=f"File too large: {filename} (maximum {format_size(limit)})",
        )


def format_size(num_bytes: int) -> str:
    """Human-readable size: whole MB or KB when exact, else bytes."""
    for unit, size in (("MB", 1024 * 1024), ("KB", 1024)):
        if num_bytes >= size and num_bytes % size == 0:
            return f"{num_bytes // size}{unit}"
    return f"{num_bytes} bytes"
