"""Error codes and the application error type."""

from enum import StrEnum

from photo_report.config import MAX_FILE_COUNT, MAX_FILE_SIZE


class ErrorCode(StrEnum):
    """Kinds of failure reported to the caller."""

    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"
    TOO_MANY_FILES = "TOO_MANY_FILES"
    COMPRESSION_FAILED = "COMPRESSION_FAILED"
    INVALID_IMAGE_DATA = "INVALID_IMAGE_DATA"
    MEMORY_LIMIT = "MEMORY_LIMIT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_FILE_TYPE: (
        "Unsupported file type. Only JPEG, PNG, GIF and WebP images are accepted."
    ),
    ErrorCode.FILE_TOO_LARGE: (
        f"File is too large (limit {MAX_FILE_SIZE // 1024 // 1024}MB)."
    ),
    ErrorCode.TOO_MANY_FILES: f"Too many files (limit {MAX_FILE_COUNT} photos).",
    ErrorCode.COMPRESSION_FAILED: "Image compression failed. Try another image.",
    ErrorCode.INVALID_IMAGE_DATA: "Image data is invalid. The file may be corrupt.",
    ErrorCode.MEMORY_LIMIT: "Out of memory. Use fewer or smaller images.",
    ErrorCode.NETWORK_ERROR: "A network error occurred.",
    ErrorCode.PERMISSION_DENIED: "File access was denied.",
    ErrorCode.UNKNOWN_ERROR: "An unexpected error occurred.",
}


class PhotoAppError(Exception):
    """Application error carrying a code and structured details."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


def error_message(code: str) -> str:
    """Return the user-facing message for an error code."""
    try:
        return _MESSAGES[ErrorCode(code)]
    except ValueError:
        return _MESSAGES[ErrorCode.UNKNOWN_ERROR]


def classify_error(exc: BaseException, context: str = "") -> PhotoAppError:
    """Convert an arbitrary exception into a PhotoAppError."""
    if isinstance(exc, PhotoAppError):
        return exc
    if isinstance(exc, PermissionError):
        code = ErrorCode.PERMISSION_DENIED
    elif isinstance(exc, MemoryError):
        code = ErrorCode.MEMORY_LIMIT
    elif isinstance(exc, ConnectionError | TimeoutError):
        code = ErrorCode.NETWORK_ERROR
    else:
        code = ErrorCode.UNKNOWN_ERROR
    message = error_message(code)
    if context and code is ErrorCode.UNKNOWN_ERROR:
        message = f"An error occurred during {context}."
    return PhotoAppError(
        message, code, {"original_error": repr(exc), "context": context}
    )
