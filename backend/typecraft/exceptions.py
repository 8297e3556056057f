"""Custom exception hierarchy for Typecraft.

Every failure a user can see is one of these. Services raise them, the
exception handler turns them into JSON (or a redirect for browsers).
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Submission errors
    EMPTY_TITLE = "EMPTY_TITLE"
    MISSING_CONTENT = "MISSING_CONTENT"
    CONFLICTING_CONTENT = "CONFLICTING_CONTENT"
    PERSISTENCE_FAILED = "PERSISTENCE_FAILED"

    # PDF extraction errors
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    EMPTY_RESULT = "EMPTY_RESULT"
    UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"

    # Lookup errors
    TEXT_NOT_FOUND = "TEXT_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CATEGORY = "INVALID_CATEGORY"
    CIRCULAR_CATEGORY = "CIRCULAR_CATEGORY"

    # Auth & rate limiting
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"

    # AI summary errors
    SUMMARY_UNAVAILABLE = "SUMMARY_UNAVAILABLE"
    SUMMARY_FAILED = "SUMMARY_FAILED"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class TypecraftException(Exception):
    """
    Base exception for all Typecraft errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class ValidationError(TypecraftException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class InvalidCategoryError(ValidationError):
    """A category id was malformed or names a folder the user does not own."""

    def __init__(self, category_id: Any):
        super().__init__("Invalid folder selected.", field="category_id")
        self.error_code = ErrorCode.INVALID_CATEGORY
        self.details["category_id"] = str(category_id)


class CircularCategoryError(ValidationError):
    """Moving a folder would make it its own ancestor."""

    def __init__(self, category_id: int, parent_id: int):
        super().__init__("A folder cannot be moved inside itself.", field="parent_id")
        self.error_code = ErrorCode.CIRCULAR_CATEGORY
        self.details.update({"category_id": category_id, "parent_id": parent_id})


# ---------------------------------------------------------------------------
# PDF extraction
# ---------------------------------------------------------------------------

class ExtractionError(TypecraftException):
    """Base class for failures while turning an uploaded PDF into text."""

    def __init__(self, message: str, error_code: ErrorCode, status_code: int = 422,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, status_code=status_code, details=details)


class UnsupportedTypeError(ExtractionError):
    """The upload is not a PDF."""

    def __init__(self, mime_type: Optional[str] = None):
        super().__init__(
            "Only PDF files are allowed!",
            ErrorCode.UNSUPPORTED_TYPE,
            status_code=415,
            details={"mime_type": mime_type} if mime_type else None,
        )


class ToolNotFoundError(ExtractionError):
    """The pdftotext executable is not installed or not on PATH."""

    def __init__(self, command: str = "pdftotext"):
        super().__init__(
            f"Error processing PDF: {command} command not found. "
            "Please ensure poppler-utils is installed on the server.",
            ErrorCode.TOOL_NOT_FOUND,
            status_code=503,
            details={"command": command},
        )


class ExtractionFailedError(ExtractionError):
    """pdftotext ran but failed (non-zero exit, timeout, OS error)."""

    def __init__(self, reason: str):
        super().__init__(
            f"Error processing PDF with pdftotext: {reason}",
            ErrorCode.EXTRACTION_FAILED,
        )


class EmptyResultError(ExtractionError):
    """pdftotext produced no text, typically a scanned or image-only PDF."""

    def __init__(self):
        super().__init__(
            "Could not extract text from the PDF. "
            "The file might be image-based or empty.",
            ErrorCode.EMPTY_RESULT,
        )


class UploadTooLargeError(ExtractionError):
    """The uploaded file exceeds the configured size cap."""

    def __init__(self, max_mb: int):
        super().__init__(
            f"The uploaded file is too large (maximum {max_mb} MB).",
            ErrorCode.UPLOAD_TOO_LARGE,
            status_code=413,
            details={"max_mb": max_mb},
        )


# ---------------------------------------------------------------------------
# Text submission
# ---------------------------------------------------------------------------

class SubmissionError(TypecraftException):
    """Base class for every way a text submission can fail.

    Extraction failures are re-raised as a plain ``SubmissionError`` that
    keeps the extractor's message and error code (see ``from_extraction``).
    """

    def __init__(self, message: str, error_code: ErrorCode, status_code: int = 400,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, status_code=status_code, details=details)

    @classmethod
    def from_extraction(cls, exc: ExtractionError) -> "SubmissionError":
        return cls(exc.message, exc.error_code, status_code=exc.status_code, details=exc.details)


class EmptyTitleError(SubmissionError):
    def __init__(self):
        super().__init__("Title cannot be empty.", ErrorCode.EMPTY_TITLE)


class MissingContentError(SubmissionError):
    def __init__(self):
        super().__init__(
            "Please provide text content or upload a PDF file.",
            ErrorCode.MISSING_CONTENT,
        )


class ConflictingContentError(SubmissionError):
    def __init__(self):
        super().__init__(
            "Please provide text content OR upload a PDF, not both.",
            ErrorCode.CONFLICTING_CONTENT,
        )


class PersistenceFailedError(SubmissionError):
    """The text could not be written. The cause is logged, never shown."""

    def __init__(self):
        super().__init__(
            "Failed to save text to the database. Please try again.",
            ErrorCode.PERSISTENCE_FAILED,
            status_code=500,
        )


# ---------------------------------------------------------------------------
# Lookup / authorization
# ---------------------------------------------------------------------------

class AuthenticationError(TypecraftException):
    """Request lacks valid authentication credentials."""

    def __init__(self, message: str = "Authentication required. Please log in."):
        super().__init__(
            message,
            ErrorCode.UNAUTHORIZED,
            status_code=401,
        )


class ForbiddenError(TypecraftException):
    """Authenticated user does not own the requested resource."""

    def __init__(self, message: str = "Permission denied. You do not own this text."):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class TextNotFoundError(TypecraftException):
    """Text not found in database."""

    def __init__(self, text_id: Any):
        super().__init__(
            "Text not found.",
            ErrorCode.TEXT_NOT_FOUND,
            status_code=404,
            details={"text_id": str(text_id)}
        )


class CategoryNotFoundError(TypecraftException):
    """Folder not found, or owned by someone else."""

    def __init__(self, category_id: Any):
        super().__init__(
            "Folder not found.",
            ErrorCode.CATEGORY_NOT_FOUND,
            status_code=404,
            details={"category_id": str(category_id)}
        )


# ---------------------------------------------------------------------------
# AI summaries
# ---------------------------------------------------------------------------

class SummaryError(TypecraftException):
    """Summary generation or storage failed."""

    def __init__(self, message: str, status_code: int = 500,
                 error_code: ErrorCode = ErrorCode.SUMMARY_FAILED):
        super().__init__(message, error_code, status_code=status_code)


class DatabaseError(TypecraftException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = type(original_error).__name__

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
