"""Custom exception hierarchy."""

from typing import Dict, Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error


class APIClientError(AppError):
    """Raised when a call to the documents API fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        original_error: Exception = None,
    ):
        super().__init__(message, original_error=original_error)
        self.status_code = status_code


class APITimeoutError(APIClientError):
    """Raised when a call to the documents API times out."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class MetadataValidationError(ValidationError):
    """Raised when submitted metadata breaks a relationship rule.

    ``errors`` maps request field names to human-readable messages.
    """

    def __init__(self, errors: Dict[str, str], message: str = "Metadata validation failed"):
        super().__init__(message)
        self.errors = errors


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentNotFoundError(AppError):
    """Raised when a document is not found."""
    pass


class DocumentLockedError(AppError):
    """Raised when a processed or trashed document is modified."""
    pass
