"""Custom exceptions and helpers for consistent error responses."""

from typing import Any, Dict


class ChurnGuardError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MissingFieldError(ChurnGuardError):
    """Raised when a row lacks a required field."""

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}", status_code=422)
        self.field_name = field_name


class EmptyUploadError(ChurnGuardError):
    """Raised when an upload carries no file."""

    def __init__(self, message: str = "No file provided"):
        super().__init__(message, status_code=400)


class UnsupportedFileError(ChurnGuardError):
    """Raised for uploads that are not CSV files."""

    def __init__(self, message: str = "Only CSV files are supported"):
        super().__init__(message, status_code=400)


class NoCustomersError(ChurnGuardError):
    """Raised when a re-analysis is requested for an empty account."""

    def __init__(self, message: str = "No customers to analyze"):
        super().__init__(message, status_code=400)


class CustomerNotFoundError(ChurnGuardError):
    """Raised when a customer id is unknown to the repository."""

    def __init__(self, customer_id: str):
        super().__init__(f"Customer not found: {customer_id}", status_code=404)
        self.customer_id = customer_id


class AnalysisResponseError(ChurnGuardError):
    """Raised when an analysis provider returns unusable output."""

    def __init__(self, message: str = "Malformed analysis response"):
        super().__init__(message, status_code=502)


def to_response(error: ChurnGuardError) -> Dict[str, Any]:
    """Convert a ChurnGuardError into a JSON-ready error payload."""
    return {
        "success": False,
        "error": str(error),
        "status": error.status_code,
    }
