"""Custom exception classes for invoice processing.

This module defines a hierarchy of exceptions used throughout the
invoice parsing pipeline. Each exception maps to a specific
error code defined in errors.py.

Only conditions that make it impossible to produce any result at all
(unsupported extension, unreadable bytes, failed text extraction) escape
the parser factory. Normalization errors are raised per token and are
caught by the bank strategies, which drop the offending record.
"""

from typing import Any

from invoice_parser.core.errors import get_error, get_user_message, is_retryable


class InvoiceProcessingError(Exception):
    """Base exception for all invoice processing errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "PARSE_001")
        details: Additional context about the error (for logging)
    """

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            error_code: Error code from errors.py
            details: Additional error context (not shown to users)
        """
        self.error_code = error_code
        self.details = details or {}
        super().__init__(error_code)

    @property
    def user_message(self) -> str:
        return get_user_message(self.error_code)

    @property
    def retry_allowed(self) -> bool:
        return is_retryable(self.error_code)

    def to_dict(self) -> dict[str, Any]:
        """Error payload for callers, built from the error catalog.

        Details are left out; they are for logs only.
        """
        error_info = get_error(self.error_code)
        return {
            "error_code": self.error_code,
            "message": error_info["message"],
            "user_message": error_info["user_message"],
            "suggestion": error_info["suggestion"],
            "retry_allowed": error_info["retry_allowed"],
        }


class UnsupportedFormatError(InvoiceProcessingError):
    """Raised when the file extension is not one we can route.

    Maps to error code PARSE_001.
    """

    def __init__(self, filename: str):
        super().__init__("PARSE_001", details={"filename": filename})
        self.filename = filename


class ExtractionError(InvoiceProcessingError):
    """Raised when no usable text can be obtained from the input.

    Common causes:
    - Bytes are not valid UTF-8 (PARSE_002)
    - PDF has no extractable text (PARSE_003)
    - Encrypted PDF (PARSE_004)
    - Input exceeds the configured size limit (PARSE_006)
    """

    pass


class NormalizationError(InvoiceProcessingError, ValueError):
    """Raised when a single token cannot be normalized.

    Strategies recover from this locally by skipping the record.
    """

    def __init__(self, error_code: str, value: str):
        super().__init__(error_code, details={"value": value})
        self.value = value

    def __str__(self) -> str:
        return f"{self.error_code}: {self.value!r}"


class InvalidDateError(NormalizationError):
    """Raised when a date token is malformed or out of range (NORM_001)."""

    def __init__(self, value: str):
        super().__init__("NORM_001", value)


class InvalidAmountError(NormalizationError):
    """Raised when an amount token has no decimal-marked digits (NORM_002)."""

    def __init__(self, value: str):
        super().__init__("NORM_002", value)
