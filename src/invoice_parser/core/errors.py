"""Error codes and user-friendly messages.

This module defines the error catalog for invoice processing.
Each error has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the user
- retry_allowed: Whether the error is retryable
"""

# Error catalog for invoice processing
ERROR_CATALOG: dict[str, dict] = {
    "PARSE_001": {
        "code": "PARSE_001",
        "message": "Unsupported file extension",
        "user_message": "Formato não suportado. Use CSV ou PDF.",
        "suggestion": "Upload the invoice as a .csv, .txt or .pdf file.",
        "retry_allowed": False,
    },
    "PARSE_002": {
        "code": "PARSE_002",
        "message": "Input bytes could not be decoded as UTF-8 text",
        "user_message": "We couldn't read this file.",
        "suggestion": "Export the invoice again as UTF-8 and try once more.",
        "retry_allowed": True,
    },
    "PARSE_003": {
        "code": "PARSE_003",
        "message": "Text extraction produced no usable text",
        "user_message": "This PDF doesn't contain readable text.",
        "suggestion": "Download the invoice again from your bank; scanned images are not supported.",
        "retry_allowed": True,
    },
    "PARSE_004": {
        "code": "PARSE_004",
        "message": "PDF is encrypted",
        "user_message": "This invoice is password-protected.",
        "suggestion": "Remove the password from the PDF and try again.",
        "retry_allowed": True,
    },
    "PARSE_006": {
        "code": "PARSE_006",
        "message": "Input exceeds maximum size",
        "user_message": "The file is too large.",
        "suggestion": "Upload a single monthly invoice.",
        "retry_allowed": False,
    },
    "NORM_001": {
        "code": "NORM_001",
        "message": "Date token could not be normalized",
        "user_message": "A transaction date could not be read.",
        "suggestion": "The line was skipped; check the invoice for that entry.",
        "retry_allowed": False,
    },
    "NORM_002": {
        "code": "NORM_002",
        "message": "Amount token could not be normalized",
        "user_message": "A transaction amount could not be read.",
        "suggestion": "The line was skipped; check the invoice for that entry.",
        "retry_allowed": False,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details (a generic entry for unknown codes)
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "Erro ao processar fatura.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    """Get user-friendly message for an error code."""
    return get_error(error_code)["user_message"]


def get_suggestion(error_code: str) -> str:
    """Get actionable suggestion for an error code."""
    return get_error(error_code)["suggestion"]


def is_retryable(error_code: str) -> bool:
    """Check if an error is retryable."""
    return get_error(error_code)["retry_allowed"]
