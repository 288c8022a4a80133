"""
Shared logging utilities.

Invoices carry card numbers, so every handler installed by setup_logging()
runs records through PIIFilter, which masks card numbers, e-mails and CPFs.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

from invoice_parser.config import get_settings

# Configure logging format
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# PII patterns to filter from logs
PII_PATTERNS = [
    # Card numbers, plain or masked (5364****3145, 4111 1111 1111 1111)
    (re.compile(r"\b\d{4}[\s-]?[\d*Xx]{4}[\s-]?[\d*Xx]{4}[\s-]?\d{3,7}\b"), "[CARD]"),
    (re.compile(r"\b\d{4}\*{4,8}\d{4}\b"), "[CARD]"),
    # Email addresses
    (re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"), "[EMAIL]"),
    # CPF (000.000.000-00)
    (re.compile(r"\b\d{3}\.\d{3}\.\d{3}-\d{2}\b"), "[CPF]"),
]


def filter_pii(text: str) -> str:
    """Remove PII from text using regex patterns.

    Args:
        text: Input text that may contain PII

    Returns:
        Text with PII replaced by placeholders
    """
    if not text:
        return text

    filtered = text
    for pattern, replacement in PII_PATTERNS:
        filtered = pattern.sub(replacement, filtered)

    return filtered


class PIIFilter(logging.Filter):
    """Logging filter that masks PII in the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = filter_pii(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure root logger.

    Args:
        level: Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR'),
            default: Settings.log_level
        log_file: Optional log file path, default: Settings.log_file
    """
    settings = get_settings()
    level = level or settings.log_level
    log_file = log_file or settings.log_file

    log_level = getattr(logging, level.upper(), logging.INFO)
    pii_filter = PIIFilter()

    # Calling again replaces the handlers installed by an earlier call
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if any(isinstance(f, PIIFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
            handler.close()

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    console_handler.addFilter(pii_filter)

    # Root logger
    root_logger.setLevel(log_level)
    root_logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        file_handler.addFilter(pii_filter)
        root_logger.addHandler(file_handler)
