"""Credit card invoice parsing engine."""

from invoice_parser.core.banks import Bank
from invoice_parser.core.exceptions import (
    ExtractionError,
    InvalidAmountError,
    InvalidDateError,
    InvoiceProcessingError,
    UnsupportedFormatError,
)
from invoice_parser.core.logging import setup_logging
from invoice_parser.parsers.factory import (
    ParserFactory,
    create_parser_factory,
    get_parser_factory,
    parse_invoice,
)
from invoice_parser.schemas.internal import ParseContext, ParsedTransaction, ParseResult

__version__ = "0.1.0"

__all__ = [
    "Bank",
    "ExtractionError",
    "InvalidAmountError",
    "InvalidDateError",
    "InvoiceProcessingError",
    "ParseContext",
    "ParsedTransaction",
    "ParseResult",
    "ParserFactory",
    "UnsupportedFormatError",
    "create_parser_factory",
    "get_parser_factory",
    "parse_invoice",
    "setup_logging",
]
