"""Data schemas for parsed invoices."""

from invoice_parser.schemas.internal import ParseContext, ParsedTransaction, ParseResult

__all__ = ["ParseContext", "ParsedTransaction", "ParseResult"]
