"""Invoice parsing module for credit card statements.

This module turns CSV exports and PDF-extracted text into normalized
transactions using a hybrid architecture:
- GenericParser handles the best-effort path for any bank
- Bank-specific refinements override only what's different
- CSVParser handles delimited exports
"""

from invoice_parser.parsers.csv_parser import CSVParser
from invoice_parser.parsers.detector import BankDetector, SourceType
from invoice_parser.parsers.extractor import PDFExtractor
from invoice_parser.parsers.factory import (
    ParserFactory,
    create_parser_factory,
    get_parser_factory,
    parse_invoice,
)
from invoice_parser.parsers.generic import GenericParser
from invoice_parser.parsers.segmenter import LineSegmenter

__all__ = [
    "BankDetector",
    "CSVParser",
    "GenericParser",
    "LineSegmenter",
    "ParserFactory",
    "PDFExtractor",
    "SourceType",
    "create_parser_factory",
    "get_parser_factory",
    "parse_invoice",
]
