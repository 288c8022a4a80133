"""Parser factory for routing invoices to the appropriate strategy.

This module orchestrates the parsing workflow:
1. Route the file by extension (CSV path or PDF path)
2. Resolve the content to text (decode, or extract from a PDF binary)
3. Detect the bank using BankDetector
4. Run the registered strategy (GenericParser when none is registered)
5. Assemble the ParseResult with totals
"""

import logging

from invoice_parser.config import Settings, get_settings
from invoice_parser.core.banks import Bank
from invoice_parser.core.exceptions import ExtractionError
from invoice_parser.parsers.csv_parser import CSVParser
from invoice_parser.parsers.detector import BankDetector, SourceType
from invoice_parser.parsers.extractor import PDFExtractor, decode_text
from invoice_parser.parsers.generic import GenericParser
from invoice_parser.parsers.refinements import InterParser, ItauParser
from invoice_parser.schemas.internal import ParseContext, ParseResult

logger = logging.getLogger(__name__)


class ParserFactory:
    """Factory for parsing credit card invoices.

    The factory handles the complete parsing workflow and keeps no state
    between calls, so one instance can serve concurrent callers:
    - Routes by file extension and resolves the content to text
    - Detects which bank issued the invoice
    - Runs the matching strategy (with graceful fallback)
    - Returns a ParseResult whose total is the exact sum of amounts

    Example:
        >>> factory = get_parser_factory()
        >>> result = factory.run("fatura.csv", content)
        >>> print(result.bank, result.count, result.total)
    """

    def __init__(
        self,
        extractor: PDFExtractor | None = None,
        detector: BankDetector | None = None,
        settings: Settings | None = None,
    ):
        """Initialize the parser factory.

        Args:
            extractor: PDF text extractor (default: new PDFExtractor)
            detector: Bank detector (default: new BankDetector)
            settings: Settings instance (default: cached global settings)
        """
        self.extractor = extractor or PDFExtractor()
        self.detector = detector or BankDetector()
        self.settings = settings or get_settings()

        # Registry of bank strategies
        # Format: {Bank: ParserClass}
        self._strategies: dict[Bank, type[GenericParser]] = {}

    def run(
        self,
        filename: str,
        content: bytes | str,
        context: ParseContext | None = None,
    ) -> ParseResult:
        """Parse an invoice into a ParseResult.

        Args:
            filename: Original file name; its extension selects the route
            content: Raw bytes, or text already extracted upstream
            context: Optional year / cardholder / card hints

        Returns:
            ParseResult, possibly with zero transactions

        Raises:
            UnsupportedFormatError: If the extension is not .csv, .txt or .pdf
            ExtractionError: If no usable text can be obtained
        """
        source = self.detector.detect_source(filename)
        self._check_size(content)
        text = self._resolve_text(source, content)

        if source is SourceType.CSV:
            header = next((line for line in text.splitlines() if line.strip()), "")
            bank = self.detector.detect_csv(header)
        else:
            bank = self.detector.detect(text)
            if bank is Bank.GENERIC:
                logger.info("No bank markers matched; using GenericParser")

        parser_class = self._get_parser_class(bank, source)
        parser = parser_class(settings=self.settings)
        logger.info("Detected bank %s, using %s", bank.value, parser_class.__name__)

        transactions = parser.parse(text, context)
        result = ParseResult.from_transactions(bank, transactions)

        if result.count == 0:
            logger.warning("No transactions found in %s invoice", bank.value)
        else:
            logger.info("Parsed %d transactions, total %s", result.count, result.total)

        return result

    def register_strategy(self, bank: Bank, parser_class: type[GenericParser]) -> None:
        """Register the strategy used for a bank.

        Example:
            >>> factory.register_strategy(Bank.ITAU, ItauParser)

        Args:
            bank: Bank variant
            parser_class: Parser class (must inherit from GenericParser)
        """
        if not (isinstance(parser_class, type) and issubclass(parser_class, GenericParser)):
            raise ValueError(
                f"Parser class must inherit from GenericParser, got {parser_class}"
            )

        self._strategies[bank] = parser_class

    def unregister_strategy(self, bank: Bank) -> None:
        """Remove a bank's strategy; the bank then falls back to the default."""
        self._strategies.pop(bank, None)

    def get_registered_banks(self) -> list[Bank]:
        """Get banks with a registered strategy."""
        return list(self._strategies.keys())

    def _get_parser_class(self, bank: Bank, source: SourceType) -> type[GenericParser]:
        """Get parser class for a bank.

        Unregistered CSV labels, and anything on the CSV route, fall back
        to CSVParser; everything else to GenericParser.
        """
        if bank in self._strategies:
            return self._strategies[bank]

        if bank.is_csv or source is SourceType.CSV:
            return CSVParser
        return GenericParser

    def _check_size(self, content: bytes | str) -> None:
        size = len(content)
        if size > self.settings.max_input_bytes:
            raise ExtractionError(
                "PARSE_006",
                details={"size": size, "limit": self.settings.max_input_bytes},
            )

    def _resolve_text(self, source: SourceType, content: bytes | str) -> str:
        """Turn the uploaded content into text for the strategies.

        Raises:
            ExtractionError: If the bytes cannot be decoded, or a PDF
                yields no usable text
        """
        if isinstance(content, str):
            text = content.lstrip("\ufeff")
        elif source is SourceType.PDF and self.extractor.is_pdf(content):
            text = self.extractor.extract_text(content)
        else:
            text = decode_text(content, self.settings.text_encoding)

        if source is SourceType.PDF and not text.strip():
            raise ExtractionError("PARSE_003", details={"reason": "no text"})

        return text


# Singleton factory instance for global use
_factory_instance: ParserFactory | None = None


def create_parser_factory(**kwargs) -> ParserFactory:
    """Create a ParserFactory with every bank strategy registered.

    Args:
        **kwargs: Passed to ParserFactory (extractor, detector, settings)
    """
    factory = ParserFactory(**kwargs)
    factory.register_strategy(Bank.ITAU, ItauParser)
    factory.register_strategy(Bank.INTER, InterParser)
    factory.register_strategy(Bank.XP, CSVParser)
    factory.register_strategy(Bank.NUBANK, CSVParser)
    factory.register_strategy(Bank.CSV, CSVParser)
    return factory


def get_parser_factory() -> ParserFactory:
    """Get or create the global ParserFactory instance.

    Returns:
        Global ParserFactory singleton
    """
    global _factory_instance
    if _factory_instance is None:
        _factory_instance = create_parser_factory()
    return _factory_instance


def parse_invoice(
    filename: str,
    content: bytes | str,
    context: ParseContext | None = None,
) -> ParseResult:
    """Convenience function to parse an invoice using the global factory.

    Args:
        filename: Original file name
        content: Raw bytes or already-extracted text
        context: Optional year / cardholder / card hints

    Returns:
        ParseResult with extracted transactions and totals
    """
    factory = get_parser_factory()
    return factory.run(filename, content, context=context)
