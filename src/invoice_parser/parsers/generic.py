"""Generic credit card invoice parser.

This module provides the GenericParser class which handles common
parsing logic for PDF-extracted invoice text across all banks.
Bank-specific refinements inherit from this and override only
what's different.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from invoice_parser.config import Settings, get_settings
from invoice_parser.core.banks import Bank
from invoice_parser.core.exceptions import InvalidAmountError
from invoice_parser.parsers.normalizers import (
    BRL,
    DOT_DECIMAL,
    PT_BR_DATES,
    AmountFormat,
    DateFormat,
    clean_description,
    date_has_year,
    extract_installment,
    parse_amount,
    parse_date,
)
from invoice_parser.parsers.segmenter import LineSegmenter
from invoice_parser.schemas.internal import ParseContext, ParsedTransaction

logger = logging.getLogger(__name__)

DATE_TOKEN = (
    r"\d{1,2}/\d{1,2}(?:/\d{4}|/\d{2})?"
    r"|\d{1,2}\s+(?:de\s+)?[A-Za-zçÇ]{3}\.?(?:\s+\d{4})?"
)
AMOUNT_TOKEN = r"-?(?:R\$\s*)?-?(?:\d{1,3}(?:\.\d{3})+|\d+),\d{2}-?"
# Dot-decimal amounts ("123.45", "1,234.56") seen on unfamiliar layouts
DOT_AMOUNT_TOKEN = r"-?(?:R\$\s*)?-?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}-?"
ANY_AMOUNT_TOKEN = rf"{AMOUNT_TOKEN}|{DOT_AMOUNT_TOKEN}"

# Accepts 29/02 while only the month of a year-less token is needed
LEAP_YEAR = 2000


@dataclass
class StatementState:
    """Running state while walking one invoice's logical lines."""

    year: int
    due_date: date | None = None
    year_from_header: bool = False
    cardholder: str = ""
    card: str = ""
    skipping: bool = False
    # True once the current section has produced a transaction
    section_has_transactions: bool = False


class GenericParser:
    """Best-effort parser for invoices from unrecognized banks.

    Each logical line is scanned for "date-like token ... amount-like
    token at end of line"; the description is whatever sits between.
    There is no cardholder or card awareness, and lines that do not fit
    are dropped, so unfamiliar layouts are expected to under-extract.

    Subclasses can override specific hooks to handle bank-specific quirks:
        - _segmenter(): Anchor/boundary/complete rules for reassembly
        - _handle_section(): Cardholder / card section headers
        - _parse_line(): Transaction line layout
        - AMOUNT_FORMAT / DATE_FORMAT: Locale and credit sign rules
        - IGNORED_DESCRIPTIONS: Summary lines that are not transactions

    Example:
        >>> parser = GenericParser()
        >>> transactions = parser.parse(text, ParseContext(year=2024))
    """

    bank: Bank = Bank.GENERIC

    AMOUNT_FORMAT: AmountFormat = BRL
    # Tried in order when AMOUNT_FORMAT rejects a token
    FALLBACK_AMOUNT_FORMATS: tuple[AmountFormat, ...] = (DOT_DECIMAL,)
    DATE_FORMAT: DateFormat = PT_BR_DATES

    LINE_PATTERN = re.compile(
        rf"(?P<date>{DATE_TOKEN})\s+(?P<description>.+?)\s+(?P<amount>{ANY_AMOUNT_TOKEN})$"
    )
    ANCHOR_PATTERN = re.compile(rf"^(?:{DATE_TOKEN})(?:\s|$)")
    COMPLETE_PATTERN = re.compile(rf"(?:^|\s)(?:{ANY_AMOUNT_TOKEN})$")

    IGNORED_DESCRIPTIONS = [
        re.compile(r"^(?:Total|Saldo|Pagamento|Limite)", re.IGNORECASE),
    ]

    # Where the invoice header states its due/issue date
    DUE_DATE_PATTERNS = [
        re.compile(r"Vencimento\s*:?\s*(\d{2}/\d{2}/\d{4})", re.IGNORECASE),
        re.compile(r"Data\s+de\s+vencimento\s*:?\s*(\d{2}/\d{2}/\d{4})", re.IGNORECASE),
        re.compile(r"Emiss[aã]o\s*:?\s*(\d{2}/\d{2}/\d{4})", re.IGNORECASE),
    ]

    def __init__(self, settings: Settings | None = None):
        """Initialize the parser.

        Args:
            settings: Settings instance (default: cached global settings)
        """
        self.settings = settings or get_settings()

    def parse(self, text: str, context: ParseContext | None = None) -> list[ParsedTransaction]:
        """Parse invoice text into transactions.

        Malformed records are skipped; this method does not raise on
        unstructured or empty text.

        Args:
            text: Plain text of the invoice, line breaks preserved
            context: Optional year / cardholder / card hints

        Returns:
            Transactions in document order
        """
        context = context or ParseContext()
        state = self._initial_state(text or "", context)
        transactions: list[ParsedTransaction] = []

        for line in self._segmenter().segment(text or ""):
            if self._handle_section(line, state):
                continue
            if state.skipping:
                continue
            try:
                transaction = self._parse_line(line, state)
            except ValueError as e:
                logger.debug("Skipping malformed record: %s", e)
                continue
            if transaction is not None:
                transactions.append(transaction)
                state.section_has_transactions = True

        logger.debug(
            "%s extracted %d transactions", type(self).__name__, len(transactions)
        )
        return transactions

    def _segmenter(self) -> LineSegmenter:
        """Reassemble records that start with a date and end with an amount."""
        return LineSegmenter(
            is_anchor=lambda line: bool(self.ANCHOR_PATTERN.match(line)),
            is_complete=lambda line: bool(self.COMPLETE_PATTERN.search(line)),
        )

    def _initial_state(self, text: str, context: ParseContext) -> StatementState:
        """Resolve the statement year and the default holder/card."""
        due_date = self._find_due_date(text)
        if context.year is not None:
            year, from_header = context.year, False
        elif due_date is not None:
            year, from_header = due_date.year, True
        else:
            year, from_header = self.settings.resolve_fallback_year(), False
            logger.debug("No statement period found; using fallback year %d", year)

        return StatementState(
            year=year,
            due_date=due_date,
            year_from_header=from_header,
            cardholder=context.cardholder,
            card=context.card,
        )

    def _find_due_date(self, text: str) -> date | None:
        """Extract the invoice due date from the header, if present."""
        for pattern in self.DUE_DATE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            try:
                return parse_date(match.group(1), fmt=self.DATE_FORMAT)
            except ValueError:
                continue
        return None

    def _handle_section(self, line: str, state: StatementState) -> bool:
        """Consume section headers. The generic layout has none."""
        return False

    def _parse_line(self, line: str, state: StatementState) -> ParsedTransaction | None:
        """Parse one logical line, or return None if it is not a transaction.

        Raises:
            ValueError: If the line looks like a transaction but a token
                cannot be normalized
        """
        match = self.LINE_PATTERN.search(line)
        if not match:
            return None

        description = clean_description(match.group("description"))
        if self._is_ignored(description):
            return None

        return self._build_transaction(
            self._parse_date(match.group("date"), state),
            description,
            self._parse_amount(match.group("amount")),
            state,
        )

    def _parse_amount(
        self, token: str, formats: tuple[AmountFormat, ...] | None = None
    ) -> Decimal:
        """Try each accepted notation in turn.

        Defaults to AMOUNT_FORMAT followed by FALLBACK_AMOUNT_FORMATS.

        Raises:
            InvalidAmountError: If no notation accepts the token
        """
        if formats is None:
            formats = (self.AMOUNT_FORMAT, *self.FALLBACK_AMOUNT_FORMATS)
        error = InvalidAmountError(token)
        for fmt in formats:
            try:
                return parse_amount(token, fmt)
            except InvalidAmountError as e:
                error = e
        raise error

    def _parse_date(self, token: str, state: StatementState) -> date:
        """Parse a transaction date, inferring the year when absent.

        When the year comes from the invoice header, a transaction month
        later than the due month belongs to the previous year (a January
        invoice listing December purchases). The year is settled before
        the day is validated, so 29/02 is checked against the right year.
        """
        year = state.year
        if state.year_from_header and state.due_date is not None and not date_has_year(token):
            month = parse_date(token, year=LEAP_YEAR, fmt=self.DATE_FORMAT).month
            if month > state.due_date.month:
                year -= 1
        return parse_date(token, year=year, fmt=self.DATE_FORMAT)

    def _is_ignored(self, description: str) -> bool:
        return any(pattern.search(description) for pattern in self.IGNORED_DESCRIPTIONS)

    def _build_transaction(
        self,
        transaction_date: date,
        description: str,
        amount: Decimal,
        state: StatementState,
        installment: str | None = None,
    ) -> ParsedTransaction:
        """Create a transaction, splitting off an installment marker."""
        if installment is None:
            description, installment = extract_installment(description)

        return ParsedTransaction(
            date=transaction_date,
            description=description,
            amount=amount,
            cardholder=state.cardholder,
            installment=installment,
            card=state.card,
        )
