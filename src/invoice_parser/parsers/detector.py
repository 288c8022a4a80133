"""Bank and source-format detection.

This module identifies which bank issued a credit card invoice from the
file name and the extracted text.
"""

import re
from enum import Enum
from pathlib import PurePath
from typing import Callable, Pattern

from invoice_parser.core.banks import Bank
from invoice_parser.core.exceptions import UnsupportedFormatError
from invoice_parser.parsers.normalizers import strip_accents

TextPredicate = Callable[[str], bool]


class SourceType(str, Enum):
    """How the input content must be turned into text."""

    CSV = "csv"
    PDF = "pdf"


EXTENSIONS: dict[str, SourceType] = {
    ".csv": SourceType.CSV,
    ".txt": SourceType.CSV,
    ".pdf": SourceType.PDF,
}


def _always(text: str) -> bool:
    return True


def _matches_any(patterns: list[Pattern[str]]) -> TextPredicate:
    def predicate(text: str) -> bool:
        return any(pattern.search(text) for pattern in patterns)

    return predicate


class BankDetector:
    """Detects the issuing bank from invoice text.

    Detection is an ordered decision table of (predicate, bank) pairs.
    The first matching predicate wins; there is no scoring, so the order
    of the table is the tie-break policy. Bank-specific entries come
    first and GENERIC is the unconditional last entry, which makes
    detect() total.

    Supported banks:
        - ITAU: Banco Itaú (PDF)
        - INTER: Banco Inter (PDF)
        - XP, NUBANK: CSV exports, recognized by header shape

    Example:
        >>> detector = BankDetector()
        >>> detector.detect("Banco Itaú\\nFatura ...")
        <Bank.ITAU: 'ITAU'>
    """

    # Bank detection patterns, in priority order.
    # Itaú markers are prefixes so "ITAUCARD" / "Itaucard" match.
    BANK_PATTERNS: list[tuple[Bank, list[str]]] = [
        (Bank.ITAU, [r"Banco\s+Ita[uú]", r"\bIta[uú]", r"\bITAU"]),
        (Bank.INTER, [r"Banco\s+Inter\b", r"\bbancointer\b", r"Super\s+App"]),
    ]

    def __init__(self):
        """Initialize the detector with its compiled decision table."""
        self._rules: list[tuple[TextPredicate, Bank]] = [
            (
                _matches_any([re.compile(p, re.IGNORECASE) for p in patterns]),
                bank,
            )
            for bank, patterns in self.BANK_PATTERNS
        ]
        self._rules.append((_always, Bank.GENERIC))

    def detect(self, text: str | None) -> Bank:
        """Detect the bank from PDF-extracted text.

        Args:
            text: Full text of the invoice

        Returns:
            First bank whose markers match, GENERIC when none does
        """
        if not text:
            return Bank.GENERIC

        for predicate, bank in self._rules:
            if predicate(text):
                return bank

        return Bank.GENERIC

    def detect_csv(self, header: str) -> Bank:
        """Detect the bank label of a CSV export from its header row.

        Args:
            header: First line of the CSV file

        Returns:
            XP or NUBANK for known header shapes, CSV otherwise
        """
        normalized = strip_accents(header.lower())
        if "estabelecimento" in normalized and ";" in normalized:
            return Bank.XP
        if "title" in normalized or "amount" in normalized:
            return Bank.NUBANK
        return Bank.CSV

    def detect_source(self, filename: str) -> SourceType:
        """Route a file by its extension.

        Raises:
            UnsupportedFormatError: For any extension other than .csv, .txt or .pdf
        """
        suffix = PurePath(filename or "").suffix.lower()
        try:
            return EXTENSIONS[suffix]
        except KeyError:
            raise UnsupportedFormatError(filename) from None

    def add_rule(
        self,
        bank: Bank,
        rule: str | TextPredicate,
        position: int | None = None,
    ) -> None:
        """Add a detection rule at runtime.

        Rules are always inserted before the terminal GENERIC entry.

        Args:
            bank: Bank to report when the rule matches
            rule: Regex pattern (case-insensitive) or predicate over the text
            position: Index in the table; appended before GENERIC when None
        """
        if isinstance(rule, str):
            predicate = _matches_any([re.compile(rule, re.IGNORECASE)])
        else:
            predicate = rule

        last = len(self._rules) - 1
        index = last if position is None else min(position, last)
        self._rules.insert(index, (predicate, bank))

    def get_supported_banks(self) -> list[Bank]:
        """Get banks in the order they are checked (GENERIC last)."""
        return [bank for _, bank in self._rules]
