"""Banco Inter parser refinement.

Inter invoices list transactions per card section, e.g.:

    CARTÃO 5364****3145
    Data Movimentação Beneficiário Valor
    14 de jan. 2026 PAGAMENTO ON LINE - + R$ 955,51
    16 de jan. 2026 ABAST SHELL BOX - R$ 133,02
    20 de jan. 2026 LOJA X (Parcela 02 de 05) - R$ 80,00
"""

import logging
import re

from invoice_parser.core.banks import Bank
from invoice_parser.parsers.generic import GenericParser, StatementState
from invoice_parser.parsers.normalizers import AmountFormat, clean_description, parse_amount
from invoice_parser.parsers.segmenter import LineSegmenter
from invoice_parser.schemas.internal import ParsedTransaction

logger = logging.getLogger(__name__)

INTER_DATE_TOKEN = r"\d{1,2}\s+de\s+[A-Za-zç]{3}\.?\s+\d{4}|\d{1,2}/\d{1,2}/\d{4}"
INTER_AMOUNT_TOKEN = r"[+-]?\s*R\$\s*(?:\d{1,3}(?:\.\d{3})+|\d+),\d{2}"


class InterParser(GenericParser):
    """Parser refinement for Banco Inter credit card invoices.

    Inter-specific behaviors:
    - Dates carry their own year ("14 de jan. 2026")
    - "CARTÃO 5364****3145" opens a card section; an optional holder
      name before it, or a "Titular:" line, sets the cardholder. Single
      card invoices have no holder, so cardholder stays empty.
    - The amount column follows a " - " separator. An explicit sign on
      the amount ("+ R$", "-R$") marks a credit; unsigned amounts are
      charges.
    - Installments are written "(Parcela 02 de 05)"
    - Invoice payments are not purchases and are skipped
    """

    bank = Bank.INTER

    AMOUNT_FORMAT = AmountFormat(credit_prefixes=("-", "+"), credit_suffixes=())

    LINE_PATTERN = re.compile(
        rf"^(?P<date>{INTER_DATE_TOKEN})\s+(?P<description>.+?)\s+(?:-\s+)?"
        rf"(?P<amount>{INTER_AMOUNT_TOKEN})$"
    )
    ANCHOR_PATTERN = re.compile(rf"^(?:{INTER_DATE_TOKEN})(?:\s|$)")
    COMPLETE_PATTERN = re.compile(rf"{INTER_AMOUNT_TOKEN}$")

    CARD_PATTERN = re.compile(r"^(?P<name>[^\d]*?)\s*CART[ÃA]O\s+(?P<number>[\d*Xx.\s]*\d{4})\b")
    TITULAR_PATTERN = re.compile(r"^(?:Titular|Portador)\s*:?\s+(?P<name>.+)$", re.IGNORECASE)
    TABLE_HEADER_PATTERN = re.compile(r"^Data\b.*Movimenta", re.IGNORECASE)

    IGNORED_DESCRIPTIONS = [
        re.compile(r"^Total\b", re.IGNORECASE),
        re.compile(r"PAGAMENTO", re.IGNORECASE),
    ]

    def _segmenter(self) -> LineSegmenter:
        return LineSegmenter(
            is_anchor=lambda line: bool(self.ANCHOR_PATTERN.match(line)),
            is_boundary=self._is_section_header,
            is_complete=lambda line: bool(self.COMPLETE_PATTERN.search(line)),
        )

    def _is_section_header(self, line: str) -> bool:
        return bool(
            self._is_table_chrome(line)
            or self.CARD_PATTERN.match(line)
            or self.TITULAR_PATTERN.match(line)
        )

    def _is_table_chrome(self, line: str) -> bool:
        """Column headers and per-card totals."""
        return bool(self.TABLE_HEADER_PATTERN.match(line) or line.startswith("Total "))

    def _handle_section(self, line: str, state: StatementState) -> bool:
        if self._is_table_chrome(line):
            return True

        match = self.CARD_PATTERN.match(line)
        if match:
            digits = re.sub(r"\D", "", match.group("number"))
            state.card = digits[-4:]
            name = clean_description(match.group("name"))
            if name:
                state.cardholder = name
            logger.debug("Entering card section")
            return True

        match = self.TITULAR_PATTERN.match(line)
        if match:
            state.cardholder = clean_description(match.group("name"))
            return True

        return False

    def _parse_line(self, line: str, state: StatementState) -> ParsedTransaction | None:
        match = self.LINE_PATTERN.match(line)
        if not match:
            return None

        description = clean_description(match.group("description"))
        if self._is_ignored(description):
            return None

        return self._build_transaction(
            self._parse_date(match.group("date"), state),
            description,
            parse_amount(match.group("amount"), self.AMOUNT_FORMAT),
            state,
        )
