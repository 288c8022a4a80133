"""Itaú parser refinement.

Itaú invoices group transactions under cardholder sections and print
dates without a year. Long descriptions are often wrapped by the PDF
text extraction, leaving the amount on a following line.
"""

import logging
import re

from invoice_parser.core.banks import Bank
from invoice_parser.parsers.generic import AMOUNT_TOKEN, GenericParser, StatementState
from invoice_parser.parsers.normalizers import clean_description, parse_amount, strip_accents
from invoice_parser.parsers.segmenter import LineSegmenter
from invoice_parser.schemas.internal import ParsedTransaction

logger = logging.getLogger(__name__)


class ItauParser(GenericParser):
    """Parser refinement for Itaú credit card invoices.

    Itaú-specific behaviors:
    - Cardholder sections: "Titular NAME" or an upper-case name line,
      optionally followed by "(final 1234)"
    - Transaction lines: DD/MM DESCRIPTION [k/n] AMOUNT, year taken from
      "Vencimento: DD/MM/YYYY"
    - Lines without an amount continue the previous description
    - "Compras parceladas - próximas faturas" lists future installments,
      which are not charged on this invoice and are ignored
    """

    bank = Bank.ITAU

    LINE_PATTERN = re.compile(
        rf"^(?P<date>\d{{1,2}}/\d{{1,2}})\s+(?P<description>.+?)\s+(?P<amount>{AMOUNT_TOKEN})$"
    )
    ANCHOR_PATTERN = re.compile(r"^\d{1,2}/\d{1,2}(?:\s|$)")
    COMPLETE_PATTERN = re.compile(rf"(?:^|\s){AMOUNT_TOKEN}$")

    TITULAR_PATTERN = re.compile(
        r"^Titular\s*:?\s+(?P<name>.+?)(?:\s+Cart[aã]o\b.*)?$", re.IGNORECASE
    )
    HOLDER_PATTERN = re.compile(
        r"^(?P<name>[A-ZÀ-Ý][A-ZÀ-Ý']*(?:\s+[A-ZÀ-Ý][A-ZÀ-Ý']*)+)"
        r"(?:\s*\(?\s*final\s+(?P<card>\d{4})\s*\)?)?$"
    )
    CARD_PATTERN = re.compile(r"^(?:Cart[aã]o\s+)?\(?final\s+(?P<card>\d{4})\)?$", re.IGNORECASE)
    FUTURE_INSTALLMENTS_PATTERN = re.compile(
        r"compras\s*parceladas\s*-?\s*pr[oó]ximas\s*faturas", re.IGNORECASE
    )
    # Per-holder totals close the holder's block of transactions
    SECTION_END_PATTERN = re.compile(r"^(?:Total|Lan[cç]amentos)\b", re.IGNORECASE)

    # Upper-case headings that are not holder names
    SECTION_WORDS = frozenset(
        {
            "LANCAMENTOS",
            "COMPRAS",
            "SAQUES",
            "PRODUTOS",
            "SERVICOS",
            "TOTAL",
            "RESUMO",
            "FATURA",
            "ENCARGOS",
            "PAGAMENTOS",
            "LIMITES",
            "INTERNACIONAIS",
            "NACIONAIS",
            "PARCELADAS",
            "CARTAO",
            "VALOR",
            "DATA",
            "ESTABELECIMENTO",
        }
    )

    IGNORED_DESCRIPTIONS = [
        re.compile(
            r"^(?:Total|Lan[cç]amentos|Saldo|Pagamento|Limite|Juros|IOF|CET|Encargos|Multa|Valor)",
            re.IGNORECASE,
        ),
        re.compile(r"fatura", re.IGNORECASE),
    ]

    def _segmenter(self) -> LineSegmenter:
        return LineSegmenter(
            is_anchor=lambda line: bool(self.ANCHOR_PATTERN.match(line)),
            is_boundary=self._is_section_header,
            is_complete=lambda line: bool(self.COMPLETE_PATTERN.search(line)),
        )

    def _is_section_header(self, line: str) -> bool:
        """Headers that close an open record.

        A bare upper-case name is not one of them: while a record still
        lacks its amount, such a line is a wrapped description
        ("15/03 MERCADO" then "LIVRE BRASIL"). With no record open the
        segmenter emits it alone and _handle_section decides whether it
        opens a holder section.
        """
        if self.TITULAR_PATTERN.match(line):
            return True
        holder = self._match_holder(line)
        return (
            (holder is not None and bool(holder[1]))
            or bool(self.CARD_PATTERN.match(line))
            or bool(self.FUTURE_INSTALLMENTS_PATTERN.search(line))
        )

    def _match_holder(self, line: str) -> tuple[str, str] | None:
        """Return (name, card) when the line opens a cardholder section."""
        match = self.TITULAR_PATTERN.match(line)
        if match:
            return clean_description(match.group("name")), ""

        match = self.HOLDER_PATTERN.match(line)
        if not match:
            return None
        words = strip_accents(match.group("name")).split()
        if any(word in self.SECTION_WORDS for word in words):
            return None
        return clean_description(match.group("name")), match.group("card") or ""

    def _handle_section(self, line: str, state: StatementState) -> bool:
        """Track holder and card sections.

        Once a holder's block has transactions, a bare upper-case line is
        a wrapped merchant location ("VESTUARIO SAO PAULO"), not a new
        holder. Only a total line, a "Titular" line or a header carrying
        the card number opens the next block.
        """
        holder = self._match_holder(line)
        if holder is not None:
            name, card = holder
            is_strict = bool(card) or bool(self.TITULAR_PATTERN.match(line))
            if state.section_has_transactions and not is_strict:
                logger.debug("Ignoring upper-case line inside a holder block")
                return True
            state.cardholder, state.card = name, card
            state.skipping = False
            state.section_has_transactions = False
            logger.debug("Entering cardholder section")
            return True

        match = self.CARD_PATTERN.match(line)
        if match:
            state.card = match.group("card")
            state.section_has_transactions = False
            return True

        if self.FUTURE_INSTALLMENTS_PATTERN.search(line):
            state.skipping = True
            state.section_has_transactions = False
            return True

        if self.SECTION_END_PATTERN.match(line):
            state.section_has_transactions = False
            return True

        return False

    def _parse_line(self, line: str, state: StatementState) -> ParsedTransaction | None:
        match = self.LINE_PATTERN.match(line)
        if not match:
            return None

        # Two-column extraction leaves "-CT" artifacts inside descriptions
        description = clean_description(re.sub(r"-CT\s*", " ", match.group("description")))
        if self._is_ignored(description):
            return None

        return self._build_transaction(
            self._parse_date(match.group("date"), state),
            description,
            parse_amount(match.group("amount"), self.AMOUNT_FORMAT),
            state,
        )
