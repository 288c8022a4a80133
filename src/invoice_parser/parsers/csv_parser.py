"""CSV invoice parser.

Handles delimited exports (XP, Nubank and unrecognized banks). Columns
are located by header name; when the header gives nothing usable the
parser falls back to date first, amount last, description in between.
"""

import csv
import logging
import re
from dataclasses import replace
from decimal import Decimal
from io import StringIO

from invoice_parser.config import Settings
from invoice_parser.core.banks import Bank
from invoice_parser.parsers.detector import BankDetector
from invoice_parser.parsers.generic import GenericParser, StatementState
from invoice_parser.parsers.normalizers import (
    BRL,
    DOT_DECIMAL,
    AmountFormat,
    clean_description,
    normalize_installment,
    parse_date,
    strip_accents,
)
from invoice_parser.schemas.internal import ParseContext, ParsedTransaction

logger = logging.getLogger(__name__)

# Header names (lower-case, unaccented, first word) per field
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("data", "date", "dt"),
    "description": (
        "descricao",
        "estabelecimento",
        "title",
        "historico",
        "lancamento",
        "description",
        "beneficiario",
    ),
    "amount": ("valor", "amount", "value"),
    "installment": ("parcela", "parcelas", "installment", "installments"),
    "cardholder": ("portador", "titular", "cardholder", "nome"),
    "card": ("cartao", "card", "final"),
}

# Amount notations tried in order, per CSV label
AMOUNT_FORMATS: dict[Bank, tuple[AmountFormat, ...]] = {
    Bank.XP: (BRL,),
    Bank.NUBANK: (DOT_DECIMAL,),
    Bank.CSV: (BRL, DOT_DECIMAL),
}


def detect_delimiter(header: str) -> str:
    """Pick the delimiter used by the header row."""
    if ";" in header:
        return ";"
    if "\t" in header:
        return "\t"
    return ","


def _header_key(cell: str) -> str:
    normalized = strip_accents(cell.strip().lower())
    words = re.findall(r"[a-z]+", normalized)
    return words[0] if words else ""


def map_columns(header: list[str]) -> dict[str, int]:
    """Map field names to column indexes by header name.

    Matching is case- and accent-insensitive and uses the first word of
    each header cell ("Valor (R$)" -> amount, "Data de compra" -> date).
    """
    columns: dict[str, int] = {}
    for index, cell in enumerate(header):
        key = _header_key(cell)
        for field_name, aliases in COLUMN_ALIASES.items():
            if field_name not in columns and key in aliases:
                columns[field_name] = index
                break
    return columns


class CSVParser(GenericParser):
    """Parser for delimited invoice exports.

    Behaviors:
    - Delimiter detected from the header row (';', tab, else ',')
    - Columns mapped by header name; positional fallback otherwise
    - Header skipped; rows with an unparsable amount or date skipped
    - Cardholder / card columns are optional
    """

    bank = Bank.CSV

    def __init__(self, settings: Settings | None = None, detector: BankDetector | None = None):
        super().__init__(settings)
        self.detector = detector or BankDetector()

    def parse(self, text: str, context: ParseContext | None = None) -> list[ParsedTransaction]:
        """Parse CSV text into transactions.

        Args:
            text: CSV content
            context: Optional year / cardholder / card hints

        Returns:
            Transactions in file order
        """
        context = context or ParseContext()
        content = self._preprocess_content(text or "")
        lines = [line for line in content.split("\n") if line.strip()]
        if len(lines) < 2:
            return []

        header_line = lines[0]
        bank = self.detector.detect_csv(header_line)
        amount_formats = AMOUNT_FORMATS.get(bank, (BRL,))
        state = StatementState(
            year=context.year or self.settings.resolve_fallback_year(),
            cardholder=context.cardholder,
            card=context.card,
        )

        reader = csv.reader(StringIO("\n".join(lines)), delimiter=detect_delimiter(header_line))
        transactions: list[ParsedTransaction] = []
        try:
            header = next(reader)
            columns = map_columns(header)
            positional = "date" not in columns or "amount" not in columns
            if positional:
                logger.debug("CSV header not recognized; using positional columns")

            for row_num, row in enumerate(reader, start=2):
                cells = [cell.strip() for cell in row]
                if not any(cells):
                    continue
                try:
                    if positional:
                        transaction = self._parse_positional(cells, amount_formats, state)
                    else:
                        transaction = self._parse_row(cells, columns, amount_formats, state)
                except ValueError as e:
                    logger.debug("Skipping CSV row %d: %s", row_num, e)
                    continue
                if transaction is not None:
                    transactions.append(transaction)
        except csv.Error as e:
            logger.warning("CSV reading stopped early: %s", e)

        return transactions

    def _preprocess_content(self, content: str) -> str:
        """Remove BOM and normalize line endings."""
        if content.startswith("\ufeff"):
            content = content[1:]
        return content.replace("\r\n", "\n").replace("\r", "\n")

    def _parse_row(
        self,
        cells: list[str],
        columns: dict[str, int],
        formats: tuple[AmountFormat, ...],
        state: StatementState,
    ) -> ParsedTransaction | None:
        def cell(field_name: str) -> str:
            index = columns.get(field_name)
            if index is None or index >= len(cells):
                return ""
            return cells[index]

        amount = self._parse_amount(cell("amount"), formats)
        transaction_date = parse_date(cell("date"), year=state.year)

        if "description" in columns:
            description = cell("description")
        else:
            mapped = set(columns.values())
            description = " ".join(c for i, c in enumerate(cells) if i not in mapped)

        installment = None
        if "installment" in columns:
            installment = normalize_installment(cell("installment"))

        card = cell("card")
        digits = re.sub(r"\D", "", card)
        if len(digits) >= 4:
            card = digits[-4:]

        row_state = replace(
            state,
            cardholder=cell("cardholder") or state.cardholder,
            card=card or state.card,
        )
        return self._build_transaction(
            transaction_date,
            clean_description(description),
            amount,
            row_state,
            installment=installment,
        )

    def _parse_positional(
        self,
        cells: list[str],
        formats: tuple[AmountFormat, ...],
        state: StatementState,
    ) -> ParsedTransaction | None:
        """Date in the first column, amount in the last, description between."""
        if len(cells) < 2:
            return None

        amount = self._parse_amount(cells[-1], formats)
        transaction_date = parse_date(cells[0], year=state.year)
        description = clean_description(" ".join(cells[1:-1])) or cells[0]
        return self._build_transaction(transaction_date, description, amount, state)

