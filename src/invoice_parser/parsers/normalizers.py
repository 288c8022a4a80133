"""Locale-aware token normalizers.

Pure functions converting the date, amount and installment notations
found on Brazilian credit-card invoices into canonical values. Every
function takes an explicit format descriptor instead of relying on the
process locale, so documents from different banks can be parsed
concurrently without cross-talk.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from invoice_parser.core.exceptions import InvalidAmountError, InvalidDateError

CENTS = Decimal("0.01")

PT_MONTHS: dict[str, int] = {
    "jan": 1,
    "fev": 2,
    "mar": 3,
    "abr": 4,
    "mai": 5,
    "jun": 6,
    "jul": 7,
    "ago": 8,
    "set": 9,
    "out": 10,
    "nov": 11,
    "dez": 12,
}


@dataclass(frozen=True)
class DateFormat:
    """Describes how dates are written in a document.

    Attributes:
        month_names: Abbreviated month name -> month number (lower-case, unaccented)
        century: Century added to two-digit years
    """

    month_names: dict[str, int] = field(default_factory=lambda: dict(PT_MONTHS))
    century: int = 2000


@dataclass(frozen=True)
class AmountFormat:
    """Describes how amounts are written, including the credit sign rule.

    Attributes:
        thousands_sep: Thousands separator
        decimal_sep: Decimal separator
        currency_symbols: Symbols stripped before parsing
        credit_prefixes: Leading markers that make the amount a credit
        credit_suffixes: Trailing markers that make the amount a credit
    """

    thousands_sep: str = "."
    decimal_sep: str = ","
    currency_symbols: tuple[str, ...] = ("R$",)
    credit_prefixes: tuple[str, ...] = ("-",)
    credit_suffixes: tuple[str, ...] = ("-",)


PT_BR_DATES = DateFormat()
BRL = AmountFormat()
# Exports that use a dot as decimal separator (e.g. Nubank CSV).
DOT_DECIMAL = AmountFormat(thousands_sep=",", decimal_sep=".")

_NUMERIC_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{2}|\d{4}))?$")
_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_NAMED_DATE = re.compile(
    r"^(\d{1,2})\s+(?:de\s+)?([a-z]{3})[a-z]*\.?(?:\s+(?:de\s+)?(\d{4}))?$"
)

_INSTALLMENT = re.compile(
    r"(?:\b(?:parcela|parc)\.?\s*)?(?<![\d/])(\d{1,2})\s*/\s*(\d{1,2})(?![\d/])",
    re.IGNORECASE,
)
_INSTALLMENT_WORDS = re.compile(
    r"\(?\s*\bparcela\s+(\d{1,2})\s+de\s+(\d{1,2})\s*\)?",
    re.IGNORECASE,
)


def strip_accents(text: str) -> str:
    """Remove combining accents ("Descrição" -> "Descricao")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def clean_description(text: str) -> str:
    """Collapse internal whitespace (including newlines) and trim."""
    return " ".join(text.split())


def parse_date(token: str, year: int | None = None, fmt: DateFormat = PT_BR_DATES) -> date:
    """Parse an invoice date token.

    Supported forms:
        - DD/MM (year supplied by the caller)
        - DD/MM/YY and DD/MM/YYYY
        - YYYY-MM-DD
        - DD <mon> and DD de <mon>. YYYY ("15 mar", "14 de jan. 2026")

    Args:
        token: Date text
        year: Year to use when the token carries none
        fmt: Date format descriptor

    Returns:
        Parsed date

    Raises:
        InvalidDateError: If the token is malformed, the year is missing,
            or day/month are out of range
    """
    text = strip_accents(token.strip().lower())

    day = month = None
    token_year: int | None = None

    match = _NUMERIC_DATE.match(text)
    if match:
        day, month = int(match.group(1)), int(match.group(2))
        if match.group(3):
            token_year = int(match.group(3))
            if len(match.group(3)) == 2:
                token_year += fmt.century
    else:
        match = _ISO_DATE.match(text)
        if match:
            token_year, month, day = (int(g) for g in match.groups())
        else:
            match = _NAMED_DATE.match(text)
            if not match:
                raise InvalidDateError(token)
            day = int(match.group(1))
            month = fmt.month_names.get(match.group(2))
            if month is None:
                raise InvalidDateError(token)
            if match.group(3):
                token_year = int(match.group(3))

    resolved_year = token_year if token_year is not None else year
    if resolved_year is None:
        raise InvalidDateError(token)

    try:
        return date(resolved_year, month, day)
    except ValueError as e:
        raise InvalidDateError(token) from e


def date_has_year(token: str) -> bool:
    """True when a date token carries its own year."""
    text = strip_accents(token.strip().lower())
    if _ISO_DATE.match(text):
        return True
    match = _NUMERIC_DATE.match(text) or _NAMED_DATE.match(text)
    return bool(match and match.group(3))


def parse_amount(token: str, fmt: AmountFormat = BRL) -> Decimal:
    """Parse a money token into a signed Decimal with two places.

    Handles:
        - R$ 1.234,56 (Brazilian format)
        - -45,00 / 45,00- (credit markers per `fmt`)
        - + R$ 955,51 (explicit sign, credit only if `fmt` says so)

    Args:
        token: Amount string
        fmt: Amount format descriptor (separators and credit sign rule)

    Returns:
        Amount as Decimal, quantized to cents

    Raises:
        InvalidAmountError: If no digit sequence with a decimal marker is present
    """
    raw = token.strip()
    for symbol in fmt.currency_symbols:
        raw = raw.replace(symbol, " ")
    raw = "".join(raw.split())

    is_credit = False
    for marker in fmt.credit_suffixes:
        if raw.endswith(marker):
            raw = raw[: -len(marker)]
            is_credit = True
            break
    if raw[:1] in ("+", "-"):
        is_credit = is_credit or raw[:1] in fmt.credit_prefixes
        raw = raw[1:]

    number = re.fullmatch(
        rf"\d{{1,3}}(?:{re.escape(fmt.thousands_sep)}\d{{3}})*{re.escape(fmt.decimal_sep)}\d{{1,2}}"
        rf"|\d+{re.escape(fmt.decimal_sep)}\d{{1,2}}",
        raw,
    )
    if not number:
        raise InvalidAmountError(token)

    normalized = raw.replace(fmt.thousands_sep, "").replace(fmt.decimal_sep, ".")
    try:
        amount = Decimal(normalized).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise InvalidAmountError(token) from e

    return -amount if is_credit else amount


def _valid_installment(number: str, total: str) -> bool:
    return 0 < int(number) <= int(total)


def extract_installment(description: str) -> tuple[str, str]:
    """Split an installment marker off a description.

    Recognizes "03/10", "Parcela 03/10", "PARC 03/10" and
    "(Parcela 03 de 10)". Markers where k > n (or k is zero) are not
    installments and are left in place.

    The "Parcela"/"Parc" label goes with the marker, unless it is all
    the description has: "Parcela 03/10" becomes ("Parcela", "03/10").
    A description that is nothing but "k/n" is not split.

    Args:
        description: Raw description text

    Returns:
        (description without the marker, "k/n" or "")
    """
    for pattern in (_INSTALLMENT_WORDS, _INSTALLMENT):
        for match in pattern.finditer(description):
            number, total = match.group(1), match.group(2)
            if not _valid_installment(number, total):
                continue
            stripped = clean_description(
                description[: match.start()] + " " + description[match.end():]
            )
            if not stripped:
                label = description[: match.start(1)] + " " + description[match.end(2):]
                stripped = clean_description(re.sub(r"[()]", " ", label))
            if not stripped:
                break
            return stripped, f"{number}/{total}"

    return clean_description(description), ""


def normalize_installment(value: str | None) -> str:
    """Normalize an installment column value ("1 de 3", "01/03", "-").

    Returns:
        "k/n" or "" when the value holds no valid installment
    """
    if not value:
        return ""
    match = re.search(r"(\d{1,2})\s*(?:/|de)\s*(\d{1,2})", value, re.IGNORECASE)
    if not match or not _valid_installment(match.group(1), match.group(2)):
        return ""
    return f"{match.group(1)}/{match.group(2)}"
