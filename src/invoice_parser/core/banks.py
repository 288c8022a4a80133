"""Bank variants recognized by the parser."""

from __future__ import annotations

from enum import Enum


class Bank(str, Enum):
    """Detected issuing institution / format family.

    The value is the label used in the serialized envelope.
    """

    XP = "XP"
    ITAU = "ITAU"
    INTER = "INTER"
    NUBANK = "NUBANK"
    CSV = "CSV"
    GENERIC = "genérico"

    @property
    def is_csv(self) -> bool:
        return self in CSV_BANKS


CSV_BANKS: frozenset[Bank] = frozenset({Bank.XP, Bank.NUBANK, Bank.CSV})
