"""Internal data schemas for parsed invoice data.

These models are the engine's output. They are created fresh per call
and frozen, so callers can share them freely between threads.
"""

import datetime as dt
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from invoice_parser.core.banks import Bank

CENTS = Decimal("0.01")

_INSTALLMENT_RE = re.compile(r"^(\d+)/(\d+)$")


@dataclass(frozen=True)
class ParseContext:
    """Hints a caller can hand to a bank strategy.

    Attributes:
        year: Statement year for dates printed without one
        cardholder: Holder assigned when the layout has no holder sections
        card: Card label assigned when the layout has no card sections
    """

    year: int | None = None
    cardholder: str = ""
    card: str = ""


class ParsedTransaction(BaseModel):
    """Represents a single transaction extracted from an invoice.

    Amounts are signed decimals with exactly two places; a negative
    amount is a credit (refund, payment) under the issuing bank's rules.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(..., description="Transaction date")
    description: str = Field(..., description="Merchant / entry description")
    amount: Decimal = Field(..., description="Signed amount, 2 decimal places")
    cardholder: str = Field(default="", description="Holder name, empty for single-holder invoices")
    installment: str = Field(default="", description="'k/n' or empty")
    card: str = Field(default="", description="Last four digits of the card, or empty")

    @field_validator("description")
    @classmethod
    def description_not_empty(cls, v: str) -> str:
        """Collapse whitespace and ensure the description is not empty."""
        v = " ".join(v.split())
        if not v:
            raise ValueError("Description cannot be empty")
        return v

    @field_validator("amount")
    @classmethod
    def amount_two_places(cls, v: Decimal) -> Decimal:
        """Ensure the amount is finite and carries exactly two places."""
        if not v.is_finite():
            raise ValueError("Amount must be finite")
        return v.quantize(CENTS, rounding=ROUND_HALF_UP)

    @field_validator("cardholder", "card")
    @classmethod
    def strip_labels(cls, v: str) -> str:
        return " ".join(v.split())

    @field_validator("installment")
    @classmethod
    def validate_installment(cls, v: str) -> str:
        """Ensure installment is empty or 'k/n' with k <= n."""
        v = v.strip()
        if not v:
            return ""
        match = _INSTALLMENT_RE.match(v)
        if not match:
            raise ValueError(f"Installment must look like 'k/n', got {v!r}")
        if int(match.group(1)) > int(match.group(2)):
            raise ValueError(f"Installment number exceeds total: {v!r}")
        return v

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire representation (ISO date, numeric amount)."""
        return {
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": float(self.amount),
            "cardholder": self.cardholder,
            "installment": self.installment,
            "card": self.card,
        }


class ParseResult(BaseModel):
    """Represents a complete parsed invoice.

    `total` is the exact sum of the transaction amounts and `count`
    their number; the validator rejects any result where they disagree.
    """

    model_config = ConfigDict(frozen=True)

    bank: Bank = Field(..., description="Detected bank variant")
    transactions: tuple[ParsedTransaction, ...] = Field(
        default_factory=tuple,
        description="Transactions in document order",
    )
    total: Decimal = Field(default=Decimal("0.00"), description="Sum of amounts")
    count: int = Field(default=0, description="Number of transactions")

    @model_validator(mode="after")
    def totals_match_transactions(self) -> "ParseResult":
        expected = sum((t.amount for t in self.transactions), Decimal("0.00"))
        if self.total != expected:
            raise ValueError(f"Total {self.total} does not match sum of amounts {expected}")
        if self.count != len(self.transactions):
            raise ValueError(
                f"Count {self.count} does not match {len(self.transactions)} transactions"
            )
        return self

    @classmethod
    def from_transactions(
        cls, bank: Bank, transactions: Iterable[ParsedTransaction]
    ) -> "ParseResult":
        """Build a result, computing total and count from the transactions."""
        items = tuple(transactions)
        return cls(
            bank=bank,
            transactions=items,
            total=sum((t.amount for t in items), Decimal("0.00")),
            count=len(items),
        )

    def to_envelope(self) -> dict[str, Any]:
        """Serialize to the output envelope handed back to callers."""
        return {
            "bank": self.bank.value,
            "total": self.count,
            "totalAmount": float(self.total),
            "transactions": [t.to_dict() for t in self.transactions],
        }
