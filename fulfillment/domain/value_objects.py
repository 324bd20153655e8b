"""Domain primitives that enforce validity at creation time."""

import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class RequestId:
    """Unique identifier for a request aggregate."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ResidentId:
    """Unique identifier for a Resident."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class InventoryItemId:
    """Unique identifier for an InventoryItem."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Non-negative amount in pesos, kept at two decimal places."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        object.__setattr__(self, "amount", self.amount.quantize(CENTS, rounding=ROUND_HALF_UP))

    @classmethod
    def zero(cls) -> Self:
        return cls(Decimal("0"))

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def times(self, quantity: int) -> "Money":
        return Money(self.amount * quantity)

    def is_positive(self) -> bool:
        return self.amount > 0

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Quantity:
    """Requested quantity on a line item; always a positive integer."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Quantity must be an integer")
        if self.value < 1:
            raise ValueError("Quantity must be at least 1")


@dataclass(frozen=True)
class StockLevel:
    """Non-negative integer representing available inventory."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Stock level cannot be negative")


_RECEIPT_PATTERN = re.compile(r"^(?P<prefix>[A-Z]{1,6})-(?P<day>\d{8})-(?P<ordinal>\d{6,})$")


@dataclass(frozen=True)
class ReceiptNumber:
    """Receipt identifier of the form ``PREFIX-YYYYMMDD-NNNNNN``.

    The ordinal comes from a per-prefix counter that never resets, so the
    number stays unique even for many payments on the same day. The date is
    informational only.
    """

    prefix: str
    issued_on: date
    ordinal: int

    def __post_init__(self) -> None:
        if not re.fullmatch(r"[A-Z]{1,6}", self.prefix):
            raise ValueError("Receipt prefix must be 1-6 uppercase letters")
        if self.ordinal < 1:
            raise ValueError("Receipt ordinal must be positive")

    @classmethod
    def parse(cls, value: str) -> Self:
        match = _RECEIPT_PATTERN.match(value)
        if match is None:
            raise ValueError(f"Malformed receipt number: {value!r}")
        day = match.group("day")
        return cls(
            prefix=match.group("prefix"),
            issued_on=date(int(day[:4]), int(day[4:6]), int(day[6:])),
            ordinal=int(match.group("ordinal")),
        )

    def __str__(self) -> str:
        return f"{self.prefix}-{self.issued_on:%Y%m%d}-{self.ordinal:06d}"
