"""Immutable values shared by screenings and their views."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Non-negative amount in a single currency."""

    amount: Decimal
    currency: str = "EUR"

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        if not self.currency:
            raise ValueError("Money currency is required")

    @classmethod
    def from_decimal(cls, value, currency: str = "EUR") -> "Money":
        # str() first so floats like 10.1 do not drag binary noise along
        return cls(amount=Decimal(str(value)), currency=currency.upper())

    def formatted_amount(self) -> str:
        return str(self.amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.formatted_amount()} {self.currency}"


@dataclass(frozen=True)
class TimeRange:
    """Half-open interval [start, end) with start strictly before end."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError("TimeRange start must be before end")

    @classmethod
    def of(cls, start: datetime, end: datetime) -> "TimeRange":
        return cls(start=start, end=end)

    @classmethod
    def starting_at(cls, start: datetime, minutes: int) -> "TimeRange":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def shifted_to(self, start: datetime) -> "TimeRange":
        return TimeRange(start=start, end=start + self.duration)

    def overlaps(self, other: "TimeRange") -> bool:
        return self.start < other.end and other.start < self.end
