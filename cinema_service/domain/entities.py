from dataclasses import dataclass, replace
from datetime import datetime

from cinema_service.domain.value_objects import Money, TimeRange


@dataclass(frozen=True)
class Cinema:
    id: str
    name: str
    city: str
    address: str | None = None
    zip_code: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class Room:
    id: str
    cinema_id: str
    name: str
    capacity_seat: int = 0

    def __post_init__(self) -> None:
        if self.capacity_seat < 0:
            raise ValueError("Room capacity cannot be negative")


@dataclass(frozen=True)
class Screening:
    """A movie shown in one room over a time range.

    ``id`` stays ``None`` until the screening has been persisted.
    """

    room_id: str
    movie_id: str
    slot: TimeRange
    price: Money
    extra_minutes: int = 0
    id: str | None = None

    def __post_init__(self) -> None:
        if self.extra_minutes < 0:
            raise ValueError("extra_minutes cannot be negative")

    @classmethod
    def schedule(cls, room_id: str, movie_id: str, starts_at: datetime,
                 movie_duration: int, extra_minutes: int, price: Money) -> "Screening":
        """Build a new screening whose end covers the movie plus extra minutes."""
        slot = TimeRange.starting_at(starts_at, movie_duration + extra_minutes)
        return cls(room_id=room_id, movie_id=movie_id, slot=slot,
                   price=price, extra_minutes=extra_minutes)

    def with_id(self, screening_id: str) -> "Screening":
        return replace(self, id=screening_id)

    def reschedule(self, slot: TimeRange) -> "Screening":
        return replace(self, slot=slot)

    def reprice(self, price: Money) -> "Screening":
        return replace(self, price=price)
