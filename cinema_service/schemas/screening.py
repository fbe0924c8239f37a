from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cinema_service.domain.entities import Cinema, Room, Screening
from cinema_service.domain.time_slot import TimeSlot
from cinema_service.schemas.movie import MovieSummary


def ensure_utc(value: datetime) -> datetime:
    # naive input is read as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class SortBy(str, Enum):
    STARTS_AT = "startsAt"
    PRICE = "price"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScreeningFilters(CamelModel):
    """Query contract for screening listings.

    Filtering runs in two stages. Every field except ``time_slot`` is a
    storage predicate that the repository turns into SQL. ``time_slot`` needs
    the UTC hour of each start instant, so it is applied in memory on the rows
    the repository returned. A new filter goes to the storage stage when it can
    be expressed as a column predicate and to the in-memory stage otherwise.
    """

    from_date: UtcDatetime | None = None
    to_date: UtcDatetime | None = None
    has_available_seats: bool | None = None
    cinema_id: str | None = None
    city_name: str | None = None
    price_max: Decimal | None = Field(default=None, ge=0)
    time_slot: TimeSlot | None = None
    sort_by: SortBy = SortBy.STARTS_AT
    sort_order: SortOrder = SortOrder.ASC

    def storage_filters(self) -> "ScreeningFilters":
        return self.model_copy(update={"time_slot": None})


class PriceResponse(CamelModel):
    amount: str
    currency: str


class CinemaSummary(CamelModel):
    id: str
    name: str
    city: str
    address: str | None = None
    zip_code: str | None = None
    phone_number: str | None = None

    @classmethod
    def from_entity(cls, cinema: Cinema) -> "CinemaSummary":
        return cls(id=cinema.id, name=cinema.name, city=cinema.city, address=cinema.address,
                   zip_code=cinema.zip_code, phone_number=cinema.phone_number)


class RoomSummary(CamelModel):
    id: str
    name: str
    capacity_seat: int

    @classmethod
    def from_entity(cls, room: Room) -> "RoomSummary":
        return cls(id=room.id, name=room.name, capacity_seat=room.capacity_seat)


class ScreeningDetailsResponse(CamelModel):
    id: str
    starts_at: datetime
    ends_at: datetime
    extra_minutes: int
    price: PriceResponse
    movie: MovieSummary
    cinema: CinemaSummary
    room: RoomSummary


class ScreeningCreate(CamelModel):
    movie_id: str = Field(min_length=1)
    room_id: str = Field(min_length=1)
    starts_at: UtcDatetime
    extra_minutes: int = Field(default=0, ge=0)
    base_price: Decimal = Field(ge=0)
    currency: str = Field(default="EUR", min_length=3, max_length=3)


class ScreeningUpdate(CamelModel):
    starts_at: UtcDatetime | None = None
    ends_at: UtcDatetime | None = None
    base_price: Decimal | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class ScreeningResponse(CamelModel):
    id: str
    room_id: str
    movie_id: str
    starts_at: datetime
    ends_at: datetime
    extra_minutes: int
    price: PriceResponse

    @classmethod
    def from_entity(cls, screening: Screening) -> "ScreeningResponse":
        return cls(
            id=screening.id,
            room_id=screening.room_id,
            movie_id=screening.movie_id,
            starts_at=screening.slot.start,
            ends_at=screening.slot.end,
            extra_minutes=screening.extra_minutes,
            price=PriceResponse(amount=screening.price.formatted_amount(),
                                currency=screening.price.currency)
        )


class BookingPrice(CamelModel):
    amount: float
    currency: str


class ScreeningBookingResponse(CamelModel):
    id: str
    movie_id: str
    room_id: str
    cinema_id: str
    starts_at: datetime
    ends_at: datetime
    price: BookingPrice


class ScreeningDeleteResponse(CamelModel):
    id: str
    deleted: bool = True
