import logging
from datetime import datetime

from cinema_service.core.exceptions import (InvalidScreeningError, MovieCatalogError, RoomNotFoundError,
                                            ScreeningNotFoundError, ScreeningOverlapError)
from cinema_service.domain.entities import Screening
from cinema_service.domain.ports import CatalogMiss, MovieCatalogGateway, RoomRepository, ScreeningRepository
from cinema_service.domain.value_objects import Money, TimeRange
from cinema_service.schemas.screening import ScreeningCreate, ScreeningUpdate

logger = logging.getLogger(__name__)


class ScreeningScheduler:
    def __init__(self, screenings: ScreeningRepository, rooms: RoomRepository, movie_catalog: MovieCatalogGateway):
        self.screenings = screenings
        self.rooms = rooms
        self.movie_catalog = movie_catalog

    async def create_screening(self, data: ScreeningCreate) -> Screening:
        room = await self.rooms.find_by_id(data.room_id)
        if room is None:
            raise RoomNotFoundError(data.room_id)

        lookup = await self.movie_catalog.get_summary(data.movie_id)
        if isinstance(lookup, CatalogMiss):
            raise MovieCatalogError(data.movie_id, lookup.reason)
        duration = lookup.summary.duration
        if duration is None or duration <= 0:
            raise MovieCatalogError(data.movie_id, "catalog has no duration for this movie")

        screening = Screening.schedule(
            room_id=room.id,
            movie_id=data.movie_id,
            starts_at=data.starts_at,
            movie_duration=duration,
            extra_minutes=data.extra_minutes,
            price=Money.from_decimal(data.base_price, data.currency)
        )
        if await self.screenings.has_overlap(room.id, screening.slot):
            raise ScreeningOverlapError(room.id)

        screening_id = await self.screenings.create(screening)
        logger.info("scheduled screening %s of movie %s in room %s at %s",
                    screening_id, data.movie_id, room.id, screening.slot.start.isoformat())
        return screening.with_id(screening_id)

    async def update_screening(self, screening_id: str, data: ScreeningUpdate) -> Screening:
        """Reschedule and/or re-price a screening.

        A new start without a new end moves the whole slot and keeps its length.
        """
        screening = await self.screenings.find_by_id(screening_id)
        if screening is None:
            raise ScreeningNotFoundError(screening_id)

        if data.starts_at is not None or data.ends_at is not None:
            start = data.starts_at or screening.slot.start
            try:
                if data.ends_at is not None:
                    slot = TimeRange.of(start, data.ends_at)
                else:
                    slot = screening.slot.shifted_to(start)
            except ValueError as e:
                raise InvalidScreeningError(str(e))
            if await self.screenings.has_overlap(screening.room_id, slot, exclude_screening_id=screening_id):
                raise ScreeningOverlapError(screening.room_id)
            screening = screening.reschedule(slot)

        if data.base_price is not None or data.currency is not None:
            amount = data.base_price if data.base_price is not None else screening.price.amount
            currency = data.currency or screening.price.currency
            screening = screening.reprice(Money.from_decimal(amount, currency))

        await self.screenings.update(screening)
        logger.info("updated screening %s", screening_id)
        return screening

    async def delete_screening(self, screening_id: str) -> None:
        if await self.screenings.find_by_id(screening_id) is None:
            raise ScreeningNotFoundError(screening_id)
        await self.screenings.delete(screening_id)
        logger.info("deleted screening %s", screening_id)

    async def list_room_screenings(self, room_id: str, from_date: datetime | None = None,
                                   to_date: datetime | None = None) -> list[Screening]:
        if await self.rooms.find_by_id(room_id) is None:
            raise RoomNotFoundError(room_id)
        return await self.screenings.list_by_room_id(room_id, from_date, to_date)
