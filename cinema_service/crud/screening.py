from datetime import datetime
from sqlalchemy import Select, asc, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_service.core.exceptions import ScreeningNotFoundError
from cinema_service.domain import entities
from cinema_service.domain.ports import ScreeningRepository
from cinema_service.domain.value_objects import Money, TimeRange
from cinema_service.models.Cinema import Cinema, Room, new_id
from cinema_service.models.Screening import Screening
from cinema_service.schemas.screening import ScreeningFilters, SortBy, SortOrder, ensure_utc


class CRUDScreening(ScreeningRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_all(self, filters: ScreeningFilters | None = None) -> list[entities.Screening]:
        result = await self.db.execute(self._filtered_query(filters))
        return [self._to_domain(row) for row in result.scalars().all()]

    async def find_by_movie_id(self, movie_id: str, filters: ScreeningFilters | None = None) -> list[entities.Screening]:
        stmt = self._filtered_query(filters).where(Screening.movie_id == movie_id)
        result = await self.db.execute(stmt)
        return [self._to_domain(row) for row in result.scalars().all()]

    async def find_movie_ids_by_cinema_id(self, cinema_id: str) -> list[str]:
        result = await self.db.execute(
            select(Screening.movie_id)
            .join(Room, Screening.room_id == Room.id)
            .where(Room.cinema_id == cinema_id)
            .distinct()
            .order_by(Screening.movie_id)
        )
        return list(result.scalars().all())

    async def find_by_id(self, screening_id: str) -> entities.Screening | None:
        row = await self.db.get(Screening, screening_id)
        return self._to_domain(row) if row is not None else None

    async def list_by_room_id(self, room_id: str, from_date: datetime | None = None,
                              to_date: datetime | None = None) -> list[entities.Screening]:
        stmt = select(Screening).where(Screening.room_id == room_id)
        if from_date is not None:
            stmt = stmt.where(Screening.starts_at >= ensure_utc(from_date))
        if to_date is not None:
            stmt = stmt.where(Screening.ends_at <= ensure_utc(to_date))
        result = await self.db.execute(stmt.order_by(Screening.starts_at.asc(), Screening.id.asc()))
        return [self._to_domain(row) for row in result.scalars().all()]

    async def has_overlap(self, room_id: str, slot: TimeRange, exclude_screening_id: str | None = None) -> bool:
        stmt = (select(Screening.id)
                .where(Screening.room_id == room_id)
                .where(Screening.starts_at < ensure_utc(slot.end))
                .where(Screening.ends_at > ensure_utc(slot.start)))
        if exclude_screening_id is not None:
            stmt = stmt.where(Screening.id != exclude_screening_id)
        result = await self.db.execute(stmt.limit(1))
        return result.first() is not None

    async def create(self, screening: entities.Screening) -> str:
        row = Screening(id=screening.id or new_id())
        self._apply(row, screening)
        self.db.add(row)
        await self.db.commit()
        return row.id

    async def update(self, screening: entities.Screening) -> None:
        row = await self.db.get(Screening, screening.id)
        if row is None:
            raise ScreeningNotFoundError(screening.id)
        self._apply(row, screening)
        await self.db.commit()

    async def delete(self, screening_id: str) -> None:
        row = await self.db.get(Screening, screening_id)
        if row is None:
            raise ScreeningNotFoundError(screening_id)
        await self.db.delete(row)
        await self.db.commit()

    def _filtered_query(self, filters: ScreeningFilters | None) -> Select:
        """Translate the storage predicates of ``filters`` into one SELECT.

        ``time_slot`` is ignored here; it is applied by the caller after the rows
        come back.
        """
        filters = filters or ScreeningFilters()
        stmt = select(Screening)

        if filters.from_date is not None:
            stmt = stmt.where(Screening.starts_at >= ensure_utc(filters.from_date))
        if filters.to_date is not None:
            stmt = stmt.where(Screening.starts_at <= ensure_utc(filters.to_date))
        if filters.price_max is not None:
            stmt = stmt.where(Screening.base_price <= filters.price_max)

        room_predicates = []
        if filters.has_available_seats is True:
            room_predicates.append(Room.capacity_seat > 0)
        elif filters.has_available_seats is False:
            room_predicates.append(Room.capacity_seat == 0)
        if filters.cinema_id:
            room_predicates.append(Room.cinema_id == filters.cinema_id)

        if room_predicates or filters.city_name:
            stmt = stmt.join(Room, Screening.room_id == Room.id).where(*room_predicates)
        if filters.city_name:
            stmt = (stmt.join(Cinema, Room.cinema_id == Cinema.id)
                    .where(Cinema.city.icontains(filters.city_name, autoescape=True)))

        return stmt.order_by(*self._order_by(filters))

    def _order_by(self, filters: ScreeningFilters) -> list:
        direction = desc if filters.sort_order == SortOrder.DESC else asc
        if filters.sort_by == SortBy.PRICE:
            # ties on price fall back to start time, then id
            return [direction(Screening.base_price), Screening.starts_at.asc(), Screening.id.asc()]
        return [direction(Screening.starts_at), Screening.id.asc()]

    def _apply(self, row: Screening, screening: entities.Screening) -> None:
        row.room_id = screening.room_id
        row.movie_id = screening.movie_id
        row.starts_at = ensure_utc(screening.slot.start)
        row.ends_at = ensure_utc(screening.slot.end)
        row.base_price = screening.price.amount
        row.currency = screening.price.currency
        row.extra_minutes = screening.extra_minutes

    def _to_domain(self, row: Screening) -> entities.Screening:
        return entities.Screening(
            id=row.id,
            room_id=row.room_id,
            movie_id=row.movie_id,
            slot=TimeRange.of(ensure_utc(row.starts_at), ensure_utc(row.ends_at)),
            price=Money.from_decimal(row.base_price, row.currency),
            extra_minutes=row.extra_minutes or 0
        )
