from datetime import datetime
from decimal import Decimal
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_service.clients.movie_catalog import get_movie_catalog
from cinema_service.core.config import Settings, get_settings
from cinema_service.crud.cinema import CRUDCinema, CRUDRoom
from cinema_service.crud.screening import CRUDScreening
from cinema_service.db.session import getDB_session
from cinema_service.domain.ports import MovieCatalogGateway
from cinema_service.domain.time_slot import TimeSlot
from cinema_service.schemas.screening import ScreeningFilters, SortBy, SortOrder
from cinema_service.services.screening_aggregator import ScreeningAggregator
from cinema_service.services.screening_scheduler import ScreeningScheduler


def get_screening_aggregator(
        db: AsyncSession = Depends(getDB_session),
        movie_catalog: MovieCatalogGateway = Depends(get_movie_catalog),
        settings: Settings = Depends(get_settings)) -> ScreeningAggregator:
    return ScreeningAggregator(
        screenings=CRUDScreening(db),
        rooms=CRUDRoom(db),
        cinemas=CRUDCinema(db),
        movie_catalog=movie_catalog,
        catalog_timeout=settings.MOVIE_CATALOG_TIMEOUT,
        catalog_concurrency=settings.MOVIE_CATALOG_CONCURRENCY
    )


def get_screening_scheduler(
        db: AsyncSession = Depends(getDB_session),
        movie_catalog: MovieCatalogGateway = Depends(get_movie_catalog)) -> ScreeningScheduler:
    return ScreeningScheduler(screenings=CRUDScreening(db), rooms=CRUDRoom(db), movie_catalog=movie_catalog)


def screening_filters(
        from_date: datetime | None = Query(None, alias="fromDate", examples=["2026-02-25T00:00:00.000Z"]),
        to_date: datetime | None = Query(None, alias="toDate", examples=["2026-02-26T23:59:59.000Z"]),
        has_available_seats: bool | None = Query(None, alias="hasAvailableSeats",
                                                 description="true = seats left, false = sold out"),
        cinema_id: str | None = Query(None, alias="cinemaId"),
        city_name: str | None = Query(None, alias="cityName", description="Case-insensitive city match"),
        price_max: Decimal | None = Query(None, alias="priceMax", ge=0),
        time_slot: TimeSlot | None = Query(None, alias="timeSlot",
                                           description="morning=8-13h UTC, afternoon=13-17h UTC, evening=17-22h UTC"),
        sort_by: SortBy = Query(SortBy.STARTS_AT, alias="sortBy"),
        sort_order: SortOrder = Query(SortOrder.ASC, alias="sortOrder")) -> ScreeningFilters:
    return ScreeningFilters(
        from_date=from_date,
        to_date=to_date,
        has_available_seats=has_available_seats,
        cinema_id=cinema_id or None,
        city_name=city_name or None,
        price_max=price_max,
        time_slot=time_slot,
        sort_by=sort_by,
        sort_order=sort_order
    )
