from datetime import datetime
from fastapi import APIRouter, Depends, Header, Query
from redis.asyncio import Redis

from cinema_service.api.deps import get_screening_aggregator, get_screening_scheduler, screening_filters
from cinema_service.core.config import Settings, get_settings
from cinema_service.core.idempotency import IDEMPOTENCY_HEADER, check_idempotency, save_idempotent_response
from cinema_service.redis import get_redis
from cinema_service.schemas.screening import (ScreeningBookingResponse, ScreeningCreate, ScreeningDeleteResponse,
                                              ScreeningDetailsResponse, ScreeningFilters, ScreeningResponse,
                                              ScreeningUpdate, ensure_utc)
from cinema_service.services.screening_aggregator import ScreeningAggregator
from cinema_service.services.screening_scheduler import ScreeningScheduler

router = APIRouter(
    prefix="/screenings",
    tags=["screenings"]
)

CREATE_SCOPE = "screening:create"


@router.get("", response_model=list[ScreeningDetailsResponse])
async def list_screenings(
        filters: ScreeningFilters = Depends(screening_filters),
        aggregator: ScreeningAggregator = Depends(get_screening_aggregator)):
    return await aggregator.list_screenings(filters)


@router.get("/movie/{movie_id}", response_model=list[ScreeningDetailsResponse])
async def list_screenings_by_movie(
        movie_id: str,
        filters: ScreeningFilters = Depends(screening_filters),
        aggregator: ScreeningAggregator = Depends(get_screening_aggregator)):
    return await aggregator.list_screenings_for_movie(movie_id, filters)


@router.get("/room/{room_id}", response_model=list[ScreeningResponse])
async def list_screenings_by_room(
        room_id: str,
        from_date: datetime | None = Query(None, alias="fromDate"),
        to_date: datetime | None = Query(None, alias="toDate"),
        scheduler: ScreeningScheduler = Depends(get_screening_scheduler)):
    screenings = await scheduler.list_room_screenings(
        room_id,
        ensure_utc(from_date) if from_date else None,
        ensure_utc(to_date) if to_date else None
    )
    return [ScreeningResponse.from_entity(screening) for screening in screenings]


@router.get("/{screening_id}", response_model=ScreeningDetailsResponse)
async def get_screening(
        screening_id: str,
        aggregator: ScreeningAggregator = Depends(get_screening_aggregator)):
    return await aggregator.get_screening(screening_id)


@router.get("/{screening_id}/booking", response_model=ScreeningBookingResponse)
async def get_screening_for_booking(
        screening_id: str,
        aggregator: ScreeningAggregator = Depends(get_screening_aggregator)):
    return await aggregator.get_booking_view(screening_id)


@router.post("", response_model=ScreeningResponse, status_code=201)
async def create_screening(
        data: ScreeningCreate,
        idem_key: str | None = Header(None, alias=IDEMPOTENCY_HEADER),
        scheduler: ScreeningScheduler = Depends(get_screening_scheduler),
        redis: Redis = Depends(get_redis),
        settings: Settings = Depends(get_settings)):
    cached = await check_idempotency(redis, CREATE_SCOPE, idem_key)
    if cached is not None:
        return cached
    screening = await scheduler.create_screening(data)
    response = ScreeningResponse.from_entity(screening)
    await save_idempotent_response(redis, CREATE_SCOPE, idem_key,
                                   response.model_dump(mode="json", by_alias=True),
                                   ttl=settings.IDEMPOTENCY_TTL)
    return response


@router.patch("/{screening_id}", response_model=ScreeningResponse)
async def update_screening(
        screening_id: str,
        data: ScreeningUpdate,
        scheduler: ScreeningScheduler = Depends(get_screening_scheduler)):
    screening = await scheduler.update_screening(screening_id, data)
    return ScreeningResponse.from_entity(screening)


@router.delete("/{screening_id}", response_model=ScreeningDeleteResponse)
async def delete_screening(
        screening_id: str,
        scheduler: ScreeningScheduler = Depends(get_screening_scheduler)):
    await scheduler.delete_screening(screening_id)
    return ScreeningDeleteResponse(id=screening_id)
