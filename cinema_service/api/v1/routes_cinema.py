from fastapi import APIRouter, Depends, Path

from cinema_service.api.deps import get_screening_aggregator
from cinema_service.schemas.movie import MovieSummary
from cinema_service.services.screening_aggregator import ScreeningAggregator

router = APIRouter(
    prefix="/cinemas",
    tags=["cinemas"]
)


@router.get("/{cinema_id}/movies", response_model=list[MovieSummary])
async def list_movies_by_cinema(
        cinema_id: str = Path(..., pattern=r"\S"),
        aggregator: ScreeningAggregator = Depends(get_screening_aggregator)):
    return await aggregator.list_movies_by_cinema(cinema_id.strip())
