import asyncio
import logging

from cinema_service.core.exceptions import (CinemaNotFoundError, MovieCatalogError, RoomNotFoundError,
                                            ScreeningNotFoundError)
from cinema_service.domain.entities import Cinema, Room, Screening
from cinema_service.domain.ports import (CatalogHit, CatalogLookup, CatalogMiss, CinemaRepository,
                                         MovieCatalogGateway, RoomRepository, ScreeningRepository)
from cinema_service.domain.time_slot import matches_time_slot
from cinema_service.schemas.movie import MovieSummary
from cinema_service.schemas.screening import (CinemaSummary, PriceResponse, RoomSummary,
                                              ScreeningBookingResponse, BookingPrice,
                                              ScreeningDetailsResponse, ScreeningFilters)

logger = logging.getLogger(__name__)


class ScreeningAggregator:
    """Builds denormalized screening views out of screening, room, cinema and movie data.

    Room and cinema are owned by this service, so a screening pointing at a
    missing one aborts the whole call. The movie catalog is a foreign service:
    when it cannot describe a movie the view carries a placeholder instead.
    """

    def __init__(self,
                 screenings: ScreeningRepository,
                 rooms: RoomRepository,
                 cinemas: CinemaRepository,
                 movie_catalog: MovieCatalogGateway,
                 catalog_timeout: float = 3.0,
                 catalog_concurrency: int = 8):
        self.screenings = screenings
        self.rooms = rooms
        self.cinemas = cinemas
        self.movie_catalog = movie_catalog
        self.catalog_timeout = catalog_timeout
        self._catalog_slots = asyncio.Semaphore(catalog_concurrency)

    async def list_screenings(self, filters: ScreeningFilters | None = None) -> list[ScreeningDetailsResponse]:
        filters = filters or ScreeningFilters()
        candidates = await self.screenings.find_all(filters.storage_filters())
        return await self._aggregate(self._apply_in_memory_filters(candidates, filters))

    async def list_screenings_for_movie(self, movie_id: str,
                                        filters: ScreeningFilters | None = None) -> list[ScreeningDetailsResponse]:
        filters = filters or ScreeningFilters()
        candidates = await self.screenings.find_by_movie_id(movie_id, filters.storage_filters())
        return await self._aggregate(self._apply_in_memory_filters(candidates, filters))

    async def get_screening(self, screening_id: str) -> ScreeningDetailsResponse:
        screening = await self.screenings.find_by_id(screening_id)
        if screening is None:
            raise ScreeningNotFoundError(screening_id)
        views = await self._aggregate([screening])
        return views[0]

    async def get_booking_view(self, screening_id: str) -> ScreeningBookingResponse:
        screening = await self.screenings.find_by_id(screening_id)
        if screening is None:
            raise ScreeningNotFoundError(screening_id)
        room, _ = await self._resolve_place(screening)
        return ScreeningBookingResponse(
            id=screening.id,
            movie_id=screening.movie_id,
            room_id=room.id,
            cinema_id=room.cinema_id,
            starts_at=screening.slot.start,
            ends_at=screening.slot.end,
            price=BookingPrice(amount=float(screening.price.amount), currency=screening.price.currency)
        )

    async def list_movies_by_cinema(self, cinema_id: str) -> list[MovieSummary]:
        """Movie picklist for a cinema.

        Unlike the listings, a movie the catalog cannot resolve is left out
        rather than replaced by a placeholder.
        """
        movie_ids = await self.screenings.find_movie_ids_by_cinema_id(cinema_id)
        lookups = await asyncio.gather(*(self._lookup_movie(movie_id) for movie_id in movie_ids))
        movies = []
        for lookup in lookups:
            if isinstance(lookup, CatalogHit):
                movies.append(lookup.summary)
            else:
                logger.warning("movie %s unavailable from catalog, left out of cinema %s: %s",
                               lookup.movie_id, cinema_id, lookup.reason)
        return movies

    def _apply_in_memory_filters(self, screenings: list[Screening], filters: ScreeningFilters) -> list[Screening]:
        # order-preserving: this stage only drops rows
        if filters.time_slot is None:
            return screenings
        return [s for s in screenings if matches_time_slot(s.slot.start, filters.time_slot)]

    async def _aggregate(self, screenings: list[Screening]) -> list[ScreeningDetailsResponse]:
        movie_tasks = [asyncio.ensure_future(self._resolve_movie(s.movie_id)) for s in screenings]
        try:
            # one shared AsyncSession underneath, so rooms and cinemas go one at a time
            places = [await self._resolve_place(s) for s in screenings]
        except Exception:
            for task in movie_tasks:
                task.cancel()
            await asyncio.gather(*movie_tasks, return_exceptions=True)
            raise
        movies = await asyncio.gather(*movie_tasks)

        return [self._to_view(screening, room, cinema, movie)
                for screening, (room, cinema), movie in zip(screenings, places, movies)]

    async def _resolve_place(self, screening: Screening) -> tuple[Room, Cinema]:
        room = await self.rooms.find_by_id(screening.room_id)
        if room is None:
            raise RoomNotFoundError(screening.room_id)
        cinema = await self.cinemas.find_by_id(room.cinema_id)
        if cinema is None:
            raise CinemaNotFoundError(room.cinema_id)
        return room, cinema

    async def _lookup_movie(self, movie_id: str) -> CatalogLookup:
        try:
            async with self._catalog_slots:
                return await asyncio.wait_for(self.movie_catalog.get_summary(movie_id),
                                              timeout=self.catalog_timeout)
        except asyncio.TimeoutError:
            return CatalogMiss(movie_id=movie_id, reason=f"no answer within {self.catalog_timeout}s")
        except MovieCatalogError as e:
            return CatalogMiss(movie_id=movie_id, reason=e.reason)
        except Exception as e:
            # the catalog is a foreign service, whatever it raises counts as a miss
            logger.warning("movie catalog lookup for %s raised", movie_id, exc_info=True)
            return CatalogMiss(movie_id=movie_id, reason=repr(e))

    async def _resolve_movie(self, movie_id: str) -> MovieSummary:
        lookup = await self._lookup_movie(movie_id)
        if isinstance(lookup, CatalogHit):
            return lookup.summary
        logger.warning("movie %s unavailable from catalog, using placeholder: %s", movie_id, lookup.reason)
        return MovieSummary.unknown(movie_id)

    def _to_view(self, screening: Screening, room: Room, cinema: Cinema,
                 movie: MovieSummary) -> ScreeningDetailsResponse:
        return ScreeningDetailsResponse(
            id=screening.id,
            starts_at=screening.slot.start,
            ends_at=screening.slot.end,
            extra_minutes=screening.extra_minutes,
            price=PriceResponse(amount=screening.price.formatted_amount(), currency=screening.price.currency),
            movie=movie,
            cinema=CinemaSummary.from_entity(cinema),
            room=RoomSummary.from_entity(room)
        )
