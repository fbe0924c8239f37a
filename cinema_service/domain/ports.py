"""Contracts the screening services depend on.

The SQLAlchemy adapters in ``cinema_service.crud`` and the HTTP adapter in
``cinema_service.clients.movie_catalog`` implement them; tests swap in
in-memory fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from cinema_service.domain.entities import Cinema, Room, Screening
from cinema_service.domain.value_objects import TimeRange
from cinema_service.schemas.movie import MovieSummary
from cinema_service.schemas.screening import ScreeningFilters


class ScreeningRepository(ABC):
    @abstractmethod
    async def find_all(self, filters: ScreeningFilters | None = None) -> list[Screening]:
        """Screenings matching the storage predicates of ``filters``, already sorted."""

    @abstractmethod
    async def find_by_movie_id(self, movie_id: str, filters: ScreeningFilters | None = None) -> list[Screening]:
        """Same as ``find_all`` restricted to one movie."""

    @abstractmethod
    async def find_movie_ids_by_cinema_id(self, cinema_id: str) -> list[str]:
        """Distinct movie ids screened in any room of the cinema."""

    @abstractmethod
    async def find_by_id(self, screening_id: str) -> Screening | None: ...

    @abstractmethod
    async def list_by_room_id(self, room_id: str, from_date: datetime | None = None,
                              to_date: datetime | None = None) -> list[Screening]: ...

    @abstractmethod
    async def has_overlap(self, room_id: str, slot: TimeRange, exclude_screening_id: str | None = None) -> bool: ...

    @abstractmethod
    async def create(self, screening: Screening) -> str: ...

    @abstractmethod
    async def update(self, screening: Screening) -> None: ...

    @abstractmethod
    async def delete(self, screening_id: str) -> None: ...


class RoomRepository(ABC):
    @abstractmethod
    async def find_by_id(self, room_id: str) -> Room | None: ...


class CinemaRepository(ABC):
    @abstractmethod
    async def find_by_id(self, cinema_id: str) -> Cinema | None: ...


@dataclass(frozen=True)
class CatalogHit:
    summary: MovieSummary


@dataclass(frozen=True)
class CatalogMiss:
    movie_id: str
    reason: str


CatalogLookup = CatalogHit | CatalogMiss


class MovieCatalogGateway(ABC):
    @abstractmethod
    async def get_summary(self, movie_id: str) -> CatalogLookup:
        """Resolve ``movie_id`` to a display summary.

        Not-found and transport problems come back as ``CatalogMiss``.
        Implementations may still raise ``MovieCatalogError``; callers treat
        both the same way.
        """
