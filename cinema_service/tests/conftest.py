import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import cinema_service.models  # noqa: F401
from cinema_service.core.config import settings
from cinema_service.core.exceptions import MovieCatalogError
from cinema_service.crud.cinema import CRUDCinema, CRUDRoom
from cinema_service.crud.screening import CRUDScreening
from cinema_service.db.base import Base
from cinema_service.domain.entities import Cinema, Room, Screening
from cinema_service.domain.ports import (CatalogHit, CatalogMiss, CinemaRepository, MovieCatalogGateway,
                                         RoomRepository, ScreeningRepository)
from cinema_service.domain.value_objects import Money, TimeRange
from cinema_service.schemas.movie import MovieSummary
from cinema_service.scripts.seed_data import DARK_KNIGHT, GODFATHER, INCEPTION, seed
from cinema_service.services.screening_aggregator import ScreeningAggregator

# Monday 2 March 2026, 00:00 UTC; seeded screenings land on the 3rd and 4th
BASE_DAY = datetime(2026, 3, 2, tzinfo=timezone.utc)


class FakeMovieCatalog(MovieCatalogGateway):
    """In-memory catalog. Unknown ids come back as misses."""

    def __init__(self, movies=None, raising=(), slow=(), delay: float = 1.0):
        self.movies = {movie.id: movie for movie in (movies or [])}
        self.raising = set(raising)
        # movie id -> arbitrary exception to raise, for failures outside MovieCatalogError
        self.broken = {}
        self.slow = set(slow)
        self.delay = delay
        self.calls = []

    async def get_summary(self, movie_id: str):
        self.calls.append(movie_id)
        if movie_id in self.slow:
            await asyncio.sleep(self.delay)
        if movie_id in self.broken:
            raise self.broken[movie_id]
        if movie_id in self.raising:
            raise MovieCatalogError(movie_id, "catalog exploded")
        if movie_id not in self.movies:
            return CatalogMiss(movie_id=movie_id, reason="movie not found in catalog")
        return CatalogHit(summary=self.movies[movie_id])


class InMemoryScreenings(ScreeningRepository):
    """Returns screenings in insertion order, as if storage had already sorted them."""

    def __init__(self, screenings=(), rooms=None):
        self.items = {s.id: s for s in screenings}
        self.rooms = rooms or {}
        self.received_filters = []

    async def find_all(self, filters=None):
        self.received_filters.append(filters)
        return list(self.items.values())

    async def find_by_movie_id(self, movie_id, filters=None):
        self.received_filters.append(filters)
        return [s for s in self.items.values() if s.movie_id == movie_id]

    async def find_movie_ids_by_cinema_id(self, cinema_id):
        ids = {s.movie_id for s in self.items.values()
               if s.room_id in self.rooms and self.rooms[s.room_id].cinema_id == cinema_id}
        return sorted(ids)

    async def find_by_id(self, screening_id):
        return self.items.get(screening_id)

    async def list_by_room_id(self, room_id, from_date=None, to_date=None):
        found = [s for s in self.items.values() if s.room_id == room_id
                 and (from_date is None or s.slot.start >= from_date)
                 and (to_date is None or s.slot.end <= to_date)]
        return sorted(found, key=lambda s: s.slot.start)

    async def has_overlap(self, room_id, slot, exclude_screening_id=None):
        return any(s.room_id == room_id and s.id != exclude_screening_id and s.slot.overlaps(slot)
                   for s in self.items.values())

    async def create(self, screening):
        screening_id = screening.id or f"scr_{len(self.items) + 1}"
        self.items[screening_id] = screening.with_id(screening_id)
        return screening_id

    async def update(self, screening):
        self.items[screening.id] = screening

    async def delete(self, screening_id):
        del self.items[screening_id]


class InMemoryRooms(RoomRepository):
    def __init__(self, rooms=()):
        self.items = {room.id: room for room in rooms}

    async def find_by_id(self, room_id):
        return self.items.get(room_id)


class InMemoryCinemas(CinemaRepository):
    def __init__(self, cinemas=()):
        self.items = {cinema.id: cinema for cinema in cinemas}

    async def find_by_id(self, cinema_id):
        return self.items.get(cinema_id)


def make_screening(screening_id: str, room_id: str, movie_id: str, starts_at: datetime,
                   price: str = "10.00", minutes: int = 120, extra_minutes: int = 0) -> Screening:
    return Screening(
        id=screening_id,
        room_id=room_id,
        movie_id=movie_id,
        slot=TimeRange.starting_at(starts_at, minutes + extra_minutes),
        price=Money.from_decimal(price, "EUR"),
        extra_minutes=extra_minutes
    )


@pytest.fixture
def base_day():
    return BASE_DAY


@pytest.fixture
def catalog_movies():
    return [
        MovieSummary(id=INCEPTION, title="Inception", duration=148, poster_url="https://img.example/inception.jpg"),
        MovieSummary(id=DARK_KNIGHT, title="The Dark Knight", duration=152),
        MovieSummary(id=GODFATHER, title="The Godfather", duration=175),
    ]


@pytest.fixture
def movie_catalog(catalog_movies):
    return FakeMovieCatalog(catalog_movies)


@pytest.fixture
def cinemas():
    return [
        Cinema(id="cinema_1", name="Cinéma Lumière", city="Aix-en-Provence",
               address="1 rue des Films", zip_code="13100", phone_number="+33 4 00 00 00 00"),
        Cinema(id="cinema_2", name="Cinéma Étoile", city="Paris",
               address="10 avenue des Champs-Élysées", zip_code="75008", phone_number="+33 1 00 00 00 00"),
    ]


@pytest.fixture
def rooms():
    return [
        Room(id="room_1", cinema_id="cinema_1", name="Salle 1", capacity_seat=30),
        Room(id="room_3", cinema_id="cinema_1", name="Salle 3 (complet)", capacity_seat=0),
        Room(id="room_4", cinema_id="cinema_2", name="Grande Salle", capacity_seat=50),
    ]


@pytest.fixture
def screenings():
    day = BASE_DAY + timedelta(days=1)
    return [
        make_screening("scr_a", "room_4", INCEPTION, day + timedelta(hours=9), price="7.5"),
        make_screening("scr_b", "room_1", DARK_KNIGHT, day + timedelta(hours=12, minutes=59), price="11"),
        make_screening("scr_c", "room_1", GODFATHER, day + timedelta(hours=15), price="9.00"),
        make_screening("scr_d", "room_3", GODFATHER, day + timedelta(hours=20), price="8.00"),
        make_screening("scr_e", "room_1", INCEPTION, day + timedelta(hours=8), price="13.00"),
    ]


@pytest.fixture
def in_memory_repos(screenings, rooms, cinemas):
    room_map = {room.id: room for room in rooms}
    return InMemoryScreenings(screenings, room_map), InMemoryRooms(rooms), InMemoryCinemas(cinemas)


@pytest.fixture
def aggregator(in_memory_repos, movie_catalog):
    screening_repo, room_repo, cinema_repo = in_memory_repos
    return ScreeningAggregator(screening_repo, room_repo, cinema_repo, movie_catalog, catalog_timeout=0.5)


@pytest.fixture
async def db_engine():
    """Create a database engine for the tests.

    Function-scoped so every test gets an empty schema in its own event loop.
    """
    test_db_url = settings.TEST_DATABASE_URL
    if test_db_url.startswith("sqlite"):
        engine = create_async_engine(test_db_url, echo=False, poolclass=StaticPool)
    else:
        engine = create_async_engine(test_db_url, echo=False, pool_size=20, max_overflow=10)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a database session for the tests."""
    async_session = async_sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def seeded_session(db_session):
    """Session over the development seed, anchored on BASE_DAY."""
    await seed(db_session, base_day=BASE_DAY)
    return db_session


@pytest.fixture
def sql_aggregator(seeded_session, movie_catalog):
    return ScreeningAggregator(
        screenings=CRUDScreening(seeded_session),
        rooms=CRUDRoom(seeded_session),
        cinemas=CRUDCinema(seeded_session),
        movie_catalog=movie_catalog
    )
