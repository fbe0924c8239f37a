import asyncio
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_service.core.logging import configure_logging
from cinema_service.db.session import async_session as AsyncSessionLocal, engine, init_db
from cinema_service.models import Cinema, Room, Screening

logger = logging.getLogger(__name__)

# Movies live in the catalog service; only the runtime is needed here to compute ends_at.
INCEPTION = "cmm0emqmj000028ocnm52ie1e"
DARK_KNIGHT = "cmm0emqnu000228ocmqii59jw"
GODFATHER = "cmm0emqnn000128oc8vbyu8m9"
MOVIE_DURATIONS = {INCEPTION: 148, DARK_KNIGHT: 152, GODFATHER: 175}


def utc_midnight(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


async def seed(session: AsyncSession, base_day: datetime | None = None) -> dict:
    base_day = base_day or utc_midnight()

    def at(day_offset: int, hour: int, minute: int = 0) -> datetime:
        return base_day + timedelta(days=day_offset, hours=hour, minutes=minute)

    # ------------------------------------------------------------------------------------
    # 1. Cinemas
    # ------------------------------------------------------------------------------------
    cinemas = [
        Cinema(
            id="cinema_1",
            name="Cinéma Lumière",
            city="Aix-en-Provence",
            address="1 rue des Films",
            zip_code="13100",
            phone_number="+33 4 00 00 00 00",
        ),
        Cinema(
            id="cinema_2",
            name="Cinéma Étoile",
            city="Paris",
            address="10 avenue des Champs-Élysées",
            zip_code="75008",
            phone_number="+33 1 00 00 00 00",
        ),
    ]

    # ------------------------------------------------------------------------------------
    # 2. Rooms (room_3 has no seats left, for hasAvailableSeats=false)
    # ------------------------------------------------------------------------------------
    rooms = [
        Room(id="room_1", cinema_id="cinema_1", name="Salle 1", capacity_seat=30),
        Room(id="room_2", cinema_id="cinema_1", name="Salle 2", capacity_seat=20),
        Room(id="room_3", cinema_id="cinema_1", name="Salle 3 (complet)", capacity_seat=0),
        Room(id="room_4", cinema_id="cinema_2", name="Grande Salle", capacity_seat=50),
    ]

    # ------------------------------------------------------------------------------------
    # 3. Screenings (start hours are UTC)
    # ------------------------------------------------------------------------------------
    planned = [
        ("scr_1", "room_1", INCEPTION, at(1, 14), "10.50"),
        ("scr_2", "room_2", DARK_KNIGHT, at(1, 18), "11.00"),
        ("scr_3", "room_1", GODFATHER, at(2, 16), "9.00"),
        ("scr_4", "room_3", GODFATHER, at(2, 20), "8.00"),
        ("scr_5", "room_4", INCEPTION, at(1, 9), "7.50"),
        ("scr_6", "room_4", DARK_KNIGHT, at(1, 14), "9.50"),
        ("scr_7", "room_4", GODFATHER, at(2, 18), "13.00"),
    ]
    extra_minutes = 10
    screenings = [
        Screening(
            id=screening_id,
            room_id=room_id,
            movie_id=movie_id,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(minutes=MOVIE_DURATIONS[movie_id] + extra_minutes),
            base_price=Decimal(price),
            currency="EUR",
            extra_minutes=extra_minutes,
        )
        for screening_id, room_id, movie_id, starts_at, price in planned
    ]

    # merge keeps the script re-runnable against an existing database
    for entity in [*cinemas, *rooms, *screenings]:
        await session.merge(entity)
        await session.flush()
    await session.commit()

    return {"cinemas": len(cinemas), "rooms": len(rooms), "screenings": len(screenings)}


async def main():
    configure_logging()
    await init_db()
    async with AsyncSessionLocal() as session:
        counts = await seed(session)
    logger.info("Seed finished: %s", counts)
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
