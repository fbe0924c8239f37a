from sqlalchemy.ext.asyncio import AsyncSession

from cinema_service.domain import entities
from cinema_service.domain.ports import CinemaRepository, RoomRepository
from cinema_service.models.Cinema import Cinema, Room


class CRUDRoom(RoomRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, room_id: str) -> entities.Room | None:
        room = await self.db.get(Room, room_id)
        if room is None:
            return None
        return entities.Room(id=room.id, cinema_id=room.cinema_id,
                             name=room.name, capacity_seat=room.capacity_seat)


class CRUDCinema(CinemaRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, cinema_id: str) -> entities.Cinema | None:
        cinema = await self.db.get(Cinema, cinema_id)
        if cinema is None:
            return None
        return entities.Cinema(
            id=cinema.id,
            name=cinema.name,
            city=cinema.city,
            address=cinema.address,
            zip_code=cinema.zip_code,
            phone_number=cinema.phone_number
        )
