from uuid import uuid4
from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from cinema_service.db.base import Base
from cinema_service.models import TimestampMixin


def new_id() -> str:
    return uuid4().hex


class Cinema(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(40), nullable=True)
    rooms: Mapped[list["Room"]] = relationship(back_populates="cinema", cascade="all, delete-orphan")


class Room(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    cinema_id: Mapped[str] = mapped_column(String(64), ForeignKey("cinema.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 0 doubles as "sold out" for the availability filter
    capacity_seat: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cinema: Mapped["Cinema"] = relationship(back_populates="rooms")
    screenings: Mapped[list["Screening"]] = relationship(back_populates="room", cascade="all, delete-orphan")
