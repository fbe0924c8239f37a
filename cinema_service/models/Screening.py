from datetime import datetime
from decimal import Decimal
from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from cinema_service.db.base import Base
from cinema_service.models import TimestampMixin
from cinema_service.models.Cinema import new_id


class Screening(Base, TimestampMixin):
    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    room_id: Mapped[str] = mapped_column(String(64), ForeignKey(
        "room.id", ondelete="CASCADE"), index=True, nullable=False)
    # owned by the movie catalog service, no foreign key
    movie_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    ends_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    extra_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    room: Mapped["Room"] = relationship(back_populates="screenings")
