from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """Declarative base of the cinema, room and screening tables."""

    @declared_attr.directive
    def __tablename__(cls) -> str:
        # Cinema -> "cinema", Room -> "room", Screening -> "screening"
        return cls.__name__.lower()
