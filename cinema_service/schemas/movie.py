from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

UNKNOWN_MOVIE_TITLE = "Unknown"


class MovieSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    duration: int | None = None
    poster_url: str | None = None

    @classmethod
    def unknown(cls, movie_id: str) -> "MovieSummary":
        """Placeholder used when the catalog cannot describe ``movie_id``."""
        return cls(id=movie_id, title=UNKNOWN_MOVIE_TITLE, duration=None, poster_url=None)
