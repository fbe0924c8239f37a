class CinemaServiceError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class EntityNotFoundError(CinemaServiceError):
    entity = "Entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}", status_code=404)


class RoomNotFoundError(EntityNotFoundError):
    entity = "Room"


class CinemaNotFoundError(EntityNotFoundError):
    entity = "Cinema"


class ScreeningNotFoundError(EntityNotFoundError):
    entity = "Screening"


class MovieCatalogError(CinemaServiceError):
    def __init__(self, movie_id: str, reason: str):
        self.movie_id = movie_id
        self.reason = reason
        super().__init__(f"Movie catalog lookup failed for {movie_id}: {reason}", status_code=502)


class ScreeningOverlapError(CinemaServiceError):
    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id} already has a screening in this time range", status_code=409)


class InvalidScreeningError(CinemaServiceError):
    def __init__(self, message: str):
        super().__init__(message, status_code=422)
