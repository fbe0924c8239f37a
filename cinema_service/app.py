import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cinema_service.api.v1 import routes_cinema, routes_health, routes_screening
from cinema_service.clients.movie_catalog import movie_catalog
from cinema_service.core.config import settings
from cinema_service.core.exceptions import CinemaServiceError
from cinema_service.core.logging import configure_logging
from cinema_service.db import session
from cinema_service.redis import close_redis

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s (%s)", settings.PROJECT_NAME, settings.ENV)
    if settings.ENV == "development":
        await session.init_db()
    yield
    await close_redis()
    movie_catalog.close()
    await session.engine.dispose()
    logger.info("Shut down %s", settings.PROJECT_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.PROJECT_DESCRIPTION,
        docs_url="/doc",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        routes_health.router,
        prefix=settings.API_V1_PREFIX
    )
    app.include_router(
        routes_screening.router,
        prefix=settings.API_V1_PREFIX
    )
    app.include_router(
        routes_cinema.router,
        prefix=settings.API_V1_PREFIX
    )

    @app.exception_handler(CinemaServiceError)
    async def cinema_service_error_handler(request, ex: CinemaServiceError):
        if ex.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, ex.message)
        return JSONResponse(status_code=ex.status_code, content={"error": ex.message})

    @app.get("/")
    async def root():
        return {"message": "Cinema screening service is running"}

    return app


app = create_app()
