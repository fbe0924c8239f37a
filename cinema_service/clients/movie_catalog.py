"""
HTTP adapter for the external movie catalog service.

The catalog is reached with a blocking requests session; calls are pushed to a
worker thread so the event loop keeps serving other requests.
"""

import asyncio
import logging
from urllib.parse import quote

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from cinema_service.core.config import settings
from cinema_service.domain.ports import CatalogHit, CatalogLookup, CatalogMiss, MovieCatalogGateway
from cinema_service.schemas.movie import MovieSummary

logger = logging.getLogger(__name__)


class HttpMovieCatalogGateway(MovieCatalogGateway):
    """Movie catalog client speaking ``GET {base_url}/movies/{id}``."""

    def __init__(self, base_url: str, timeout: float = 3.0, max_retries: int = 2,
                 session: requests.Session | None = None):
        self.base_url = base_url.strip().rstrip("/")
        self.timeout = timeout
        self.session = session or self._create_session(max_retries)

    def _create_session(self, max_retries: int) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=0.2,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": "application/json"})
        return session

    def _fetch(self, movie_id: str) -> requests.Response:
        url = f"{self.base_url}/movies/{quote(movie_id, safe='')}"
        return self.session.get(url, timeout=self.timeout)

    async def get_summary(self, movie_id: str) -> CatalogLookup:
        try:
            response = await asyncio.to_thread(self._fetch, movie_id)
            if response.status_code == 404:
                return CatalogMiss(movie_id=movie_id, reason="movie not found in catalog")
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.debug("movie catalog request for %s failed", movie_id, exc_info=True)
            return CatalogMiss(movie_id=movie_id, reason=f"catalog request failed: {e}")

        try:
            summary = MovieSummary.model_validate(payload)
        except ValidationError as e:
            return CatalogMiss(movie_id=movie_id, reason=f"unexpected catalog payload: {e.error_count()} errors")
        return CatalogHit(summary=summary)

    def close(self) -> None:
        self.session.close()


movie_catalog = HttpMovieCatalogGateway(
    base_url=settings.MOVIE_CATALOG_URL,
    timeout=settings.MOVIE_CATALOG_TIMEOUT,
    max_retries=settings.MOVIE_CATALOG_MAX_RETRIES,
)


async def get_movie_catalog() -> MovieCatalogGateway:
    return movie_catalog
