import json

import pytest
import requests
from requests.adapters import BaseAdapter

from cinema_service.clients.movie_catalog import HttpMovieCatalogGateway
from cinema_service.domain.ports import CatalogHit, CatalogMiss


class StubAdapter(BaseAdapter):
    """Answers every request from a canned table keyed by URL."""

    def __init__(self, routes):
        super().__init__()
        self.routes = routes
        self.requested = []

    def send(self, request, **kwargs):
        self.requested.append(request.url)
        answer = self.routes.get(request.url)
        if isinstance(answer, Exception):
            raise answer
        status, body = answer if answer is not None else (404, {"message": "not found"})
        response = requests.Response()
        response.status_code = status
        response._content = body.encode() if isinstance(body, str) else json.dumps(body).encode()
        response.headers["Content-Type"] = "application/json"
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


def make_gateway(routes):
    adapter = StubAdapter(routes)
    session = requests.Session()
    session.mount("http://", adapter)
    return HttpMovieCatalogGateway("http://catalog.test/api/ ", timeout=1, session=session), adapter


async def test_summary_is_read_from_catalog():
    gateway, adapter = make_gateway({
        "http://catalog.test/api/movies/m1": (200, {"id": "m1", "title": "Inception", "duration": 148,
                                                    "posterUrl": "https://img.example/m1.jpg", "genre": "sci-fi"}),
    })

    lookup = await gateway.get_summary("m1")

    assert isinstance(lookup, CatalogHit)
    assert lookup.summary.title == "Inception"
    assert lookup.summary.poster_url == "https://img.example/m1.jpg"
    assert adapter.requested == ["http://catalog.test/api/movies/m1"]


async def test_movie_id_is_url_quoted():
    gateway, adapter = make_gateway({})
    await gateway.get_summary("a/b c")
    assert adapter.requested == ["http://catalog.test/api/movies/a%2Fb%20c"]


async def test_not_found_is_a_miss():
    gateway, _ = make_gateway({})
    lookup = await gateway.get_summary("m404")
    assert isinstance(lookup, CatalogMiss)
    assert lookup.movie_id == "m404"


@pytest.mark.parametrize("answer", [
    requests.ConnectionError("connection refused"),
    requests.Timeout("read timed out"),
    (500, {"message": "boom"}),
    (200, "not json at all"),
])
async def test_transport_failures_are_misses(answer):
    gateway, _ = make_gateway({"http://catalog.test/api/movies/m1": answer})
    lookup = await gateway.get_summary("m1")
    assert isinstance(lookup, CatalogMiss)
    assert "catalog request failed" in lookup.reason


async def test_unexpected_payload_is_a_miss():
    gateway, _ = make_gateway({"http://catalog.test/api/movies/m1": (200, {"id": "m1"})})
    lookup = await gateway.get_summary("m1")
    assert isinstance(lookup, CatalogMiss)
    assert "unexpected catalog payload" in lookup.reason
