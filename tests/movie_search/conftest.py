"""Shared fixtures for the movie search backend tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio

from movie_search.schemas.movie import FavoriteMovieCreate
from movie_search.services.favorites import FavoritesStore
from movie_search.services.omdb_client import OmdbClient

OMDB_TEST_URL = "http://omdb.test/"


@pytest.fixture
def favorites_path(tmp_path: Path) -> Path:
    """Location of a favorites file inside a not-yet-created data directory."""

    return tmp_path / "data" / "favorites.json"


@pytest_asyncio.fixture
async def store(favorites_path: Path) -> FavoritesStore:
    """Initialised store backed by a temporary file."""

    favorites = FavoritesStore(favorites_path)
    await favorites.initialize()
    return favorites


@pytest.fixture
def inception() -> FavoriteMovieCreate:
    return FavoriteMovieCreate(
        title="Inception",
        imdb_id="tt1375666",
        year=2010,
        poster="https://x/p.jpg",
    )


@pytest.fixture
def make_movie() -> Callable[[int], FavoriteMovieCreate]:
    """Factory producing distinct, valid favorites keyed by an index."""

    def _make(index: int) -> FavoriteMovieCreate:
        return FavoriteMovieCreate(
            title=f"Movie {index}",
            imdb_id=f"tt{index:07d}",
            year=1990 + index % 30,
            poster="N/A",
        )

    return _make


@pytest.fixture
def omdb_search_payload() -> dict[str, Any]:
    """A successful OMDb search body as returned on the wire."""

    return {
        "Search": [
            {
                "Title": "Inception",
                "Year": "2010",
                "imdbID": "tt1375666",
                "Type": "movie",
                "Poster": "https://m.media-amazon.com/images/inception.jpg",
            },
            {
                "Title": "Inception: The Cobol Job",
                "Year": "2010",
                "imdbID": "tt5295894",
                "Type": "movie",
                "Poster": "N/A",
            },
        ],
        "totalResults": "87",
        "Response": "True",
    }


@pytest.fixture
def make_omdb_client() -> Callable[..., OmdbClient]:
    """Build an :class:`OmdbClient` whose HTTP traffic is served by ``handler``."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        *,
        api_key: str = "test-key",
        timeout_seconds: float = 15.0,
    ) -> OmdbClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return OmdbClient(
            api_key=api_key,
            base_url=OMDB_TEST_URL,
            timeout_seconds=timeout_seconds,
            http_client=http_client,
        )

    return _make


@pytest_asyncio.fixture
async def omdb_json_client(
    make_omdb_client: Callable[..., OmdbClient],
    omdb_search_payload: dict[str, Any],
) -> AsyncIterator[OmdbClient]:
    """Client that always answers with ``omdb_search_payload``."""

    client = make_omdb_client(lambda request: httpx.Response(200, json=omdb_search_payload))
    yield client
    await client.aclose()
