"""FastAPI dependency wiring for backend services.

The store and the OMDb client are process-wide singletons: the store because
its write lock must be shared by every request, the client so its HTTP
connection pool is reused. The lifespan in :mod:`movie_search.main` initialises
and closes them.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from movie_search.services.favorites import FavoritesStore
from movie_search.services.movie_service import MovieService
from movie_search.services.omdb_client import OmdbClient
from movie_search.settings import AppSettings, get_settings


@lru_cache(maxsize=1)
def get_favorites_store() -> FavoritesStore:
    """Return the shared :class:`FavoritesStore` for the configured file."""

    return FavoritesStore(get_settings().favorites_path)


@lru_cache(maxsize=1)
def get_omdb_client() -> OmdbClient:
    """Return the shared :class:`OmdbClient` built from settings."""

    return OmdbClient.from_settings(get_settings())


def get_movie_service(
    store: FavoritesStore = Depends(get_favorites_store),
    client: OmdbClient = Depends(get_omdb_client),
    settings: AppSettings = Depends(get_settings),
) -> MovieService:
    """Provide a :class:`MovieService` wired to the shared collaborators."""

    return MovieService(
        store=store,
        client=client,
        provider_page_size=settings.omdb_page_size,
    )


__all__ = ["get_favorites_store", "get_movie_service", "get_omdb_client"]
