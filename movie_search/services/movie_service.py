"""Business logic behind the ``/movies`` endpoints.

:class:`MovieService` coordinates two collaborators:

* :class:`OmdbClient`: title searches against OMDb.
* :class:`FavoritesStore`: the persisted favorites list.

Search results are decorated with an ``isFavorite`` flag and both listings
share the same pagination envelope.
"""

from __future__ import annotations

import logging
import math

from movie_search.errors import SearchFailure, SearchUnavailableError
from movie_search.schemas.movie import (
    FavoriteMovieCreate,
    Movie,
    SearchMoviesData,
    SearchMoviesResponse,
)
from movie_search.services.favorites import FavoritesStore
from movie_search.services.omdb_client import OmdbClient

logger = logging.getLogger(__name__)


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed to show ``total`` items ``page_size`` at a time."""

    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(total / page_size)


def _paginated_response(
    movies: list[Movie], *, total: int, page: int, page_size: int
) -> SearchMoviesResponse:
    return SearchMoviesResponse(
        data=SearchMoviesData(
            movies=movies,
            count=len(movies),
            total_results=total,
            current_page=page,
            total_pages=total_pages(total, page_size),
        )
    )


class MovieService:
    """Composes the OMDb client and the favorites store."""

    def __init__(
        self,
        *,
        store: FavoritesStore,
        client: OmdbClient,
        provider_page_size: int,
    ) -> None:
        self._store = store
        self._client = client
        self._provider_page_size = provider_page_size

    async def search_movies(self, title: str, page: int = 1) -> SearchMoviesResponse:
        """Search OMDb and flag the movies already saved as favorites.

        Membership is checked on case-folded ids. Any OMDb failure is
        re-raised as :class:`SearchUnavailableError` with a fixed message.
        """

        try:
            result = await self._client.search(title, page)
        except SearchFailure as exc:
            logger.warning(
                "Search for %r (page %d) failed: %s: %s",
                title,
                page,
                type(exc).__name__,
                exc,
            )
            raise SearchUnavailableError() from exc

        favorite_ids = await self._store.favorite_ids()
        movies = [
            Movie(
                title=movie.title,
                imdb_id=movie.imdb_id,
                year=movie.year,
                poster=movie.poster,
                is_favorite=movie.imdb_id.casefold() in favorite_ids,
            )
            for movie in result.movies
        ]
        return _paginated_response(
            movies,
            total=result.total_results,
            page=page,
            page_size=self._provider_page_size,
        )

    async def list_favorites(self, page: int = 1, page_size: int = 10) -> SearchMoviesResponse:
        favorites_page = await self._store.paginate(page, page_size)
        return _paginated_response(
            favorites_page.items,
            total=favorites_page.total,
            page=page,
            page_size=page_size,
        )

    async def add_favorite(self, movie: FavoriteMovieCreate) -> Movie:
        return await self._store.add(movie)

    async def remove_favorite(self, imdb_id: str) -> None:
        await self._store.remove(imdb_id)


__all__ = ["MovieService", "total_pages"]
