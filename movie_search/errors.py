"""Domain exceptions raised by the store, the OMDb client and the movie service.

The HTTP layer maps each class onto a status code in :mod:`movie_search.main`;
none of them is fatal to the process.
"""

from __future__ import annotations

SEARCH_UNAVAILABLE_MESSAGE = (
    "Something went wrong while searching for movies. Please try again later."
)


class MovieSearchError(Exception):
    """Base class for every failure raised by the backend."""


class ValidationFailure(MovieSearchError, ValueError):
    """Raised when an input does not have the expected shape."""


class DuplicateFavoriteError(MovieSearchError, ValueError):
    """Raised when adding a movie whose ``imdbID`` is already a favorite."""

    def __init__(self, imdb_id: str) -> None:
        super().__init__("Movie already in favorites")
        self.imdb_id = imdb_id


class FavoriteNotFoundError(MovieSearchError, LookupError):
    """Raised when removing a movie that is not in the favorites list."""

    def __init__(self, imdb_id: str) -> None:
        super().__init__("Movie not found in favorites")
        self.imdb_id = imdb_id


class SearchFailure(MovieSearchError):
    """OMDb could not be reached or answered with something unusable."""


class SearchTimeout(SearchFailure):
    """OMDb did not answer within the configured timeout."""


class SearchUnavailableError(MovieSearchError):
    """Stable, caller-facing wrapper for any :class:`SearchFailure`.

    The underlying failure stays reachable through ``__cause__`` for logging
    but never leaks into the message.
    """

    def __init__(self, message: str = SEARCH_UNAVAILABLE_MESSAGE) -> None:
        super().__init__(message)

    @property
    def timed_out(self) -> bool:
        return isinstance(self.__cause__, SearchTimeout)


class PersistenceFailure(MovieSearchError):
    """Raised when the favorites file could not be written."""


__all__ = [
    "DuplicateFavoriteError",
    "FavoriteNotFoundError",
    "MovieSearchError",
    "PersistenceFailure",
    "SEARCH_UNAVAILABLE_MESSAGE",
    "SearchFailure",
    "SearchTimeout",
    "SearchUnavailableError",
    "ValidationFailure",
]
