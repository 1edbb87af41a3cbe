"""Pydantic schemas for API requests and responses."""

from movie_search.schemas.error import (  # noqa: F401
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from movie_search.schemas.movie import (  # noqa: F401
    FavoriteMovieCreate,
    Movie,
    SearchMoviesData,
    SearchMoviesResponse,
)
