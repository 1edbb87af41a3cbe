"""Pydantic schemas for movies, favorites and search results.

Field names follow Python conventions while the JSON surface keeps the
camelCase keys the frontend consumes (``imdbID``, ``isFavorite``,
``totalResults``...), so every model populates by name *and* alias.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from movie_search.errors import ValidationFailure

IMDB_ID_PATTERN = r"^tt\d{7,}$"
MIN_MOVIE_YEAR = 1888
POSTER_PLACEHOLDER = "N/A"

_IMDB_ID_RE = re.compile(IMDB_ID_PATTERN)
_LEADING_YEAR_RE = re.compile(r"^\s*(\d{4})")


def validate_imdb_id(value: str) -> str:
    """Return ``value`` when it looks like an IMDb title id (``tt`` + 7 digits or more)."""

    if not isinstance(value, str) or not _IMDB_ID_RE.match(value):
        raise ValidationFailure("imdbID must be a valid IMDb ID")
    return value


def validate_poster(value: str) -> str:
    """Accept the ``N/A`` placeholder or an absolute http(s) URL, unchanged."""

    if value == POSTER_PLACEHOLDER:
        return value
    try:
        parsed = urlsplit(value)
    except ValueError as exc:
        raise ValidationFailure("poster must be a URL or 'N/A'") from exc
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationFailure("poster must be a URL or 'N/A'")
    return value


def parse_provider_year(raw: object) -> int | None:
    """Extract the release year from OMDb's ``Year`` field.

    OMDb reports series as ranges (``"2010–2014"`` or ``"2019–"``); only the
    leading year is kept. Returns ``None`` when no year can be read.
    """

    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        return None
    match = _LEADING_YEAR_RE.match(raw)
    if match is None:
        return None
    return int(match.group(1))


class MovieBase(BaseModel):
    """Fields shared by every movie payload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1, description="Display title")
    imdb_id: str = Field(
        ...,
        alias="imdbID",
        pattern=IMDB_ID_PATTERN,
        description="IMDb title identifier, the natural key of a movie",
    )
    year: int = Field(..., ge=MIN_MOVIE_YEAR, description="Release year")
    poster: str = Field(
        ..., description="Absolute poster URL or the literal 'N/A' placeholder"
    )

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("title must not be blank")
        return cleaned

    @field_validator("poster")
    @classmethod
    def _check_poster(cls, value: str) -> str:
        return validate_poster(value)


class FavoriteMovieCreate(MovieBase):
    """Payload accepted by ``POST /movies/favorites``.

    Clients frequently echo the ``isFavorite`` flag they received from a
    search; it is ignored because favorites never store it.
    """


class Movie(MovieBase):
    """Read model returned by the search and favorites endpoints."""

    is_favorite: bool | None = Field(
        None,
        alias="isFavorite",
        description="Whether the movie is in the favorites list (search results only)",
    )


class SearchMoviesData(BaseModel):
    """One page of movies plus the pagination figures the UI needs."""

    model_config = ConfigDict(populate_by_name=True)

    movies: list[Movie] = Field(default_factory=list)
    count: int = Field(..., ge=0, description="Number of movies on this page")
    total_results: int = Field(..., ge=0, alias="totalResults")
    current_page: int = Field(..., ge=1, alias="currentPage")
    total_pages: int = Field(..., ge=0, alias="totalPages")


class SearchMoviesResponse(BaseModel):
    """Envelope shared by the search and favorites listing endpoints."""

    data: SearchMoviesData


__all__ = [
    "FavoriteMovieCreate",
    "IMDB_ID_PATTERN",
    "MIN_MOVIE_YEAR",
    "Movie",
    "MovieBase",
    "POSTER_PLACEHOLDER",
    "SearchMoviesData",
    "SearchMoviesResponse",
    "parse_provider_year",
    "validate_imdb_id",
    "validate_poster",
]
