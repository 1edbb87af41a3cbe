"""FastAPI router exposing movie search and the favorites list."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, Response, status

from movie_search.errors import ValidationFailure
from movie_search.schemas.movie import (
    IMDB_ID_PATTERN,
    FavoriteMovieCreate,
    Movie,
    SearchMoviesResponse,
)
from movie_search.services.dependencies import get_movie_service
from movie_search.services.movie_service import MovieService

router = APIRouter()

MAX_FAVORITES_PAGE_SIZE = 50


@router.get("/search", response_model=SearchMoviesResponse)
async def search_movies(
    q: str = Query(..., min_length=1, description="Title to search for."),
    page: int = Query(1, ge=1, description="1-based page of OMDb results."),
    service: MovieService = Depends(get_movie_service),
) -> SearchMoviesResponse:
    """Search OMDb by title, flagging movies that are already favorites."""

    title = q.strip()
    if not title:
        raise ValidationFailure("Query parameter is required")
    return await service.search_movies(title, page)


@router.post(
    "/favorites",
    response_model=Movie,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def add_favorite(
    payload: FavoriteMovieCreate,
    service: MovieService = Depends(get_movie_service),
) -> Movie:
    """Save a movie to the favorites list."""

    return await service.add_favorite(payload)


@router.delete("/favorites/{imdb_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    imdb_id: str = Path(..., pattern=IMDB_ID_PATTERN, description="IMDb title id."),
    service: MovieService = Depends(get_movie_service),
) -> Response:
    """Remove a movie from the favorites list."""

    await service.remove_favorite(imdb_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/favorites/list",
    response_model=SearchMoviesResponse,
    response_model_exclude_none=True,
)
async def list_favorites(
    page: int = Query(1, ge=1, description="1-based page of favorites."),
    page_size: int = Query(
        10,
        ge=1,
        le=MAX_FAVORITES_PAGE_SIZE,
        alias="pageSize",
        description="Number of favorites per page.",
    ),
    service: MovieService = Depends(get_movie_service),
) -> SearchMoviesResponse:
    """Return one page of the favorites list."""

    return await service.list_favorites(page, page_size)
