"""Tests asserting ``movie_search.main`` exception handlers map domain errors."""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from starlette.datastructures import Headers

import movie_search.main as movie_main
from movie_search.errors import (
    SEARCH_UNAVAILABLE_MESSAGE,
    DuplicateFavoriteError,
    FavoriteNotFoundError,
    PersistenceFailure,
    SearchFailure,
    SearchTimeout,
    SearchUnavailableError,
)
from movie_search.schemas.error import ErrorType, ValidationErrorResponse
from movie_search.utils.request_context import clear_request_id, set_request_id


def _build_request(path: str = "/resource") -> Request:
    """Create a minimal ``Request`` suitable for invoking handlers."""

    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": Headers().raw,
    }
    return Request(scope)


def _unavailable(cause: Exception) -> SearchUnavailableError:
    try:
        raise SearchUnavailableError() from cause
    except SearchUnavailableError as exc:
        return exc


@pytest.mark.asyncio
async def test_validation_exception_handler_uses_builder(monkeypatch):
    """Ensure request validation handler delegates to the helper utility."""

    token = set_request_id("req-1")
    request = _build_request("/movies/search")
    exc = RequestValidationError(
        [
            {
                "loc": ["query", "page"],
                "msg": "Input should be greater than or equal to 1",
                "input": "0",
            }
        ]
    )

    called: dict[str, object] = {}

    def fake_builder(**kwargs):
        called["kwargs"] = kwargs
        return ValidationErrorResponse(
            error_type=ErrorType.VALIDATION_ERROR,
            message="Request validation failed",
            detail="1 validation error(s)",
            status_code=status.HTTP_400_BAD_REQUEST,
            timestamp=datetime(2024, 1, 1, tzinfo=UTC),
            request_id="req-1",
            path="/movies/search",
            errors=kwargs["errors"],
        )

    monkeypatch.setattr(movie_main, "build_validation_error_response", fake_builder)

    try:
        response = await movie_main.validation_exception_handler(request, exc)
    finally:
        clear_request_id(token)

    assert called["kwargs"]["path"] == "/movies/search"
    assert called["kwargs"]["status_code"] == status.HTTP_400_BAD_REQUEST
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    json_content = json.loads(response.body.decode())
    assert json_content["errors"][0]["field"] == "query.page"
    assert json_content["errors"][0]["value"] == "0"


@pytest.mark.asyncio
async def test_duplicate_favorite_maps_to_400_conflict():
    response = await movie_main.duplicate_favorite_handler(
        _build_request("/movies/favorites"), DuplicateFavoriteError("tt1375666")
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = json.loads(response.body.decode())
    assert body["error_type"] == "conflict"
    assert body["message"] == "Movie already in favorites"
    assert "tt1375666" in body["detail"]


@pytest.mark.asyncio
async def test_favorite_not_found_maps_to_404():
    response = await movie_main.favorite_not_found_handler(
        _build_request("/movies/favorites/tt0000001"),
        FavoriteNotFoundError("tt0000001"),
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    body = json.loads(response.body.decode())
    assert body["error_type"] == "not_found"
    assert body["message"] == "Movie not found in favorites"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("cause", "expected_status", "expected_type"),
    [
        (SearchFailure("OMDb responded with HTTP 500"), 503, "upstream_error"),
        (SearchTimeout("OMDb timed out"), 504, "timeout_error"),
    ],
)
async def test_search_unavailable_hides_cause(cause, expected_status, expected_type):
    response = await movie_main.search_unavailable_handler(
        _build_request("/movies/search"), _unavailable(cause)
    )

    assert response.status_code == expected_status
    body = json.loads(response.body.decode())
    assert body["error_type"] == expected_type
    assert body["message"] == SEARCH_UNAVAILABLE_MESSAGE
    assert body["retry_after"] == 5
    assert str(cause) not in response.body.decode()


@pytest.mark.asyncio
async def test_persistence_failure_maps_to_500():
    response = await movie_main.persistence_failure_handler(
        _build_request("/movies/favorites"),
        PersistenceFailure("Could not save favorites"),
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = json.loads(response.body.decode())
    assert body["error_type"] == "storage_error"


@pytest.mark.asyncio
async def test_generic_exception_handler_returns_internal_error():
    token = set_request_id("req-9")
    try:
        response = await movie_main.generic_exception_handler(
            _build_request("/movies/favorites/list"), RuntimeError("kaboom")
        )
    finally:
        clear_request_id(token)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    body = json.loads(response.body.decode())
    assert body["error_type"] == "internal_error"
    assert body["request_id"] == "req-9"
    assert "kaboom" not in response.body.decode()
