"""Tests covering startup and shutdown work done inside the FastAPI lifespan."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from fastapi import FastAPI

import movie_search.main as movie_main
from movie_search.services.favorites import FavoritesStore
from movie_search.settings import AppSettings


class _RecordingClient:
    """Stand-in for the OMDb client that records whether it was closed."""

    def __init__(self) -> None:
        self.closed = False

    async def aclose(self) -> None:
        self.closed = True


def _prepare_lifespan_dependencies(
    monkeypatch: pytest.MonkeyPatch,
    favorites_path: Path,
    active_settings: AppSettings,
) -> _RecordingClient:
    """Point the lifespan at a temporary favorites file and a fake client."""

    store = FavoritesStore(favorites_path)
    client = _RecordingClient()
    monkeypatch.setattr(movie_main, "settings", active_settings)
    monkeypatch.setattr(movie_main, "get_favorites_store", lambda: store)
    monkeypatch.setattr(movie_main, "get_omdb_client", lambda: client)
    return client


async def _run_lifespan() -> None:
    """Execute the FastAPI lifespan context to trigger startup hooks."""

    app = FastAPI()
    async with movie_main.lifespan(app):
        pass


def _warning_messages(caplog: pytest.LogCaptureFixture) -> list[str]:
    """Return warning-level log messages produced by ``movie_search.main``."""

    return [
        record.getMessage()
        for record in caplog.records
        if record.levelno >= logging.WARNING and record.name == movie_main.logger.name
    ]


@pytest.mark.asyncio
async def test_lifespan_creates_favorites_file_and_closes_client(
    monkeypatch: pytest.MonkeyPatch, favorites_path: Path
) -> None:
    client = _prepare_lifespan_dependencies(
        monkeypatch,
        favorites_path,
        AppSettings(omdb_api_key="k3y", cors_allow_origins_raw="https://example.com"),
    )

    await _run_lifespan()

    assert json.loads(favorites_path.read_text(encoding="utf-8")) == []
    assert client.closed is True


@pytest.mark.asyncio
async def test_lifespan_emits_warnings_when_optional_env_missing(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    favorites_path: Path,
) -> None:
    """Missing configuration is reported but never stops the server."""

    caplog.clear()
    caplog.set_level(logging.WARNING, movie_main.logger.name)
    monkeypatch.delenv("OMDB_API_KEY", raising=False)
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    _prepare_lifespan_dependencies(monkeypatch, favorites_path, AppSettings())

    await _run_lifespan()

    messages = _warning_messages(caplog)
    assert any(
        "Environment Configuration Warnings" in message for message in messages
    ), "Expected missing optional config warnings to be logged."
    assert any("OMDB_API_KEY" in message for message in messages)
    assert favorites_path.exists()


@pytest.mark.asyncio
async def test_lifespan_suppresses_warnings_when_env_complete(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
    favorites_path: Path,
) -> None:
    caplog.clear()
    caplog.set_level(logging.WARNING, movie_main.logger.name)
    _prepare_lifespan_dependencies(
        monkeypatch,
        favorites_path,
        AppSettings(omdb_api_key="k3y", cors_allow_origins_raw="https://example.com"),
    )

    await _run_lifespan()

    messages = _warning_messages(caplog)
    assert all(
        "Environment Configuration Warnings" not in message for message in messages
    ), "Did not expect optional configuration warnings when overrides are supplied."
