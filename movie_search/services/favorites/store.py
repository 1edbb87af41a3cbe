"""File-backed persistence for the favorites list.

The JSON array on disk is the only source of truth: every read goes back to
the file, and every mutation re-reads it, edits it and swaps in a complete
new copy while holding a single in-process lock.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from movie_search.errors import (
    DuplicateFavoriteError,
    FavoriteNotFoundError,
    PersistenceFailure,
)
from movie_search.schemas.movie import FavoriteMovieCreate, Movie, MovieBase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FavoritesPage:
    """A slice of the favorites list along with the full list length."""

    items: list[Movie]
    total: int


def _as_favorite(movie: MovieBase) -> Movie:
    """Copy ``movie`` into a read model without the ``isFavorite`` flag."""

    return Movie(
        title=movie.title,
        imdb_id=movie.imdb_id,
        year=movie.year,
        poster=movie.poster,
    )


def _serialize(favorites: Iterable[Movie]) -> list[dict[str, Any]]:
    return [
        movie.model_dump(by_alias=True, exclude={"is_favorite"}) for movie in favorites
    ]


class FavoritesStore:
    """Reads and writes the favorites JSON file.

    Mutations are serialized through ``asyncio.Lock`` so two concurrent
    requests can never interleave their read and write phases. Readers never
    need the lock because writes land through ``os.replace``.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        """Create the data directory and an empty list when the file is missing."""

        try:
            created = await asyncio.to_thread(self._ensure_file)
        except OSError as exc:
            logger.error("Unable to initialise favorites file %s: %s", self._path, exc)
            raise PersistenceFailure("Failed to initialise favorites storage") from exc
        if created:
            logger.info("Created empty favorites file at %s", self._path)

    async def list_favorites(self) -> list[Movie]:
        """Return every valid favorite in insertion order."""

        return await asyncio.to_thread(self._read_favorites)

    async def exists(self, imdb_id: str) -> bool:
        favorites = await self.list_favorites()
        return any(movie.imdb_id == imdb_id for movie in favorites)

    async def favorite_ids(self) -> set[str]:
        """Return the case-folded ids of every favorite, for membership checks."""

        favorites = await self.list_favorites()
        return {movie.imdb_id.casefold() for movie in favorites}

    async def add(self, movie: FavoriteMovieCreate) -> Movie:
        """Append ``movie`` unless a favorite with the same ``imdbID`` exists."""

        async with self._write_lock:
            favorites = await self.list_favorites()
            if any(existing.imdb_id == movie.imdb_id for existing in favorites):
                raise DuplicateFavoriteError(movie.imdb_id)

            stored = _as_favorite(movie)
            favorites.append(stored)
            await self._save(favorites)

        logger.info("Added %s (%s) to favorites", stored.imdb_id, stored.title)
        return stored

    async def remove(self, imdb_id: str) -> None:
        """Drop the favorite identified by ``imdb_id``."""

        async with self._write_lock:
            favorites = await self.list_favorites()
            remaining = [movie for movie in favorites if movie.imdb_id != imdb_id]
            if len(remaining) == len(favorites):
                raise FavoriteNotFoundError(imdb_id)
            await self._save(remaining)

        logger.info("Removed %s from favorites", imdb_id)

    async def paginate(self, page: int, page_size: int) -> FavoritesPage:
        """Return the ``page``-th slice of ``page_size`` favorites (1-based).

        Pages past the end yield an empty slice rather than an error.
        """

        favorites = await self.list_favorites()
        start = (page - 1) * page_size
        end = page * page_size
        return FavoritesPage(items=favorites[start:end], total=len(favorites))

    async def _save(self, favorites: list[Movie]) -> None:
        payload = _serialize(favorites)
        try:
            await asyncio.to_thread(self._write_payload, payload)
        except OSError as exc:
            logger.error("Error saving favorites to %s: %s", self._path, exc)
            raise PersistenceFailure("Failed to save favorites") from exc

    def _ensure_file(self) -> bool:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if self._path.exists():
            return False
        self._write_payload([])
        return True

    def _read_favorites(self) -> list[Movie]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            logger.warning("Unable to read favorites from %s: %s", self._path, exc)
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Favorites file %s is not valid JSON: %s", self._path, exc)
            return []

        if not isinstance(parsed, list):
            logger.warning(
                "Favorites file %s does not hold a JSON array; ignoring it", self._path
            )
            return []

        favorites: list[Movie] = []
        for index, entry in enumerate(parsed):
            try:
                candidate = FavoriteMovieCreate.model_validate(entry)
            except ValidationError as exc:
                logger.debug(
                    "Dropping invalid favorites entry #%d: %s", index, exc.errors()
                )
                continue
            favorites.append(_as_favorite(candidate))
        return favorites

    def _write_payload(self, payload: list[dict[str, Any]]) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                delete=False,
                dir=directory,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            ) as handle:
                temp_name = handle.name
                json.dump(payload, handle, ensure_ascii=False, indent=2)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())

            os.replace(temp_name, self._path)
            temp_name = None
        finally:
            if temp_name is not None:
                Path(temp_name).unlink(missing_ok=True)


__all__ = ["FavoritesPage", "FavoritesStore"]
