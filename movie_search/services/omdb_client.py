"""Async client for OMDb title searches.

OMDb answers HTTP 200 even when nothing matched, signalling it through the
string fields ``Response`` (``"False"``) and ``Error``. It also reports
``totalResults`` as a string. :meth:`OmdbClient.search` turns those quirks
into a plain :class:`OmdbSearchPage`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from movie_search.errors import SearchFailure, SearchTimeout
from movie_search.schemas.movie import FavoriteMovieCreate, parse_provider_year
from movie_search.settings import (
    DEFAULT_OMDB_BASE_URL,
    DEFAULT_OMDB_TIMEOUT_SECONDS,
    AppSettings,
)

logger = logging.getLogger(__name__)

_LEADING_DIGITS_RE = re.compile(r"^\s*(\d+)")


@dataclass(frozen=True)
class OmdbSearchPage:
    """Normalized result of a single OMDb search request."""

    movies: list[FavoriteMovieCreate] = field(default_factory=list)
    total_results: int = 0


def _is_no_results(payload: Mapping[str, Any]) -> bool:
    response_flag = payload.get("Response")
    if isinstance(response_flag, str) and response_flag.strip().lower() == "false":
        return True
    return bool(payload.get("Error"))


def _parse_total_results(raw: object) -> int:
    """Read the leading digits of ``raw`` (``"87"``, ``"87.0"``), 0 when there are none."""

    if raw is None:
        return 0
    match = _LEADING_DIGITS_RE.match(str(raw))
    if match is None:
        return 0
    return int(match.group(1))


def _parse_movie(entry: object) -> FavoriteMovieCreate | None:
    if not isinstance(entry, Mapping):
        return None
    try:
        return FavoriteMovieCreate(
            title=entry.get("Title"),
            imdb_id=entry.get("imdbID"),
            year=parse_provider_year(entry.get("Year")),
            poster=entry.get("Poster"),
        )
    except ValidationError as exc:
        logger.debug(
            "Skipping OMDb entry %s: %s", entry.get("imdbID"), exc.errors()
        )
        return None


def normalize_search_payload(payload: object) -> OmdbSearchPage:
    """Convert a decoded OMDb search body into an :class:`OmdbSearchPage`."""

    if not isinstance(payload, Mapping):
        raise SearchFailure("OMDb returned an unexpected payload")

    if _is_no_results(payload):
        return OmdbSearchPage()

    entries = payload.get("Search") or []
    if not isinstance(entries, list):
        entries = []

    movies = [movie for movie in map(_parse_movie, entries) if movie is not None]
    return OmdbSearchPage(
        movies=movies,
        total_results=_parse_total_results(payload.get("totalResults")),
    )


class OmdbClient:
    """Issues title searches against OMDb.

    The underlying :class:`httpx.AsyncClient` is created on first use and
    reused for the lifetime of the process; pass ``http_client`` to inject a
    preconfigured one (tests use :class:`httpx.MockTransport`).
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = DEFAULT_OMDB_BASE_URL,
        timeout_seconds: float = DEFAULT_OMDB_TIMEOUT_SECONDS,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._http_client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_settings(cls, settings: AppSettings) -> OmdbClient:
        return cls(
            api_key=settings.omdb_api_key,
            base_url=settings.omdb_base_url,
            timeout_seconds=settings.omdb_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def search(self, title: str, page: int = 1) -> OmdbSearchPage:
        """Search OMDb for ``title`` and return the requested result page.

        Raises :class:`SearchTimeout` when OMDb is too slow and
        :class:`SearchFailure` for any other transport or payload problem.
        A "no results" answer is not an error.
        """

        params = {
            "apikey": self._api_key or "",
            "s": title,
            "page": page,
            "plot": "full",
        }
        logger.debug("Searching OMDb for %r (page %d)", title, page)

        try:
            response = await self._client().get(
                self._base_url, params=params, timeout=self._timeout
            )
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("OMDb search for %r timed out", title)
            raise SearchTimeout("OMDb request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "OMDb search for %r failed with HTTP %s",
                title,
                exc.response.status_code,
            )
            raise SearchFailure(
                f"OMDb responded with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.InvalidURL as exc:
            logger.error("OMDb endpoint %r is not a valid URL", self._base_url)
            raise SearchFailure("OMDb endpoint is misconfigured") from exc
        except httpx.HTTPError as exc:
            logger.warning("OMDb search for %r failed: %s", title, type(exc).__name__)
            raise SearchFailure("OMDb request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("OMDb returned a non-JSON body for %r", title)
            raise SearchFailure("OMDb returned invalid JSON") from exc

        return normalize_search_payload(payload)

    async def aclose(self) -> None:
        """Close the HTTP client when this instance created it."""

        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


__all__ = ["OmdbClient", "OmdbSearchPage", "normalize_search_payload"]
