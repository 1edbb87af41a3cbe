"""Centralized configuration management for the movie search backend."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load a local .env before the settings singleton is created so that every
# consumer importing :mod:`movie_search.settings` sees the same environment.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_OMDB_BASE_URL = "http://www.omdbapi.com/"
DEFAULT_OMDB_PAGE_SIZE = 10
DEFAULT_OMDB_TIMEOUT_SECONDS = 15.0
DEFAULT_FAVORITES_PATH = "data/favorites.json"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_PORT = 3001


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


def _extract_origin(url: str | None) -> str | None:
    """Return the scheme + netloc portion of ``url`` when valid."""

    if not url:
        return None

    try:
        parsed = urlsplit(url.strip())
    except ValueError:
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    return f"{parsed.scheme}://{parsed.netloc}"


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Values come from the process environment (and a local ``.env`` file). The
    provider page size is part of the external contract with OMDb: the
    provider never reports it, so it must match what OMDb actually returns or
    the search ``totalPages`` figure will be wrong.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    omdb_api_key: str | None = Field(
        default=None,
        alias="OMDB_API_KEY",
        description="API key forwarded to OMDb as the ``apikey`` query parameter.",
    )
    omdb_base_url: str = Field(
        default=DEFAULT_OMDB_BASE_URL,
        alias="OMDB_BASE_URL",
        description="Endpoint used for title searches.",
    )
    omdb_page_size: int = Field(
        default=DEFAULT_OMDB_PAGE_SIZE,
        ge=1,
        alias="OMDB_PAGE_SIZE",
        description="Number of results OMDb returns per search page.",
    )
    omdb_timeout_seconds: float = Field(
        default=DEFAULT_OMDB_TIMEOUT_SECONDS,
        gt=0,
        alias="OMDB_TIMEOUT_SECONDS",
        description="Seconds to wait for OMDb before failing the search.",
    )
    favorites_path: Path = Field(
        default=Path(DEFAULT_FAVORITES_PATH),
        alias="FAVORITES_PATH",
        description="Location of the JSON file holding the favorites list.",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of additional CORS origins.",
    )
    cors_allow_origin_regex: str | None = Field(
        default=None,
        alias="CORS_ALLOW_ORIGIN_REGEX",
        description="Optional regular expression evaluated by the CORS middleware.",
    )
    public_frontend_url: str | None = Field(
        default=None,
        alias="PUBLIC_FRONTEND_URL",
        description="Externally reachable frontend URL used as a CORS hint.",
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        alias="LOG_LEVEL",
        description="Root logging level (e.g. INFO, DEBUG, WARNING).",
    )
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=DEFAULT_PORT, alias="PORT")
    app_env: str = Field(default="development", alias="APP_ENV")

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins supplied via environment variables."""

        if not self.cors_allow_origins_raw:
            return []

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin]

    @property
    def derived_cors_origins(self) -> list[str]:
        origin = _extract_origin(self.public_frontend_url)
        return [origin] if origin else []

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset configuration."""

        warnings: list[str] = []

        if not self.omdb_api_key:
            warnings.append(
                "OMDB_API_KEY is not set - movie searches will fail until a key is provided"
            )

        if not self.cors_allow_origins:
            warnings.append(
                "CORS_ALLOW_ORIGINS is not set - using default localhost origins only "
                "(may cause CORS issues in production)"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_FAVORITES_PATH",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_OMDB_BASE_URL",
    "DEFAULT_OMDB_PAGE_SIZE",
    "DEFAULT_OMDB_TIMEOUT_SECONDS",
    "get_settings",
]
