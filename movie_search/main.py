import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import movies
from .errors import (
    DuplicateFavoriteError,
    FavoriteNotFoundError,
    PersistenceFailure,
    SearchUnavailableError,
    ValidationFailure,
)
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.dependencies import get_favorites_store, get_omdb_client
from .settings import AppSettings, get_settings
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# httpx logs full request URLs at INFO, and the OMDb key travels in the query string.
for _noisy_logger in ("httpx", "httpcore"):
    logging.getLogger(_noisy_logger).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def _validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log a warning block for every missing optional configuration value."""

    warnings = (active_settings or settings).optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


def validate_environment() -> None:
    """Public wrapper so CLI entry points can trigger configuration validation."""

    _validate_environment()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the favorites file on startup and release the HTTP client on shutdown."""
    validate_environment()

    store = get_favorites_store()

    logger.info("=" * 60)
    logger.info("Movie Search API - Startup")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.app_env}")
    logger.info(f"OMDb endpoint: {settings.omdb_base_url}")
    logger.info(f"OMDb page size: {settings.omdb_page_size}")
    logger.info(f"Favorites file: {store.path}")
    logger.info("=" * 60)

    await store.initialize()

    yield

    logger.info("Shutting down Movie Search API")
    await get_omdb_client().aclose()


app = FastAPI(
    title="Movie Search API",
    version="0.1.0",
    description="Searches OMDb by title and keeps a list of favorite movies.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(
    _default_origins(),
    settings.cors_allow_origins,
    settings.derived_cors_origins,
)
logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))
if settings.cors_allow_origin_regex:
    logger.info(
        "Configured CORS allow_origin_regex: %s", settings.cors_allow_origin_regex
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["*"],
    allow_origin_regex=settings.cors_allow_origin_regex,
)


# Middleware to add request ID to each request
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Tag the request with a fresh id and echo it in ``X-Request-ID``."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    try:
        response = await call_next(request)
    except Exception as exc:
        response = await generic_exception_handler(request, exc)
    response.headers["X-Request-ID"] = request_id
    return response


def _error_json(status_code: int, payload) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject malformed query strings, paths and bodies with HTTP 400."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
        errors=errors,
    )
    return _error_json(status.HTTP_400_BAD_REQUEST, error_response)


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    """Handle validation performed outside pydantic (e.g. blank search terms)."""
    logger.warning(
        "Validation failure for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=str(exc),
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
        errors=[],
    )
    return _error_json(status.HTTP_400_BAD_REQUEST, error_response)


@app.exception_handler(DuplicateFavoriteError)
async def duplicate_favorite_handler(request: Request, exc: DuplicateFavoriteError):
    logger.info(
        "Duplicate favorite %s rejected for request %s", exc.imdb_id, get_request_id()
    )

    error_response = build_error_response(
        error_type=ErrorType.CONFLICT,
        message=str(exc),
        detail=f"{exc.imdb_id} is already in the favorites list.",
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
    )
    return _error_json(status.HTTP_400_BAD_REQUEST, error_response)


@app.exception_handler(FavoriteNotFoundError)
async def favorite_not_found_handler(request: Request, exc: FavoriteNotFoundError):
    logger.info(
        "Favorite %s not found for request %s", exc.imdb_id, get_request_id()
    )

    error_response = build_error_response(
        error_type=ErrorType.NOT_FOUND,
        message=str(exc),
        detail=f"{exc.imdb_id} is not in the favorites list.",
        status_code=status.HTTP_404_NOT_FOUND,
        path=str(request.url.path),
    )
    return _error_json(status.HTTP_404_NOT_FOUND, error_response)


@app.exception_handler(SearchUnavailableError)
async def search_unavailable_handler(request: Request, exc: SearchUnavailableError):
    """Surface OMDb outages with a stable message; timeouts become 504."""
    if exc.timed_out:
        status_code = status.HTTP_504_GATEWAY_TIMEOUT
        error_type = ErrorType.TIMEOUT_ERROR
        detail = "The movie provider took too long to respond."
    else:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        error_type = ErrorType.UPSTREAM_ERROR
        detail = "The movie provider could not be reached."

    logger.error(
        "Search unavailable for request %s to %s (%s)",
        get_request_id(),
        request.url.path,
        type(exc.__cause__).__name__ if exc.__cause__ else "unknown cause",
    )

    error_response = build_error_response(
        error_type=error_type,
        message=str(exc),
        detail=detail,
        status_code=status_code,
        path=str(request.url.path),
        retry_after=5,
    )
    return _error_json(status_code, error_response)


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure):
    """Handle failures writing the favorites file."""
    logger.error(
        "Persistence failure for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        exc,
    )

    error_response = build_error_response(
        error_type=ErrorType.STORAGE_ERROR,
        message=str(exc),
        detail="The favorites list could not be saved. Please try again.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
        retry_after=3,
    )
    return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, error_response)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    error_response = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
        retry_after=5,
    )
    return _error_json(status.HTTP_500_INTERNAL_SERVER_ERROR, error_response)


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(movies.router, prefix="/movies", tags=["movies"])
