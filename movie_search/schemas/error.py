"""Error payloads returned by every failing endpoint."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    """Categories of failures surfaced to API clients."""

    VALIDATION_ERROR = "validation_error"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UPSTREAM_ERROR = "upstream_error"
    TIMEOUT_ERROR = "timeout_error"
    STORAGE_ERROR = "storage_error"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Standardized error response model."""

    error_type: ErrorType = Field(..., description="Category of error")
    message: str = Field(..., description="Human-readable error message")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(..., description="When the error occurred")
    request_id: str | None = Field(None, description="Identifier echoed in X-Request-ID")
    path: str | None = Field(None, description="Request path that caused the error")
    retry_after: int | None = Field(
        None, description="Seconds to wait before retrying (upstream failures only)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "upstream_error",
                "message": "Something went wrong while searching for movies. Please try again later.",
                "detail": "The movie provider could not be reached.",
                "status_code": 503,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "5b0f7c1e-3f0e-4f55-9d1f-8a1d2b3c4d5e",
                "path": "/movies/search",
                "retry_after": 5,
            }
        }
    )


class ValidationErrorDetail(BaseModel):
    """A single rejected input field."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Error response carrying per-field validation failures."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error_type": "validation_error",
                "message": "Request validation failed",
                "detail": "1 validation error(s)",
                "status_code": 400,
                "timestamp": "2025-11-03T10:30:00Z",
                "request_id": "5b0f7c1e-3f0e-4f55-9d1f-8a1d2b3c4d5e",
                "path": "/movies/favorites/list",
                "errors": [
                    {
                        "field": "query.pageSize",
                        "message": "Input should be less than or equal to 50",
                        "value": "80",
                    },
                ],
            }
        }
    )
