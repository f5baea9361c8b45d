"""
Marathon Event API — Shared Schemas
=====================================

What:  Pydantic models shared by every resource: driver write results,
       error and health payloads, and the ISO-date validator used by the
       resource schemas.
How:   Write results mirror the MongoDB driver's JSON shape
       (`insertedId`, `matchedCount`, ...) so existing clients keep working.
"""

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def validate_iso_date(value: Optional[str]) -> Optional[str]:
    """
    Accepts `YYYY-MM-DD` or a longer ISO 8601 string starting with one.

    The value is stored unchanged; date-only comparisons rely on the
    lexicographic order of the leading `YYYY-MM-DD`.
    """
    if value is None:
        return value
    try:
        date.fromisoformat(value[:10])
    except ValueError:
        raise ValueError(f"'{value}' is not an ISO 8601 date (YYYY-MM-DD)")
    return value


def reject_identifier_field(data: Any) -> Any:
    """Store-assigned identifiers can't be supplied in a request body."""
    if isinstance(data, dict) and "_id" in data:
        raise ValueError("'_id' is assigned by the store and cannot be set")
    return data


def reject_null(value: Any) -> Any:
    """Required fields may be left out of a patch but not cleared with null."""
    if value is None:
        raise ValueError("field cannot be null")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Driver Result Projections
# ══════════════════════════════════════════════════════════════════════════


class InsertResult(BaseModel):
    """Returned by POST endpoints (HTTP 201)."""
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(default=True)
    inserted_id: str = Field(alias="insertedId", description="Store-assigned identifier")


class UpdateResult(BaseModel):
    """Returned by PATCH endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(default=True)
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")


class DeleteResult(BaseModel):
    """Returned by DELETE endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = Field(default=True)
    deleted_count: int = Field(alias="deletedCount")


# ══════════════════════════════════════════════════════════════════════════
# Error & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "'abc' is not a valid identifier",
            "details": {"field": "id"},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
