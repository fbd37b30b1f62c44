"""Shared schema primitives for MCP tool request/response models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

# Page size bounds shared by every listing tool
MIN_LIMIT = 1
MAX_LIMIT = 100


def validate_optional_non_empty_str(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional string fields that cannot be empty/whitespace."""
    if value is None:
        return None
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


def validate_required_non_empty_str(value: str, field_name: str) -> str:
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


def validate_limit_range(value: Optional[int]) -> Optional[int]:
    """Validate an optional page size; ``None`` means 'use the tool default'."""
    if value is None:
        return None
    if value < MIN_LIMIT:
        raise ValueError(f"Invalid limit: {value} is below minimum of {MIN_LIMIT}")
    if value > MAX_LIMIT:
        raise ValueError(f"Invalid limit: {value} exceeds maximum of {MAX_LIMIT}")
    return value


class StrictIgnoreRequest(BaseModel):
    """Request base with strict typing and ignored unknown fields."""

    model_config = ConfigDict(extra="ignore", strict=True)


class StrictResponse(BaseModel):
    """Response/result base with forbidden unknown fields."""

    model_config = ConfigDict(extra="forbid")


class DbPathMixin(BaseModel):
    """Reusable db_path field validation."""

    db_path: Optional[str] = None

    @field_validator("db_path")
    @classmethod
    def validate_db_path(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "db_path")


class LimitMixin(BaseModel):
    """Reusable optional page size field."""

    limit: Optional[int] = None

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, value: Optional[int]) -> Optional[int]:
        return validate_limit_range(value)


class RecordIdRequest(DbPathMixin, StrictIgnoreRequest):
    """Request carrying a single record id (read-by-id tools)."""

    id: str

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        return validate_required_non_empty_str(value, "id")
