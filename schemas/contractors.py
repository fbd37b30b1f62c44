"""Pydantic schemas for contractor search and lookup tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from models.status import AvailabilityFilter
from schemas.common import (
    DbPathMixin,
    LimitMixin,
    StrictIgnoreRequest,
    StrictResponse,
    validate_required_non_empty_str,
)
from schemas.records import ContractorCV, ContractorRecord

MIN_COMPARE_IDS = 2
MAX_COMPARE_IDS = 10


def blank_to_none(value: Any) -> Any:
    """Treat empty/whitespace-only filter strings as 'no filter'."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def clean_string_set(values: Optional[list[str]]) -> Optional[list[str]]:
    """Strip blanks and duplicates from a filter set, keeping first-seen order."""
    if values is None:
        return None
    cleaned = []
    for value in values:
        if value.strip() and value not in cleaned:
            cleaned.append(value)
    return cleaned or None


class SearchContractorsRequest(DbPathMixin, LimitMixin, StrictIgnoreRequest):
    """Request schema for search_contractors. Every filter is optional."""

    query: Optional[str] = None
    location: Optional[str] = None
    availability: Optional[AvailabilityFilter] = Field(default=None, strict=False)
    certifications: Optional[list[str]] = None
    skills: Optional[list[str]] = None
    sector: Optional[str] = None
    max_rate: Optional[float] = Field(default=None, strict=False)
    min_experience: Optional[int] = None
    clearance: Optional[str] = None

    @field_validator("query", "location", "sector", "clearance", "availability", mode="before")
    @classmethod
    def blank_filters_to_none(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator("certifications", "skills")
    @classmethod
    def clean_sets(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return clean_string_set(value)

    @field_validator("max_rate", "min_experience")
    @classmethod
    def non_negative(cls, value):
        if value is not None and value < 0:
            raise ValueError(f"must be non-negative, got {value}")
        return value


class SearchContractorsResponse(StrictResponse):
    """Success response schema for search_contractors."""

    total_matches: int
    showing: int
    contractors: list[ContractorRecord]


class CompareContractorsRequest(DbPathMixin, StrictIgnoreRequest):
    """Request schema for compare_contractors."""

    ids: list[str]

    @field_validator("ids")
    @classmethod
    def validate_ids(cls, value: list[str]) -> list[str]:
        for item in value:
            validate_required_non_empty_str(item, "ids")
        if len(set(value)) != len(value):
            raise ValueError("Invalid ids: duplicates are not allowed")
        if not MIN_COMPARE_IDS <= len(value) <= MAX_COMPARE_IDS:
            raise ValueError(
                f"Invalid ids: expected {MIN_COMPARE_IDS}-{MAX_COMPARE_IDS} contractor ids, "
                f"got {len(value)}"
            )
        return value


class CompareContractorsResponse(StrictResponse):
    """Contractor CVs in request order plus ids that were not found."""

    contractors: list[ContractorCV]
    missing_ids: list[str]
