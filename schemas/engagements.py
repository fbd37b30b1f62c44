"""Pydantic schemas for book_contractor."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import field_validator, model_validator

from schemas.common import (
    DbPathMixin,
    StrictIgnoreRequest,
    StrictResponse,
    validate_optional_non_empty_str,
    validate_required_non_empty_str,
)
from schemas.records import EngagementRecord


class BookContractorRequest(DbPathMixin, StrictIgnoreRequest):
    """Request schema for book_contractor. Dates are ISO ``YYYY-MM-DD`` strings."""

    contractor_id: str
    role_title: str
    client_name: Optional[str] = None
    shortlist_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    agreed_rate: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("contractor_id", "role_title")
    @classmethod
    def validate_required(cls, value: str, info) -> str:
        return validate_required_non_empty_str(value, info.field_name)

    @field_validator("shortlist_id")
    @classmethod
    def validate_shortlist_id(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "shortlist_id")

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_iso_date(cls, value: Optional[str], info) -> Optional[str]:
        if value is None:
            return None
        try:
            date.fromisoformat(value)
        except ValueError as e:
            raise ValueError(
                f"Invalid {info.field_name}: expected YYYY-MM-DD, got {value!r}"
            ) from e
        return value

    @field_validator("agreed_rate")
    @classmethod
    def validate_agreed_rate(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError(f"Invalid agreed_rate: must be non-negative, got {value}")
        return value

    @model_validator(mode="after")
    def end_not_before_start(self) -> "BookContractorRequest":
        if self.start_date and self.end_date:
            if date.fromisoformat(self.end_date) < date.fromisoformat(self.start_date):
                raise ValueError("Invalid end_date: cannot be before start_date")
        return self


class BookContractorResponse(StrictResponse):
    engagement: EngagementRecord
    contractor_name: Optional[str] = None
    contractor_email: Optional[str] = None
    message: str
