"""Pydantic schemas for outreach draft tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from models.status import OutreachStatus
from schemas.common import (
    DbPathMixin,
    StrictIgnoreRequest,
    validate_optional_non_empty_str,
    validate_required_non_empty_str,
)
from schemas.contractors import blank_to_none


class DraftOutreachRequest(DbPathMixin, StrictIgnoreRequest):
    """Request schema for draft_outreach."""

    contractor_id: str
    subject: str
    body: str
    shortlist_id: Optional[str] = None

    @field_validator("contractor_id", "subject", "body")
    @classmethod
    def validate_required(cls, value: str, info) -> str:
        return validate_required_non_empty_str(value, info.field_name)

    @field_validator("shortlist_id")
    @classmethod
    def validate_shortlist_id(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "shortlist_id")


class ListOutreachRequest(DbPathMixin, StrictIgnoreRequest):
    contractor_id: Optional[str] = None
    status: Optional[OutreachStatus] = Field(default=None, strict=False)

    @field_validator("contractor_id", "status", mode="before")
    @classmethod
    def blank_filters_to_none(cls, value: Any) -> Any:
        return blank_to_none(value)
