"""Pydantic schemas for shortlist tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from models.status import ShortlistItemStatus, ShortlistStatus
from schemas.common import DbPathMixin, StrictIgnoreRequest, validate_required_non_empty_str
from schemas.contractors import blank_to_none
from schemas.records import CandidateRecord, ShortlistItemRecord, ShortlistRecord


class CreateShortlistRequest(DbPathMixin, StrictIgnoreRequest):
    """Request schema for create_shortlist."""

    name: str
    description: Optional[str] = None
    role_title: Optional[str] = None
    client_name: Optional[str] = None
    created_by: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return validate_required_non_empty_str(value, "name")


class ShortlistMemberRequest(DbPathMixin, StrictIgnoreRequest):
    """Common (shortlist_id, contractor_id) pair."""

    shortlist_id: str
    contractor_id: str

    @field_validator("shortlist_id", "contractor_id")
    @classmethod
    def validate_ids(cls, value: str, info) -> str:
        return validate_required_non_empty_str(value, info.field_name)


class AddToShortlistRequest(ShortlistMemberRequest):
    notes: Optional[str] = None


class AddToShortlistResponse(ShortlistItemRecord):
    contractor_name: Optional[str] = None
    contractor_title: Optional[str] = None


class UpdateCandidateStatusRequest(ShortlistMemberRequest):
    status: ShortlistItemStatus = Field(strict=False)


class ListShortlistsRequest(DbPathMixin, StrictIgnoreRequest):
    status: Optional[ShortlistStatus] = Field(default=None, strict=False)

    @field_validator("status", mode="before")
    @classmethod
    def blank_status_to_none(cls, value: Any) -> Any:
        return blank_to_none(value)


class ShortlistDetail(ShortlistRecord):
    """A shortlist with its candidates, oldest addition first."""

    candidates: list[CandidateRecord]
