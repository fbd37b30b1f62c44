"""Normalized record schemas for rows leaving the record store.

Every row returned by a tool passes through one of these models via
:func:`normalize`. Numeric columns are coerced from text, JSON-array
columns are decoded, empty strings become ``None`` and unknown columns
are dropped, so the output shape never depends on what the driver hands
back.
"""

from __future__ import annotations

from typing import Annotated, Any, Iterable, Optional, Type, TypeVar

from pydantic import BeforeValidator, ConfigDict, ValidationError, model_validator

from models.errors import create_db_error
from schemas.common import StrictResponse
from utils.normalization import (
    coerce_float,
    coerce_int,
    empty_strings_to_none,
    parse_json_list,
    row_to_dict,
)


def _count(value: Any) -> int:
    coerced = coerce_int(value)
    return 0 if coerced is None else coerced


StoreInt = Annotated[Optional[int], BeforeValidator(coerce_int)]
StoreFloat = Annotated[Optional[float], BeforeValidator(coerce_float)]
StoreCount = Annotated[int, BeforeValidator(_count)]
StringSet = Annotated[list[str], BeforeValidator(parse_json_list)]


class StoreRecord(StrictResponse):
    """Base for store rows: extra columns ignored, empty strings normalised to None."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def prepare_row(cls, data: Any) -> Any:
        if not isinstance(data, dict) and hasattr(data, "keys"):
            data = row_to_dict(data)
        return empty_strings_to_none(data)


class EducationEntry(StoreRecord):
    institution: Optional[str] = None
    degree: Optional[str] = None
    year: StoreInt = None


class WorkHistoryEntry(StoreRecord):
    company: Optional[str] = None
    role: Optional[str] = None
    period: Optional[str] = None
    description: Optional[str] = None


class ProjectEntry(StoreRecord):
    name: Optional[str] = None
    description: Optional[str] = None
    client: Optional[str] = None


class ContractorRecord(StoreRecord):
    """Contractor profile as returned by search and get_contractor (no contact/CV fields)."""

    id: str
    name: Optional[str] = None
    initials: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    day_rate: StoreInt = None
    years_experience: StoreInt = None
    availability: Optional[str] = None
    available_from: Optional[str] = None
    certifications: StringSet = []
    sectors: StringSet = []
    skills: StringSet = []
    rating: StoreFloat = None
    review_count: StoreCount = 0
    placement_count: StoreCount = 0
    security_clearance: Optional[str] = None
    created_at: Optional[str] = None


class ContractorCV(ContractorRecord):
    """Full contractor CV including contact details and structured history."""

    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    profile_photo_url: Optional[str] = None
    education: Annotated[list[EducationEntry], BeforeValidator(parse_json_list)] = []
    work_history: Annotated[list[WorkHistoryEntry], BeforeValidator(parse_json_list)] = []
    notable_projects: Annotated[list[ProjectEntry], BeforeValidator(parse_json_list)] = []
    languages: StringSet = []


class CandidateRecord(ContractorRecord):
    """A contractor as a member of a shortlist; ``status`` is the item status."""

    item_id: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    added_at: Optional[str] = None
    updated_at: Optional[str] = None


class JobRecord(StoreRecord):
    id: str
    title: Optional[str] = None
    client_name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    remote_option: Optional[str] = None
    day_rate_min: StoreInt = None
    day_rate_max: StoreInt = None
    duration_weeks: StoreInt = None
    start_date: Optional[str] = None
    required_certifications: StringSet = []
    required_skills: StringSet = []
    required_clearance: Optional[str] = None
    sector: Optional[str] = None
    experience_min: StoreInt = None
    status: Optional[str] = None
    urgency: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ShortlistRecord(StoreRecord):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    role_title: Optional[str] = None
    client_name: Optional[str] = None
    created_by: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ShortlistSummary(ShortlistRecord):
    candidate_count: StoreCount = 0


class ShortlistItemRecord(StoreRecord):
    id: str
    shortlist_id: str
    contractor_id: str
    notes: Optional[str] = None
    status: Optional[str] = None
    added_at: Optional[str] = None
    updated_at: Optional[str] = None


class OutreachRecord(StoreRecord):
    id: str
    contractor_id: str
    shortlist_id: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class OutreachListItem(OutreachRecord):
    contractor_name: Optional[str] = None
    contractor_email: Optional[str] = None


class EngagementRecord(StoreRecord):
    id: str
    contractor_id: str
    shortlist_id: Optional[str] = None
    role_title: Optional[str] = None
    client_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    agreed_rate: StoreInt = None
    status: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class EngagementWithContractor(EngagementRecord):
    contractor_name: Optional[str] = None


RecordT = TypeVar("RecordT", bound=StoreRecord)


def normalize(row: Any, record_cls: Type[RecordT]) -> dict[str, Any]:
    """
    Map one store row to the stable output shape of ``record_cls``.

    Args:
        row: ``sqlite3.Row`` or mapping
        record_cls: Record model describing the output fields

    Returns:
        JSON-serializable dictionary

    Raises:
        ToolError: DB_ERROR if the stored row cannot be coerced
    """
    data = row_to_dict(row)
    try:
        return record_cls.model_validate(data).model_dump()
    except ValidationError as e:
        issue = e.errors()[0]
        field = ".".join(str(part) for part in issue.get("loc", ()))
        raise create_db_error(
            f"Malformed stored record {data.get('id')!r}: {field}: {issue.get('msg')}",
            retryable=False,
            original_error=e,
        ) from e


def normalize_all(rows: Iterable[Any], record_cls: Type[RecordT]) -> list[dict[str, Any]]:
    """Normalize every row with :func:`normalize`, preserving order."""
    return [normalize(row, record_cls) for row in rows]
