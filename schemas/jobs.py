"""Pydantic schemas for job listing, status and matching tools."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, field_validator

from models.status import JobStatus, JobUrgency
from schemas.common import (
    DbPathMixin,
    LimitMixin,
    StrictIgnoreRequest,
    StrictResponse,
    validate_required_non_empty_str,
)
from schemas.contractors import blank_to_none
from schemas.records import ContractorRecord, JobRecord, StoreInt, StoreRecord, StringSet


class ListJobsRequest(DbPathMixin, LimitMixin, StrictIgnoreRequest):
    """Request schema for list_jobs."""

    status: Optional[JobStatus] = Field(default=None, strict=False)
    sector: Optional[str] = None
    urgency: Optional[JobUrgency] = Field(default=None, strict=False)
    location: Optional[str] = None

    @field_validator("status", "sector", "urgency", "location", mode="before")
    @classmethod
    def blank_filters_to_none(cls, value: Any) -> Any:
        return blank_to_none(value)


class ListJobsResponse(StrictResponse):
    total: int
    jobs: list[JobRecord]


class UpdateJobStatusRequest(DbPathMixin, StrictIgnoreRequest):
    """Request schema for update_job_status."""

    id: str
    status: JobStatus = Field(strict=False)

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        return validate_required_non_empty_str(value, "id")


class FindMatchingContractorsRequest(DbPathMixin, LimitMixin, StrictIgnoreRequest):
    """Request schema for find_matching_contractors."""

    job_id: str

    @field_validator("job_id")
    @classmethod
    def validate_job_id(cls, value: str) -> str:
        return validate_required_non_empty_str(value, "job_id")


class JobSummary(StoreRecord):
    """The requirement-bearing subset of a job echoed back with matches."""

    id: str
    title: Optional[str] = None
    client_name: Optional[str] = None
    location: Optional[str] = None
    day_rate_min: StoreInt = None
    day_rate_max: StoreInt = None
    required_certifications: StringSet = []
    required_skills: StringSet = []
    required_clearance: Optional[str] = None
    experience_min: StoreInt = None
    status: Optional[str] = None
    urgency: Optional[str] = None


class MatchedContractor(ContractorRecord):
    """A candidate annotated with how it meets the job's requirements."""

    matching_certifications: list[str]
    matching_skills: list[str]
    location_match: bool
    within_budget: bool


class FindMatchingContractorsResponse(StrictResponse):
    job: JobSummary
    total_matches: int
    contractors: list[MatchedContractor]
