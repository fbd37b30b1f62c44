"""Pydantic schemas for get_pipeline."""

from __future__ import annotations

from pydantic import Field

from schemas.common import StrictResponse
from schemas.records import EngagementWithContractor, JobRecord, OutreachListItem, ShortlistSummary


class PipelineSummary(StrictResponse):
    open_jobs_count: int = Field(ge=0)
    active_shortlists_count: int = Field(ge=0)
    active_engagements_count: int = Field(ge=0)
    pending_outreach_count: int = Field(ge=0)


class PipelineResponse(StrictResponse):
    """Read-only snapshot across jobs, shortlists, engagements and outreach."""

    open_jobs: list[JobRecord]
    active_shortlists: list[ShortlistSummary]
    active_engagements: list[EngagementWithContractor]
    pending_outreach: list[OutreachListItem]
    summary: PipelineSummary
