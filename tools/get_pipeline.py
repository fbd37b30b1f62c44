"""
Main MCP tool handler for get_pipeline: a read-only snapshot of open
jobs, active shortlists, live engagements and pending outreach.
"""

from typing import Any, Dict

from pydantic import ValidationError

from db.connection import get_connection
from db.pipeline_reader import query_pipeline_rows
from models.errors import ToolError, create_internal_error
from schemas.common import DbPathMixin, StrictIgnoreRequest
from schemas.pipeline import PipelineResponse, PipelineSummary
from schemas.records import (
    EngagementWithContractor,
    JobRecord,
    OutreachListItem,
    ShortlistSummary,
    normalize_all,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error


class GetPipelineRequest(DbPathMixin, StrictIgnoreRequest):
    """get_pipeline takes no filters; only the db_path override."""


def get_pipeline(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the pipeline overview. Every call re-queries the store.

    Returns:
        {
            "open_jobs": [...],             # neither filled nor cancelled, by urgency
            "active_shortlists": [...],     # with candidate_count (0 for empty)
            "active_engagements": [...],    # pending/confirmed/active, by start date
            "pending_outreach": [...],      # status 'draft', newest first
            "summary": {"open_jobs_count", "active_shortlists_count",
                        "active_engagements_count", "pending_outreach_count"}
        }
    """
    try:
        request = GetPipelineRequest.model_validate(args)
        with get_connection(request.db_path) as conn:
            rows = query_pipeline_rows(conn)

        open_jobs = normalize_all(rows["open_jobs"], JobRecord)
        shortlists = normalize_all(rows["active_shortlists"], ShortlistSummary)
        engagements = normalize_all(rows["active_engagements"], EngagementWithContractor)
        outreach = normalize_all(rows["pending_outreach"], OutreachListItem)

        summary = PipelineSummary(
            open_jobs_count=len(open_jobs),
            active_shortlists_count=len(shortlists),
            active_engagements_count=len(engagements),
            pending_outreach_count=len(outreach),
        )
        response = PipelineResponse(
            open_jobs=open_jobs,
            active_shortlists=shortlists,
            active_engagements=engagements,
            pending_outreach=outreach,
            summary=summary,
        )
        return response.model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
