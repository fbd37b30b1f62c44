"""
Main MCP tool handler for find_matching_contractors.

Loads the job, derives candidate predicates from its requirements, lets
the store rank candidates (location affinity, rating, experience) and
annotates each with how it meets the job.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from config import get_config
from db.connection import get_connection
from db.contractors_reader import match_contractor_rows
from db.jobs_reader import get_job_row
from models.errors import ToolError, create_internal_error, not_found
from schemas.jobs import FindMatchingContractorsRequest, FindMatchingContractorsResponse
from schemas.records import ContractorRecord, JobRecord, normalize, normalize_all
from utils.matching import annotate_candidate, build_match_filters
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import resolve_limit

logger = logging.getLogger(__name__)


def find_matching_contractors(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rank available contractors against a job's requirements.

    Unavailable contractors are never returned. Required certifications and
    skills match on any overlap; clearance and minimum experience apply only
    when the job sets them.

    Args:
        args: Dictionary containing parameters:
            - job_id (str): Job to match against (required)
            - limit (int): Maximum candidates (1-100, default from config)
            - db_path (str): Database path override

    Returns:
        {
            "job": {...},              # requirement-bearing job summary
            "total_matches": int,      # all candidates, ignoring limit
            "contractors": [           # contractor fields plus:
                {"matching_certifications": [...], "matching_skills": [...],
                 "location_match": bool, "within_budget": bool, ...}
            ]
        }

        {"error": "Job not found"} when the job does not exist, which is
        distinct from a real job with zero matches.
    """
    try:
        request = FindMatchingContractorsRequest.model_validate(args)
        limit = resolve_limit(request.limit, get_config().match_limit)

        with get_connection(request.db_path) as conn:
            job_row = get_job_row(conn, request.job_id)
            if job_row is None:
                return not_found("Job")

            job = normalize(job_row, JobRecord)
            builder = build_match_filters(job)
            total, rows = match_contractor_rows(conn, builder, job.get("location"), limit)

        candidates = [
            annotate_candidate(candidate, job)
            for candidate in normalize_all(rows, ContractorRecord)
        ]
        logger.debug(
            "Job %s matched %d contractors with predicates %s", request.job_id, total, builder.names
        )

        response = FindMatchingContractorsResponse(
            job=job, total_matches=total, contractors=candidates
        )
        return response.model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
