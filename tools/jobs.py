"""
Tool handlers for job listing, lookup and status transitions.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config import get_config
from db.connection import get_connection
from db.jobs_reader import get_job_row, list_job_rows
from db.query_builder import QueryBuilder
from db.records_writer import RecordsWriter
from models.errors import ToolError, create_internal_error, not_found
from schemas.common import RecordIdRequest
from schemas.jobs import ListJobsRequest, ListJobsResponse, UpdateJobStatusRequest
from schemas.records import JobRecord, normalize, normalize_all
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import get_current_utc_timestamp, resolve_limit

logger = logging.getLogger(__name__)


def build_job_filters(request: ListJobsRequest) -> QueryBuilder:
    builder = QueryBuilder()
    builder.equals("status", request.status.value if request.status else None)
    builder.equals_ignore_case("sector", request.sector)
    builder.equals("urgency", request.urgency.value if request.urgency else None)
    builder.equals_ignore_case("location", request.location)
    return builder


def list_jobs(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    List jobs, most urgent first, then newest first.

    Args:
        args: Dictionary containing optional parameters:
            - status (str): Job status filter
            - sector (str): Sector, case-insensitive
            - urgency (str): low | normal | urgent | critical
            - location (str): Location, case-insensitive
            - limit (int): Page size (1-100, default from config)
            - db_path (str): Database path override

    Returns:
        {"total": int, "jobs": [...]} where total ignores the page size
    """
    try:
        request = ListJobsRequest.model_validate(args)
        limit = resolve_limit(request.limit, get_config().jobs_limit)
        builder = build_job_filters(request)

        with get_connection(request.db_path) as conn:
            total, rows = list_job_rows(conn, builder, limit)

        return ListJobsResponse(total=total, jobs=normalize_all(rows, JobRecord)).model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def get_job(args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Fetch one job by id; None if it does not exist."""
    try:
        request = RecordIdRequest.model_validate(args)
        with get_connection(request.db_path) as conn:
            row = get_job_row(conn, request.id)
        return normalize(row, JobRecord) if row is not None else None

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def update_job_status(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Move a job to a new status and refresh its updated_at.

    Any status in the job vocabulary is accepted; there are no automatic
    transitions.

    Returns:
        The updated job, or {"error": "Job not found"}
    """
    try:
        request = UpdateJobStatusRequest.model_validate(args)
        timestamp = get_current_utc_timestamp()

        with RecordsWriter(request.db_path) as writer:
            if not writer.update_job_status(request.id, request.status, timestamp):
                return not_found("Job")
            row = writer.get_job(request.id)
            writer.commit()

        logger.info("Job %s status set to %s", request.id, request.status.value)
        return normalize(row, JobRecord)

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
