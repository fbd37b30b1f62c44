"""
Tool handlers for contractor search, lookup and side-by-side comparison.

search_contractors turns a sparse set of optional filters into a
parameterised query; filter values never reach the SQL text. The lookup
tools return ``None`` when no contractor has the requested id.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config import get_config
from db.connection import get_connection
from db.contractors_reader import (
    CV_COLUMNS,
    get_contractor_row,
    get_contractor_rows_by_id,
    search_contractor_rows,
)
from db.query_builder import QueryBuilder
from models.errors import ToolError, create_internal_error
from models.status import AvailabilityFilter
from schemas.common import RecordIdRequest
from schemas.contractors import (
    CompareContractorsRequest,
    CompareContractorsResponse,
    SearchContractorsRequest,
    SearchContractorsResponse,
)
from schemas.records import ContractorCV, ContractorRecord, normalize, normalize_all
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import resolve_limit

logger = logging.getLogger(__name__)

# Free-text search targets
TEXT_COLUMNS = ("name", "title", "bio")
TEXT_JSON_COLUMNS = ("skills",)


def build_search_filters(request: SearchContractorsRequest) -> QueryBuilder:
    """
    Translate a parsed search request into conjunctive predicates.

    Absent filters add nothing; availability ``any`` adds nothing either.
    """
    builder = QueryBuilder()
    builder.text_search(request.query, TEXT_COLUMNS, TEXT_JSON_COLUMNS)
    builder.equals_ignore_case("location", request.location)

    if request.availability is not None and request.availability != AvailabilityFilter.ANY:
        builder.equals("availability", request.availability.value)

    builder.overlaps("certifications", request.certifications)
    builder.overlaps("skills", request.skills)
    builder.contains_ignore_case("sectors", request.sector)
    builder.at_most("day_rate", request.max_rate)
    builder.at_least("years_experience", request.min_experience)
    builder.equals_ignore_case("security_clearance", request.clearance)
    return builder


def search_contractors(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Search contractors with any combination of optional filters.

    Args:
        args: Dictionary containing optional parameters:
            - query (str): Case-insensitive substring over name, title, bio and skills
            - location (str): Exact location, case-insensitive
            - availability (str): available | within_30_days | unavailable | any
            - certifications (list[str]): Match if any certification is held
            - skills (list[str]): Match if any skill is held
            - sector (str): Exact sector membership, case-insensitive
            - max_rate (number): Maximum day rate (inclusive)
            - min_experience (int): Minimum years of experience (inclusive)
            - clearance (str): Security clearance level, case-insensitive
            - limit (int): Page size (1-100, default from config)
            - db_path (str): Database path override

    Returns:
        {"total_matches": int, "showing": int, "contractors": [...]}
        ordered by rating (unrated last) then review count.

    Raises:
        ToolError: On invalid arguments or store failure
    """
    try:
        request = SearchContractorsRequest.model_validate(args)
        limit = resolve_limit(request.limit, get_config().search_limit)
        builder = build_search_filters(request)

        with get_connection(request.db_path) as conn:
            total, rows = search_contractor_rows(conn, builder, limit)

        contractors = normalize_all(rows, ContractorRecord)
        response = SearchContractorsResponse(
            total_matches=total, showing=len(contractors), contractors=contractors
        )
        return response.model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def get_contractor(args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Fetch one contractor's profile (no contact or CV fields).

    Returns:
        The normalized contractor, or None if the id is unknown
    """
    try:
        request = RecordIdRequest.model_validate(args)
        with get_connection(request.db_path) as conn:
            row = get_contractor_row(conn, request.id)
        return normalize(row, ContractorRecord) if row is not None else None

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def get_contractor_cv(args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Fetch one contractor's full CV: profile, contact details, education,
    work history, notable projects and languages.

    Returns:
        The normalized CV, or None if the id is unknown
    """
    try:
        request = RecordIdRequest.model_validate(args)
        with get_connection(request.db_path) as conn:
            row = get_contractor_row(conn, request.id, columns=CV_COLUMNS)
        return normalize(row, ContractorCV) if row is not None else None

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def compare_contractors(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fetch 2-10 contractor CVs for side-by-side comparison.

    Returns:
        {"contractors": [...], "missing_ids": [...]} with contractors in
        request order; unknown ids are listed rather than failing the call
    """
    try:
        request = CompareContractorsRequest.model_validate(args)
        with get_connection(request.db_path) as conn:
            rows_by_id = get_contractor_rows_by_id(conn, request.ids)

        contractors = [
            normalize(rows_by_id[contractor_id], ContractorCV)
            for contractor_id in request.ids
            if contractor_id in rows_by_id
        ]
        missing = [contractor_id for contractor_id in request.ids if contractor_id not in rows_by_id]
        if missing:
            logger.info("compare_contractors: %d of %d ids not found", len(missing), len(request.ids))

        return CompareContractorsResponse(contractors=contractors, missing_ids=missing).model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
