"""
Tool handlers for shortlists and their candidates.

Membership is an upsert: adding a contractor who is already on the
shortlist refreshes the item instead of failing, so there is at most one
item per (shortlist, contractor) pair.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from db.connection import get_connection
from db.records_writer import RecordsWriter
from db.shortlists_reader import get_shortlist_row, query_candidate_rows, query_shortlist_summaries
from models.errors import ToolError, create_internal_error, not_found
from schemas.common import RecordIdRequest
from schemas.records import (
    CandidateRecord,
    ShortlistItemRecord,
    ShortlistRecord,
    ShortlistSummary,
    normalize,
    normalize_all,
)
from schemas.shortlists import (
    AddToShortlistRequest,
    AddToShortlistResponse,
    CreateShortlistRequest,
    ListShortlistsRequest,
    ShortlistDetail,
    UpdateCandidateStatusRequest,
)
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import get_current_utc_timestamp

logger = logging.getLogger(__name__)


def create_shortlist(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create an active shortlist.

    Args:
        args: Dictionary containing parameters:
            - name (str): Shortlist name (required)
            - description, role_title, client_name, created_by (str): Optional metadata
            - db_path (str): Database path override

    Returns:
        The created shortlist
    """
    try:
        request = CreateShortlistRequest.model_validate(args)
        timestamp = get_current_utc_timestamp()

        with RecordsWriter(request.db_path) as writer:
            shortlist_id = writer.insert_shortlist(
                name=request.name,
                timestamp=timestamp,
                description=request.description,
                role_title=request.role_title,
                client_name=request.client_name,
                created_by=request.created_by,
            )
            row = writer.get_shortlist(shortlist_id)
            writer.commit()

        logger.info("Created shortlist %s", shortlist_id)
        return normalize(row, ShortlistRecord)

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def add_to_shortlist(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ensure a contractor is on a shortlist, with the latest notes.

    The contractor is checked first, then the shortlist. Re-adding without
    notes keeps the notes already on the item.

    Returns:
        The item plus contractor_name and contractor_title, or
        {"error": "Contractor not found"} / {"error": "Shortlist not found"}
    """
    try:
        request = AddToShortlistRequest.model_validate(args)
        timestamp = get_current_utc_timestamp()

        with RecordsWriter(request.db_path) as writer:
            contractor = writer.get_contractor_brief(request.contractor_id)
            if contractor is None:
                return not_found("Contractor")
            if not writer.shortlist_exists(request.shortlist_id):
                return not_found("Shortlist")

            writer.upsert_shortlist_item(
                request.shortlist_id, request.contractor_id, request.notes, timestamp
            )
            item = writer.get_shortlist_item(request.shortlist_id, request.contractor_id)
            writer.commit()

        result = normalize(item, ShortlistItemRecord)
        result["contractor_name"] = contractor["name"]
        result["contractor_title"] = contractor["title"]
        return AddToShortlistResponse.model_validate(result).model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def get_shortlist(args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Fetch a shortlist with its candidates (oldest addition first).

    Each candidate carries the contractor profile plus the item's status,
    notes and timestamps. Returns None if the shortlist does not exist.
    """
    try:
        request = RecordIdRequest.model_validate(args)
        with get_connection(request.db_path) as conn:
            row = get_shortlist_row(conn, request.id)
            if row is None:
                return None
            candidates = query_candidate_rows(conn, request.id)

        detail = normalize(row, ShortlistRecord)
        detail["candidates"] = normalize_all(candidates, CandidateRecord)
        return ShortlistDetail.model_validate(detail).model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def list_shortlists(args: Dict[str, Any]) -> List[Dict[str, Any]]:
    """List shortlists newest first, each with its candidate_count."""
    try:
        request = ListShortlistsRequest.model_validate(args)
        status = request.status.value if request.status else None
        with get_connection(request.db_path) as conn:
            rows = query_shortlist_summaries(conn, status)
        return normalize_all(rows, ShortlistSummary)

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def update_candidate_status(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Set the status of a contractor's item on a shortlist.

    Returns:
        The updated item, or {"error": "Shortlist item not found"}
    """
    try:
        request = UpdateCandidateStatusRequest.model_validate(args)
        timestamp = get_current_utc_timestamp()

        with RecordsWriter(request.db_path) as writer:
            updated = writer.update_shortlist_item_status(
                request.shortlist_id, request.contractor_id, request.status, timestamp
            )
            if not updated:
                return not_found("Shortlist item")
            item = writer.get_shortlist_item(request.shortlist_id, request.contractor_id)
            writer.commit()

        logger.info(
            "Shortlist %s candidate %s set to %s",
            request.shortlist_id,
            request.contractor_id,
            request.status.value,
        )
        return normalize(item, ShortlistItemRecord)

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
