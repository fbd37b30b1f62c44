"""
Tool handlers for outreach drafts.

Drafts are only created here; sending and replies are tracked outside
this server.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from db.connection import get_connection
from db.outreach_reader import query_outreach_rows
from db.records_writer import RecordsWriter
from models.errors import ToolError, create_internal_error, not_found
from schemas.outreach import DraftOutreachRequest, ListOutreachRequest
from schemas.records import OutreachListItem, OutreachRecord, normalize, normalize_all
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import get_current_utc_timestamp

logger = logging.getLogger(__name__)


def draft_outreach(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Save an outreach draft for a contractor.

    Args:
        args: Dictionary containing parameters:
            - contractor_id (str): Recipient (required)
            - subject (str): Subject line (required)
            - body (str): Message body (required)
            - shortlist_id (str): Optional shortlist the outreach relates to
            - db_path (str): Database path override

    Returns:
        The draft (status 'draft') plus contractor_name and contractor_email,
        or {"error": "Contractor not found"} / {"error": "Shortlist not found"}
    """
    try:
        request = DraftOutreachRequest.model_validate(args)
        timestamp = get_current_utc_timestamp()

        with RecordsWriter(request.db_path) as writer:
            contractor = writer.get_contractor_brief(request.contractor_id)
            if contractor is None:
                return not_found("Contractor")
            if request.shortlist_id is not None and not writer.shortlist_exists(
                request.shortlist_id
            ):
                return not_found("Shortlist")

            draft_id = writer.insert_outreach_draft(
                contractor_id=request.contractor_id,
                subject=request.subject,
                body=request.body,
                timestamp=timestamp,
                shortlist_id=request.shortlist_id,
            )
            row = writer.get_outreach_draft(draft_id)
            writer.commit()

        logger.info("Drafted outreach %s for contractor %s", draft_id, request.contractor_id)

        result = normalize(row, OutreachRecord)
        result["contractor_name"] = contractor["name"]
        result["contractor_email"] = contractor["email"]
        return OutreachListItem.model_validate(result).model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e


def list_outreach(args: Dict[str, Any]) -> List[Dict[str, Any]]:
    """List outreach drafts newest first, optionally by contractor and/or status."""
    try:
        request = ListOutreachRequest.model_validate(args)
        status = request.status.value if request.status else None
        with get_connection(request.db_path) as conn:
            rows = query_outreach_rows(conn, request.contractor_id, status)
        return normalize_all(rows, OutreachListItem)

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
