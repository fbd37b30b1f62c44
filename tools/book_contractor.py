"""
Main MCP tool handler for book_contractor.

Booking writes three things in one transaction: the engagement row, the
contractor's availability (forced to 'unavailable') and, when a shortlist
is given, the contractor's item on that shortlist (forced to 'accepted').
Either all three land or none do.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from db.records_writer import RecordsWriter
from models.errors import ToolError, create_internal_error, not_found
from schemas.engagements import BookContractorRequest, BookContractorResponse
from schemas.records import EngagementRecord, normalize
from utils.pydantic_error_mapper import map_pydantic_validation_error
from utils.validation import get_current_utc_timestamp

logger = logging.getLogger(__name__)


def booking_message(contractor_name: str, role_title: str, client_name: Optional[str]) -> str:
    message = f"{contractor_name} has been booked as {role_title}"
    if client_name:
        message += f" for {client_name}"
    return message + ". Their availability is now unavailable."


def book_contractor(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Book a contractor into a confirmed engagement.

    Args:
        args: Dictionary containing parameters:
            - contractor_id (str): Contractor to book (required)
            - role_title (str): Role being filled (required)
            - client_name (str): Optional client
            - shortlist_id (str): Optional shortlist the booking came from
            - start_date, end_date (str): Optional ISO dates (YYYY-MM-DD)
            - agreed_rate (int): Optional agreed day rate
            - notes (str): Optional notes
            - db_path (str): Database path override

    Returns:
        {
            "engagement": {...},          # status 'confirmed'
            "contractor_name": str,
            "contractor_email": str|None,
            "message": str                # names the contractor and role
        }

        {"error": "Contractor not found"} or {"error": "Shortlist not found"}
        when a referenced record does not exist; nothing is written then.

    Booking an already unavailable contractor is allowed; writers are
    serialized by the transaction lock, so two bookings never interleave.
    """
    try:
        request = BookContractorRequest.model_validate(args)
        timestamp = get_current_utc_timestamp()

        with RecordsWriter(request.db_path) as writer:
            contractor = writer.get_contractor_brief(request.contractor_id)
            if contractor is None:
                return not_found("Contractor")
            if request.shortlist_id is not None and not writer.shortlist_exists(
                request.shortlist_id
            ):
                return not_found("Shortlist")

            engagement_id = writer.insert_engagement(
                contractor_id=request.contractor_id,
                role_title=request.role_title,
                timestamp=timestamp,
                client_name=request.client_name,
                shortlist_id=request.shortlist_id,
                start_date=request.start_date,
                end_date=request.end_date,
                agreed_rate=request.agreed_rate,
                notes=request.notes,
            )
            writer.mark_contractor_unavailable(request.contractor_id)

            if request.shortlist_id is not None:
                accepted = writer.accept_shortlist_item(
                    request.shortlist_id, request.contractor_id, timestamp
                )
                if not accepted:
                    logger.info(
                        "Contractor %s is not on shortlist %s; no item to accept",
                        request.contractor_id,
                        request.shortlist_id,
                    )

            engagement = writer.get_engagement(engagement_id)
            writer.commit()

        logger.info(
            "Booked contractor %s (engagement %s)", request.contractor_id, engagement_id
        )

        response = BookContractorResponse(
            engagement=normalize(engagement, EngagementRecord),
            contractor_name=contractor["name"],
            contractor_email=contractor["email"],
            message=booking_message(contractor["name"], request.role_title, request.client_name),
        )
        return response.model_dump()

    except ValidationError as e:
        raise map_pydantic_validation_error(e) from e

    except ToolError:
        raise

    except Exception as e:
        raise create_internal_error(str(e), original_error=e) from e
