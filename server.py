#!/usr/bin/env python3
"""
MCP Server entry point for the contractor search tools.

Exposes contractor search and matching, job tracking, shortlists, outreach
drafts, bookings and the pipeline overview over a SQLite record store.

The server uses the FastMCP framework to expose the tools to LLM agents
via the Model Context Protocol.

Usage:
    python server.py

The server runs in stdio mode by default, which is the standard transport
for MCP servers that are invoked by LLM agents.
"""

import logging
from typing import Any, Callable, Dict, Optional

from mcp.server.fastmcp import FastMCP

from config import get_config
from db.schema import ensure_database
from models.errors import ToolError, create_internal_error, is_not_found, not_found
from tools.book_contractor import book_contractor
from tools.find_matching_contractors import find_matching_contractors
from tools.get_pipeline import get_pipeline
from tools.jobs import get_job, list_jobs, update_job_status
from tools.outreach import draft_outreach, list_outreach
from tools.search_contractors import (
    compare_contractors,
    get_contractor,
    get_contractor_cv,
    search_contractors,
)
from tools.shortlists import (
    add_to_shortlist,
    create_shortlist,
    get_shortlist,
    list_shortlists,
    update_candidate_status,
)

logger = logging.getLogger(__name__)

# Create FastMCP server instance
config = get_config()
mcp = FastMCP(
    name=config.server_name,
    instructions=(
        "This server gives a recruitment agent access to a database of cyber security "
        "and compliance contractors, client jobs, shortlists, outreach drafts and bookings."
        "\n\n"
        "FINDING PEOPLE:\n"
        "Use search_contractors for filtered search (all filters optional and combined with AND). "
        "Use find_matching_contractors to rank available contractors against a job's requirements. "
        "Use get_contractor for a profile, get_contractor_cv for the full CV and contact details, "
        "and compare_contractors to pull 2-10 CVs side by side."
        "\n\n"
        "WORKFLOW:\n"
        "Use list_jobs/get_job/update_job_status to track client jobs. "
        "Use create_shortlist, add_to_shortlist, get_shortlist, list_shortlists and "
        "update_candidate_status to manage candidates. "
        "Use draft_outreach/list_outreach for outreach drafts (drafts are never sent by this server). "
        "Use book_contractor to confirm an engagement; it marks the contractor unavailable. "
        "Use get_pipeline for an overview of open work."
        "\n\n"
        "ERRORS:\n"
        'A missing record is reported as {"error": "<Entity> not found"}. '
        'Faults are reported as {"error": {"code", "message", "retryable"}}.'
    ),
)


def _dispatch(
    handler: Callable[[Dict[str, Any]], Any],
    args: Dict[str, Any],
    missing_entity: Optional[str] = None,
) -> Any:
    """
    Run a tool handler and translate its outcome for the transport.

    Raised ToolErrors become their structured dict. A ``None`` result from a
    read-by-id handler becomes ``{"error": "<missing_entity> not found"}``.
    """
    try:
        result = handler(args)
    except ToolError as e:
        logger.warning("%s failed: %s %s", handler.__name__, e.code.value, e.message)
        return e.to_dict()
    except Exception as e:  # noqa: BLE001 - last-resort boundary for the transport
        logger.exception("Unexpected error in %s", handler.__name__)
        return create_internal_error(str(e), original_error=e).to_dict()

    if result is None and missing_entity is not None:
        result = not_found(missing_entity)
    if is_not_found(result):
        logger.info("%s: %s", handler.__name__, result["error"])
    return result


def _with_optional(args: Dict[str, Any], **optional: Any) -> Dict[str, Any]:
    """Add only the optional parameters the caller actually provided."""
    for key, value in optional.items():
        if value is not None:
            args[key] = value
    return args


@mcp.tool(
    name="search_contractors",
    description=(
        "Search contractors by free text, location, availability, certifications, skills, "
        "sector, maximum day rate, minimum experience and security clearance. "
        "All filters are optional and combined with AND. Results are ordered by rating."
    ),
)
def search_contractors_tool(
    query: str | None = None,
    location: str | None = None,
    availability: str | None = None,
    certifications: list[str] | None = None,
    skills: list[str] | None = None,
    sector: str | None = None,
    max_rate: float | None = None,
    min_experience: int | None = None,
    clearance: str | None = None,
    limit: int | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Search contractors with optional filters.

    Args:
        query: Case-insensitive text matched against name, title, bio and skills
        location: Exact location, case-insensitive (e.g. "London")
        availability: available | within_30_days | unavailable | any ("any" = no filter)
        certifications: Match contractors holding any of these (e.g. ["CISSP", "CISM"])
        skills: Match contractors with any of these skills
        sector: Sector the contractor has worked in (e.g. "Financial Services")
        max_rate: Maximum day rate in GBP (inclusive)
        min_experience: Minimum years of experience (inclusive)
        clearance: Security clearance level (e.g. "SC Cleared")
        limit: Maximum results (1-100, default 10)
        db_path: Optional database path override

    Returns:
        {"total_matches": int, "showing": int, "contractors": [...]}
    """
    args = _with_optional(
        {},
        query=query,
        location=location,
        availability=availability,
        certifications=certifications,
        skills=skills,
        sector=sector,
        max_rate=max_rate,
        min_experience=min_experience,
        clearance=clearance,
        limit=limit,
        db_path=db_path,
    )
    return _dispatch(search_contractors, args)


@mcp.tool(
    name="get_contractor",
    description="Get a contractor's profile by id (no contact details).",
)
def get_contractor_tool(id: str, db_path: str | None = None) -> dict:
    """
    Get one contractor's profile.

    Returns:
        The contractor, or {"error": "Contractor not found"}
    """
    return _dispatch(get_contractor, _with_optional({"id": id}, db_path=db_path), "Contractor")


@mcp.tool(
    name="get_contractor_cv",
    description=(
        "Get a contractor's full CV by id: profile, contact details, education, "
        "work history, notable projects and languages."
    ),
)
def get_contractor_cv_tool(id: str, db_path: str | None = None) -> dict:
    """
    Get one contractor's full CV.

    Returns:
        The CV, or {"error": "Contractor not found"}
    """
    return _dispatch(get_contractor_cv, _with_optional({"id": id}, db_path=db_path), "Contractor")


@mcp.tool(
    name="compare_contractors",
    description="Fetch 2-10 contractor CVs side by side for comparison, in the order given.",
)
def compare_contractors_tool(ids: list[str], db_path: str | None = None) -> dict:
    """
    Compare contractors.

    Args:
        ids: 2-10 distinct contractor ids

    Returns:
        {"contractors": [...], "missing_ids": [...]}
    """
    return _dispatch(compare_contractors, _with_optional({"ids": ids}, db_path=db_path))


@mcp.tool(
    name="list_jobs",
    description=(
        "List client jobs filtered by status, sector, urgency or location. "
        "Most urgent first, then newest."
    ),
)
def list_jobs_tool(
    status: str | None = None,
    sector: str | None = None,
    urgency: str | None = None,
    location: str | None = None,
    limit: int | None = None,
    db_path: str | None = None,
) -> dict:
    """
    List jobs.

    Args:
        status: open | shortlisting | interviewing | offered | filled | cancelled
        sector: Sector, case-insensitive
        urgency: low | normal | urgent | critical
        location: Location, case-insensitive
        limit: Maximum results (1-100, default 20)
        db_path: Optional database path override

    Returns:
        {"total": int, "jobs": [...]}
    """
    args = _with_optional(
        {},
        status=status,
        sector=sector,
        urgency=urgency,
        location=location,
        limit=limit,
        db_path=db_path,
    )
    return _dispatch(list_jobs, args)


@mcp.tool(name="get_job", description="Get a job's full details by id.")
def get_job_tool(id: str, db_path: str | None = None) -> dict:
    """
    Get one job.

    Returns:
        The job, or {"error": "Job not found"}
    """
    return _dispatch(get_job, _with_optional({"id": id}, db_path=db_path), "Job")


@mcp.tool(
    name="find_matching_contractors",
    description=(
        "Find available contractors matching a job's required certifications, skills, "
        "clearance and experience, ranked by location, rating and experience, with "
        "per-candidate match details."
    ),
)
def find_matching_contractors_tool(
    job_id: str, limit: int | None = None, db_path: str | None = None
) -> dict:
    """
    Match contractors to a job.

    Args:
        job_id: Job to match against
        limit: Maximum candidates (1-100, default 10)
        db_path: Optional database path override

    Returns:
        {"job": {...}, "total_matches": int, "contractors": [...]}
        or {"error": "Job not found"}
    """
    args = _with_optional({"job_id": job_id}, limit=limit, db_path=db_path)
    return _dispatch(find_matching_contractors, args)


@mcp.tool(name="update_job_status", description="Update a job's status.")
def update_job_status_tool(id: str, status: str, db_path: str | None = None) -> dict:
    """
    Update a job's status.

    Args:
        id: Job id
        status: open | shortlisting | interviewing | offered | filled | cancelled

    Returns:
        The updated job, or {"error": "Job not found"}
    """
    args = _with_optional({"id": id, "status": status}, db_path=db_path)
    return _dispatch(update_job_status, args)


@mcp.tool(
    name="create_shortlist",
    description="Create a named shortlist for a role or client.",
)
def create_shortlist_tool(
    name: str,
    description: str | None = None,
    role_title: str | None = None,
    client_name: str | None = None,
    created_by: str | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Create a shortlist.

    Returns:
        The created shortlist (status 'active')
    """
    args = _with_optional(
        {"name": name},
        description=description,
        role_title=role_title,
        client_name=client_name,
        created_by=created_by,
        db_path=db_path,
    )
    return _dispatch(create_shortlist, args)


@mcp.tool(
    name="add_to_shortlist",
    description=(
        "Add a contractor to a shortlist with optional notes. "
        "Adding someone already on the shortlist keeps their status; "
        "new notes replace the old ones, and omitting notes keeps the existing notes."
    ),
)
def add_to_shortlist_tool(
    shortlist_id: str,
    contractor_id: str,
    notes: str | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Add (or refresh) a shortlist candidate.

    A repeat add without notes leaves the stored notes untouched.

    Returns:
        The item with contractor_name and contractor_title, or
        {"error": "Contractor not found"} / {"error": "Shortlist not found"}
    """
    args = _with_optional(
        {"shortlist_id": shortlist_id, "contractor_id": contractor_id},
        notes=notes,
        db_path=db_path,
    )
    return _dispatch(add_to_shortlist, args)


@mcp.tool(
    name="get_shortlist",
    description="Get a shortlist with all of its candidates, their status and notes.",
)
def get_shortlist_tool(id: str, db_path: str | None = None) -> dict:
    """
    Get a shortlist with candidates.

    Returns:
        The shortlist with "candidates", or {"error": "Shortlist not found"}
    """
    return _dispatch(get_shortlist, _with_optional({"id": id}, db_path=db_path), "Shortlist")


@mcp.tool(
    name="list_shortlists",
    description="List shortlists with candidate counts, optionally filtered by status.",
)
def list_shortlists_tool(status: str | None = None, db_path: str | None = None) -> list | dict:
    """
    List shortlists.

    Args:
        status: active | closed | filled

    Returns:
        Shortlists with candidate_count, newest first
    """
    return _dispatch(list_shortlists, _with_optional({}, status=status, db_path=db_path))


@mcp.tool(
    name="update_candidate_status",
    description="Update a candidate's status on a shortlist (e.g. contacted, interviewing).",
)
def update_candidate_status_tool(
    shortlist_id: str, contractor_id: str, status: str, db_path: str | None = None
) -> dict:
    """
    Update a shortlist candidate's status.

    Args:
        status: shortlisted | contacted | interviewing | offered | accepted | declined | withdrawn

    Returns:
        The updated item, or {"error": "Shortlist item not found"}
    """
    args = _with_optional(
        {"shortlist_id": shortlist_id, "contractor_id": contractor_id, "status": status},
        db_path=db_path,
    )
    return _dispatch(update_candidate_status, args)


@mcp.tool(
    name="draft_outreach",
    description="Save an outreach message draft for a contractor. Nothing is sent.",
)
def draft_outreach_tool(
    contractor_id: str,
    subject: str,
    body: str,
    shortlist_id: str | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Draft an outreach message.

    Returns:
        The draft with contractor_name and contractor_email, or
        {"error": "Contractor not found"} / {"error": "Shortlist not found"}
    """
    args = _with_optional(
        {"contractor_id": contractor_id, "subject": subject, "body": body},
        shortlist_id=shortlist_id,
        db_path=db_path,
    )
    return _dispatch(draft_outreach, args)


@mcp.tool(
    name="list_outreach",
    description="List outreach drafts, optionally by contractor or status (draft, sent, replied).",
)
def list_outreach_tool(
    contractor_id: str | None = None, status: str | None = None, db_path: str | None = None
) -> list | dict:
    """
    List outreach drafts, newest first.
    """
    args = _with_optional({}, contractor_id=contractor_id, status=status, db_path=db_path)
    return _dispatch(list_outreach, args)


@mcp.tool(
    name="book_contractor",
    description=(
        "Book a contractor into a confirmed engagement. Marks the contractor unavailable and, "
        "if a shortlist is given, marks them accepted on it."
    ),
)
def book_contractor_tool(
    contractor_id: str,
    role_title: str,
    client_name: str | None = None,
    shortlist_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    agreed_rate: int | None = None,
    notes: str | None = None,
    db_path: str | None = None,
) -> dict:
    """
    Book a contractor.

    Args:
        contractor_id: Contractor to book
        role_title: Role they are booked for
        client_name: Optional client
        shortlist_id: Optional shortlist the booking came from
        start_date: Optional start date (YYYY-MM-DD)
        end_date: Optional end date (YYYY-MM-DD)
        agreed_rate: Optional agreed day rate
        notes: Optional notes

    Returns:
        {"engagement": {...}, "contractor_name", "contractor_email", "message"}
        or {"error": "Contractor not found"} / {"error": "Shortlist not found"}
    """
    args = _with_optional(
        {"contractor_id": contractor_id, "role_title": role_title},
        client_name=client_name,
        shortlist_id=shortlist_id,
        start_date=start_date,
        end_date=end_date,
        agreed_rate=agreed_rate,
        notes=notes,
        db_path=db_path,
    )
    return _dispatch(book_contractor, args)


@mcp.tool(
    name="get_pipeline",
    description=(
        "Overview of open jobs, active shortlists, live engagements and pending outreach "
        "drafts, with counts."
    ),
)
def get_pipeline_tool(db_path: str | None = None) -> dict:
    """
    Get the pipeline overview.

    Returns:
        {"open_jobs", "active_shortlists", "active_engagements",
         "pending_outreach", "summary"}
    """
    return _dispatch(get_pipeline, _with_optional({}, db_path=db_path))


def main():
    """
    Main entry point for the MCP server.

    Bootstraps the database schema, then runs the server in stdio mode,
    which is the standard transport for MCP servers invoked by LLM agents.
    """
    # Load and setup configuration
    config.setup_logging()

    logger.info("Starting contractor search MCP Server")
    logger.info(f"Server name: {config.server_name}")

    # Validate configuration and log warnings
    warnings = config.validate()
    for warning in warnings:
        logger.warning(warning)

    ensure_database(config.get_db_path_str())

    # Start the server
    logger.info("Server starting in stdio mode")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
