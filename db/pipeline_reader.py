"""
Database reader layer for the pipeline overview.

Four read-only queries run inside one transaction so the sections and
summary counts describe the same snapshot; nothing is cached between calls.
"""

import sqlite3
from typing import Dict, List

from db.jobs_reader import JOB_COLUMNS, JOB_ORDER
from db.outreach_reader import OUTREACH_SELECT
from db.query_builder import QueryBuilder
from db.shortlists_reader import SHORTLIST_SUMMARY_SELECT
from models.errors import create_db_error
from models.status import (
    CLOSED_JOB_STATUSES,
    LIVE_ENGAGEMENT_STATUSES,
    OutreachStatus,
    ShortlistStatus,
)


def _in_list(column: str, count: int) -> str:
    return f"{column} IN ({','.join('?' * count)})"


def query_pipeline_rows(conn: sqlite3.Connection) -> Dict[str, List[sqlite3.Row]]:
    """
    Fetch the four pipeline sections from one consistent snapshot.

    The queries share a single read transaction, so a booking committed
    while they run shows up in every section or in none.

    Returns:
        Dictionary with keys open_jobs, active_shortlists,
        active_engagements and pending_outreach

    Raises:
        ToolError: If any query fails
    """
    closed = [status.value for status in CLOSED_JOB_STATUSES]
    live = [status.value for status in LIVE_ENGAGEMENT_STATUSES]

    open_jobs_query = f"""
        SELECT {JOB_COLUMNS}
        FROM jobs
        WHERE status NOT IN ({','.join('?' * len(closed))})
        ORDER BY {JOB_ORDER}
    """

    shortlists = QueryBuilder().equals("s.status", ShortlistStatus.ACTIVE.value)
    active_shortlists_query = f"""
        {SHORTLIST_SUMMARY_SELECT}
        {shortlists.where_clause()}
        GROUP BY s.id
        ORDER BY s.created_at DESC, s.rowid DESC
    """

    engagements_query = f"""
        SELECT
            e.id, e.contractor_id, e.shortlist_id, e.role_title, e.client_name,
            e.start_date, e.end_date, e.agreed_rate, e.status, e.notes,
            e.created_at, e.updated_at,
            c.name AS contractor_name
        FROM engagements e
        JOIN contractors c ON c.id = e.contractor_id
        WHERE {_in_list('e.status', len(live))}
        ORDER BY e.start_date IS NULL, e.start_date ASC, e.created_at ASC, e.rowid ASC
    """

    outreach = QueryBuilder().equals("od.status", OutreachStatus.DRAFT.value)
    outreach_query = f"""
        {OUTREACH_SELECT}
        {outreach.where_clause()}
        ORDER BY od.created_at DESC, od.rowid DESC
    """

    try:
        conn.execute("BEGIN")
        rows = {
            "open_jobs": conn.execute(open_jobs_query, closed).fetchall(),
            "active_shortlists": conn.execute(
                active_shortlists_query, shortlists.params
            ).fetchall(),
            "active_engagements": conn.execute(engagements_query, live).fetchall(),
            "pending_outreach": conn.execute(outreach_query, outreach.params).fetchall(),
        }
        conn.commit()
        return rows
    except sqlite3.Error as e:
        if conn.in_transaction:
            conn.rollback()
        raise create_db_error(str(e), retryable=False, original_error=e) from e
