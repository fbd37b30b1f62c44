"""
Database reader layer for shortlists and their candidates.
"""

import sqlite3
from typing import List, Optional

from db.query_builder import QueryBuilder
from models.errors import create_db_error

SHORTLIST_COLUMNS = (
    "id, name, description, role_title, client_name, created_by, status, created_at, updated_at"
)

# Outer join so empty shortlists still report candidate_count = 0
SHORTLIST_SUMMARY_SELECT = """
    SELECT
        s.id, s.name, s.description, s.role_title, s.client_name, s.created_by,
        s.status, s.created_at, s.updated_at,
        COUNT(si.id) AS candidate_count
    FROM shortlists s
    LEFT JOIN shortlist_items si ON si.shortlist_id = s.id
"""


def get_shortlist_row(conn: sqlite3.Connection, shortlist_id: str) -> Optional[sqlite3.Row]:
    """
    Fetch a single shortlist by id.

    Raises:
        ToolError: If query execution fails
    """
    try:
        return conn.execute(
            f"SELECT {SHORTLIST_COLUMNS} FROM shortlists WHERE id = ?", (shortlist_id,)
        ).fetchone()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def query_candidate_rows(conn: sqlite3.Connection, shortlist_id: str) -> List[sqlite3.Row]:
    """
    Fetch the contractors on a shortlist joined with their item status and notes.

    Results are ordered by the time the contractor was added (oldest first).

    Raises:
        ToolError: If query execution fails
    """
    query = """
        SELECT
            c.id, c.name, c.initials, c.title, c.bio, c.location, c.day_rate,
            c.years_experience, c.availability, c.available_from, c.certifications,
            c.sectors, c.skills, c.rating, c.review_count, c.placement_count,
            c.security_clearance, c.created_at,
            si.id AS item_id, si.status, si.notes, si.added_at, si.updated_at
        FROM shortlist_items si
        JOIN contractors c ON c.id = si.contractor_id
        WHERE si.shortlist_id = ?
        ORDER BY si.added_at ASC, si.rowid ASC
    """
    try:
        return conn.execute(query, (shortlist_id,)).fetchall()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def query_shortlist_summaries(
    conn: sqlite3.Connection, status: Optional[str] = None
) -> List[sqlite3.Row]:
    """
    List shortlists with their candidate counts, newest first.

    Args:
        conn: Database connection
        status: Optional shortlist status filter

    Raises:
        ToolError: If query execution fails
    """
    builder = QueryBuilder().equals("s.status", status)
    query = f"""
        {SHORTLIST_SUMMARY_SELECT}
        {builder.where_clause()}
        GROUP BY s.id
        ORDER BY s.created_at DESC, s.rowid DESC
    """
    try:
        return conn.execute(query, builder.params).fetchall()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
