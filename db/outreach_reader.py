"""
Database reader layer for outreach drafts.
"""

import sqlite3
from typing import List, Optional

from db.query_builder import QueryBuilder
from models.errors import create_db_error

OUTREACH_SELECT = """
    SELECT
        od.id, od.contractor_id, od.shortlist_id, od.subject, od.body,
        od.status, od.created_at,
        c.name AS contractor_name, c.email AS contractor_email
    FROM outreach_drafts od
    JOIN contractors c ON c.id = od.contractor_id
"""


def query_outreach_rows(
    conn: sqlite3.Connection,
    contractor_id: Optional[str] = None,
    status: Optional[str] = None,
) -> List[sqlite3.Row]:
    """
    List outreach drafts (newest first) with the contractor's name and email.

    Args:
        conn: Database connection
        contractor_id: Optional contractor filter
        status: Optional draft status filter

    Raises:
        ToolError: If query execution fails
    """
    builder = QueryBuilder().equals("od.contractor_id", contractor_id).equals("od.status", status)
    query = f"""
        {OUTREACH_SELECT}
        {builder.where_clause()}
        ORDER BY od.created_at DESC, od.rowid DESC
    """
    try:
        return conn.execute(query, builder.params).fetchall()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
