"""
Database reader layer for contractor search, lookup and matching.

All queries are assembled from a :class:`QueryBuilder`, so caller values
only ever reach SQLite as bound parameters.
"""

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Sequence, Tuple

from db.query_builder import QueryBuilder
from models.errors import create_db_error

logger = logging.getLogger(__name__)

# Profile columns returned by search and get_contractor (no contact or CV data)
CONTRACTOR_COLUMNS = (
    "id, name, initials, title, bio, location, day_rate, years_experience, "
    "availability, available_from, certifications, sectors, skills, "
    "rating, review_count, placement_count, security_clearance, created_at"
)

CV_COLUMNS = (
    CONTRACTOR_COLUMNS
    + ", email, phone, linkedin_url, profile_photo_url, "
    "education, work_history, notable_projects, languages"
)

# Rating descending with unrated contractors last, then review count
SEARCH_ORDER = "rating IS NULL, rating DESC, review_count DESC, id ASC"

# Location affinity first, then rating (unrated last), then experience
MATCH_ORDER = (
    "CASE WHEN fold(location) = fold(?) THEN 0 ELSE 1 END, "
    "rating IS NULL, rating DESC, years_experience DESC, id ASC"
)


def count_contractors(conn: sqlite3.Connection, builder: QueryBuilder) -> int:
    """
    Count contractors matching every predicate in ``builder`` (ignores paging).

    Raises:
        ToolError: If query execution fails
    """
    query = f"SELECT COUNT(*) AS total FROM contractors {builder.where_clause()}"
    try:
        row = conn.execute(query, builder.params).fetchone()
        return int(row["total"])
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def query_contractors(
    conn: sqlite3.Connection,
    builder: QueryBuilder,
    limit: int,
    order_by: str = SEARCH_ORDER,
    order_params: Sequence[Any] = (),
) -> List[sqlite3.Row]:
    """
    Fetch one page of contractors matching ``builder``.

    Placeholders appear in text order WHERE -> ORDER BY -> LIMIT, and the
    parameter tuple is built in the same order.

    Args:
        conn: Database connection
        builder: Filter predicates
        limit: Maximum number of rows
        order_by: Code-owned ORDER BY expression
        order_params: Values for placeholders inside ``order_by``

    Returns:
        Raw rows; callers normalize them

    Raises:
        ToolError: If query execution fails
    """
    query = f"""
        SELECT {CONTRACTOR_COLUMNS}
        FROM contractors
        {builder.where_clause()}
        ORDER BY {order_by}
        LIMIT ?
    """
    params = builder.params + tuple(order_params) + (limit,)

    logger.debug("Contractor query with predicates: %s", builder.names)

    try:
        return conn.execute(query, params).fetchall()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def search_contractor_rows(
    conn: sqlite3.Connection, builder: QueryBuilder, limit: int
) -> Tuple[int, List[sqlite3.Row]]:
    """Return (total matches, first page) in rating order."""
    total = count_contractors(conn, builder)
    rows = query_contractors(conn, builder, limit)
    return total, rows


def match_contractor_rows(
    conn: sqlite3.Connection, builder: QueryBuilder, job_location: Optional[str], limit: int
) -> Tuple[int, List[sqlite3.Row]]:
    """Return (total matches, top ``limit`` candidates) in location-affinity order."""
    total = count_contractors(conn, builder)
    rows = query_contractors(
        conn, builder, limit, order_by=MATCH_ORDER, order_params=(job_location or "",)
    )
    return total, rows


def get_contractor_row(
    conn: sqlite3.Connection, contractor_id: str, columns: str = CONTRACTOR_COLUMNS
) -> Optional[sqlite3.Row]:
    """
    Fetch a single contractor by id.

    Returns:
        The row, or None if no contractor has that id

    Raises:
        ToolError: If query execution fails
    """
    try:
        return conn.execute(
            f"SELECT {columns} FROM contractors WHERE id = ?", (contractor_id,)
        ).fetchone()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def get_contractor_rows_by_id(
    conn: sqlite3.Connection, contractor_ids: Sequence[str], columns: str = CV_COLUMNS
) -> Dict[str, sqlite3.Row]:
    """
    Fetch several contractors at once.

    Returns:
        Mapping of id to row for the ids that exist

    Raises:
        ToolError: If query execution fails
    """
    if not contractor_ids:
        return {}

    placeholders = ",".join("?" * len(contractor_ids))
    query = f"SELECT {columns} FROM contractors WHERE id IN ({placeholders})"

    try:
        rows = conn.execute(query, tuple(contractor_ids)).fetchall()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e

    return {row["id"]: row for row in rows}
