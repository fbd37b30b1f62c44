"""
Database reader layer for job listing and lookup.

Jobs are ordered by urgency rank (critical first) and then newest first.
"""

import sqlite3
from typing import List, Optional, Tuple

from db.query_builder import QueryBuilder
from models.errors import create_db_error
from models.status import JobUrgency

JOB_COLUMNS = (
    "id, title, client_name, description, location, remote_option, "
    "day_rate_min, day_rate_max, duration_weeks, start_date, "
    "required_certifications, required_skills, required_clearance, sector, "
    "experience_min, status, urgency, notes, created_at, updated_at"
)

# Built from the enum, not from input: "CASE urgency WHEN 'critical' THEN 1 ... ELSE 5 END"
URGENCY_RANK_SQL = (
    "CASE urgency "
    + " ".join(
        f"WHEN '{urgency.value}' THEN {urgency.rank}"
        for urgency in sorted(JobUrgency, key=lambda u: u.rank)
    )
    + f" ELSE {len(JobUrgency) + 1} END"
)

JOB_ORDER = f"{URGENCY_RANK_SQL}, created_at DESC, id ASC"


def list_job_rows(
    conn: sqlite3.Connection, builder: QueryBuilder, limit: int
) -> Tuple[int, List[sqlite3.Row]]:
    """
    Return (total matching jobs, first page) in urgency order.

    Raises:
        ToolError: If query execution fails
    """
    where = builder.where_clause()
    count_query = f"SELECT COUNT(*) AS total FROM jobs {where}"
    page_query = f"""
        SELECT {JOB_COLUMNS}
        FROM jobs
        {where}
        ORDER BY {JOB_ORDER}
        LIMIT ?
    """

    try:
        total = int(conn.execute(count_query, builder.params).fetchone()["total"])
        rows = conn.execute(page_query, builder.params + (limit,)).fetchall()
        return total, rows
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e


def get_job_row(conn: sqlite3.Connection, job_id: str) -> Optional[sqlite3.Row]:
    """
    Fetch a single job by id.

    Returns:
        The row, or None if no job has that id

    Raises:
        ToolError: If query execution fails
    """
    try:
        return conn.execute(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = ?", (job_id,)).fetchone()
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
