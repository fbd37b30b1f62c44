"""
Database writer layer for shortlist, outreach, booking and job-status tools.

Provides transaction management with automatic rollback on exceptions.
Existence checks and the writes that depend on them run inside the same
``BEGIN IMMEDIATE`` transaction, so no other writer can interleave between
the check and the write.
"""

import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Optional

from db.connection import open_read_write, resolve_db_path
from db.contractors_reader import get_contractor_row
from db.jobs_reader import JOB_COLUMNS
from db.shortlists_reader import SHORTLIST_COLUMNS
from models.errors import create_db_error
from models.status import (
    Availability,
    EngagementStatus,
    JobStatus,
    OutreachStatus,
    ShortlistItemStatus,
    ShortlistStatus,
)

logger = logging.getLogger(__name__)

SHORTLIST_ITEM_COLUMNS = "id, shortlist_id, contractor_id, notes, status, added_at, updated_at"

OUTREACH_COLUMNS = "id, contractor_id, shortlist_id, subject, body, status, created_at"

ENGAGEMENT_COLUMNS = (
    "id, contractor_id, shortlist_id, role_title, client_name, start_date, end_date, "
    "agreed_rate, status, notes, created_at, updated_at"
)


def new_record_id() -> str:
    """Generate a primary key for a new record."""
    return str(uuid.uuid4())


class RecordsWriter:
    """
    Context manager for write operations on the record store.

    Usage:
        with RecordsWriter(db_path) as writer:
            contractor = writer.get_contractor_brief(contractor_id)
            if contractor is None:
                return not_found("Contractor")
            writer.insert_engagement(...)
            writer.mark_contractor_unavailable(contractor_id, timestamp)
            writer.commit()

    Leaving the block without ``commit()`` rolls back.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path
        self.resolved_path: Optional[Path] = None
        self.conn: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    def __enter__(self):
        """
        Open connection and begin an immediate (write-locking) transaction.

        Raises:
            ToolError: If database file doesn't exist or connection fails
        """
        self.resolved_path = resolve_db_path(self.db_path)
        self.conn = open_read_write(self.resolved_path)

        try:
            self.conn.execute("BEGIN IMMEDIATE")
            self._in_transaction = True
            return self

        except sqlite3.Error as e:
            self.conn.close()
            self.conn = None
            raise create_db_error(str(e), retryable=True, original_error=e) from e

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Rollback anything uncommitted, close connection always."""
        try:
            if self._in_transaction:
                self.rollback()
        finally:
            if self.conn is not None:
                self.conn.close()
                self.conn = None

        # Don't suppress exceptions
        return False

    def _execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        if self.conn is None:
            raise create_db_error("Connection not established", retryable=False)
        try:
            return self.conn.execute(query, params)
        except sqlite3.Error as e:
            raise create_db_error(str(e), retryable=False, original_error=e) from e

    def _fetch_one(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return self._execute(query, params).fetchone()

    # Existence checks and lookups

    def get_contractor_brief(self, contractor_id: str) -> Optional[sqlite3.Row]:
        """Return (id, name, title, email) for a contractor, or None if missing."""
        if self.conn is None:
            raise create_db_error("Connection not established", retryable=False)
        return get_contractor_row(self.conn, contractor_id, columns="id, name, title, email")

    def shortlist_exists(self, shortlist_id: str) -> bool:
        return self._fetch_one("SELECT 1 FROM shortlists WHERE id = ?", (shortlist_id,)) is not None

    def get_shortlist(self, shortlist_id: str) -> Optional[sqlite3.Row]:
        return self._fetch_one(
            f"SELECT {SHORTLIST_COLUMNS} FROM shortlists WHERE id = ?", (shortlist_id,)
        )

    def get_shortlist_item(self, shortlist_id: str, contractor_id: str) -> Optional[sqlite3.Row]:
        return self._fetch_one(
            f"SELECT {SHORTLIST_ITEM_COLUMNS} FROM shortlist_items "
            "WHERE shortlist_id = ? AND contractor_id = ?",
            (shortlist_id, contractor_id),
        )

    def get_job(self, job_id: str) -> Optional[sqlite3.Row]:
        return self._fetch_one(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = ?", (job_id,))

    def get_outreach_draft(self, draft_id: str) -> Optional[sqlite3.Row]:
        return self._fetch_one(
            f"SELECT {OUTREACH_COLUMNS} FROM outreach_drafts WHERE id = ?", (draft_id,)
        )

    def get_engagement(self, engagement_id: str) -> Optional[sqlite3.Row]:
        return self._fetch_one(
            f"SELECT {ENGAGEMENT_COLUMNS} FROM engagements WHERE id = ?", (engagement_id,)
        )

    # Writes

    def insert_shortlist(
        self,
        name: str,
        timestamp: str,
        description: Optional[str] = None,
        role_title: Optional[str] = None,
        client_name: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> str:
        """Insert an active shortlist and return its id."""
        shortlist_id = new_record_id()
        self._execute(
            """
            INSERT INTO shortlists (
                id, name, description, role_title, client_name, created_by,
                status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                shortlist_id, name, description, role_title, client_name, created_by,
                ShortlistStatus.ACTIVE.value, timestamp, timestamp,
            ),
        )
        return shortlist_id

    def upsert_shortlist_item(
        self, shortlist_id: str, contractor_id: str, notes: Optional[str], timestamp: str
    ) -> None:
        """
        Ensure (shortlist, contractor) membership with the latest notes.

        A new pair is inserted as 'shortlisted'. An existing pair keeps its id,
        status and added_at; its notes are replaced when ``notes`` is given and
        its updated_at is refreshed.
        """
        self._execute(
            """
            INSERT INTO shortlist_items (
                id, shortlist_id, contractor_id, notes, status, added_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (shortlist_id, contractor_id) DO UPDATE SET
                notes = COALESCE(excluded.notes, shortlist_items.notes),
                updated_at = excluded.updated_at
            """,
            (
                new_record_id(), shortlist_id, contractor_id, notes,
                ShortlistItemStatus.SHORTLISTED.value, timestamp, timestamp,
            ),
        )

    def update_shortlist_item_status(
        self,
        shortlist_id: str,
        contractor_id: str,
        status: ShortlistItemStatus,
        timestamp: str,
    ) -> bool:
        """
        Set a shortlist item's status.

        Returns:
            False if no item exists for the pair
        """
        cursor = self._execute(
            """
            UPDATE shortlist_items
            SET status = ?, updated_at = ?
            WHERE shortlist_id = ? AND contractor_id = ?
            """,
            (ShortlistItemStatus(status).value, timestamp, shortlist_id, contractor_id),
        )
        return cursor.rowcount > 0

    def insert_outreach_draft(
        self,
        contractor_id: str,
        subject: str,
        body: str,
        timestamp: str,
        shortlist_id: Optional[str] = None,
    ) -> str:
        """Insert an outreach draft in 'draft' status and return its id."""
        draft_id = new_record_id()
        self._execute(
            """
            INSERT INTO outreach_drafts (
                id, contractor_id, shortlist_id, subject, body, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                draft_id, contractor_id, shortlist_id, subject, body,
                OutreachStatus.DRAFT.value, timestamp,
            ),
        )
        return draft_id

    def insert_engagement(
        self,
        contractor_id: str,
        role_title: str,
        timestamp: str,
        client_name: Optional[str] = None,
        shortlist_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        agreed_rate: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> str:
        """Insert a 'confirmed' engagement and return its id."""
        engagement_id = new_record_id()
        self._execute(
            """
            INSERT INTO engagements (
                id, contractor_id, shortlist_id, role_title, client_name,
                start_date, end_date, agreed_rate, status, notes, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                engagement_id, contractor_id, shortlist_id, role_title, client_name,
                start_date, end_date, agreed_rate, EngagementStatus.CONFIRMED.value,
                notes, timestamp, timestamp,
            ),
        )
        return engagement_id

    def mark_contractor_unavailable(self, contractor_id: str) -> None:
        self._execute(
            "UPDATE contractors SET availability = ? WHERE id = ?",
            (Availability.UNAVAILABLE.value, contractor_id),
        )

    def accept_shortlist_item(self, shortlist_id: str, contractor_id: str, timestamp: str) -> bool:
        """Mark a contractor's item on a shortlist as 'accepted'; False if not on it."""
        return self.update_shortlist_item_status(
            shortlist_id, contractor_id, ShortlistItemStatus.ACCEPTED, timestamp
        )

    def update_job_status(self, job_id: str, status: JobStatus, timestamp: str) -> bool:
        """
        Set a job's status and refresh updated_at.

        Returns:
            False if no job has that id
        """
        cursor = self._execute(
            "UPDATE jobs SET status = ?, updated_at = ? WHERE id = ?",
            (JobStatus(status).value, timestamp, job_id),
        )
        return cursor.rowcount > 0

    def commit(self) -> None:
        """
        Commit the transaction.

        Raises:
            ToolError: If commit fails
        """
        if self.conn is None:
            raise create_db_error("Connection not established", retryable=False)

        if not self._in_transaction:
            return

        try:
            self.conn.execute("COMMIT")
            self._in_transaction = False
        except sqlite3.Error as e:
            raise create_db_error(
                f"Failed to commit transaction: {str(e)}", retryable=True, original_error=e
            ) from e

    def rollback(self) -> None:
        """
        Rollback the transaction.

        Rollback failures are logged rather than raised since rollback
        runs during error handling.
        """
        if self.conn is None or not self._in_transaction:
            return

        try:
            self.conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.warning("Rollback failed: %s", e)
        finally:
            self._in_transaction = False
