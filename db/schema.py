"""
Schema bootstrap for the contractor record store.

Creates the contractors, jobs, shortlists, shortlist_items, engagements
and outreach_drafts tables plus their indexes. Set-valued attributes and
CV sub-records are stored as JSON text. Every statement is
``IF NOT EXISTS`` so bootstrapping an existing database is a no-op.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from db.connection import busy_timeout, resolve_db_path
from models.errors import create_db_error

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS contractors (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    initials TEXT NOT NULL DEFAULT '',
    title TEXT NOT NULL,
    bio TEXT,
    location TEXT NOT NULL,
    day_rate INTEGER NOT NULL,
    years_experience INTEGER NOT NULL,
    availability TEXT NOT NULL
        CHECK (availability IN ('available', 'within_30_days', 'unavailable')),
    available_from TEXT,
    certifications TEXT NOT NULL DEFAULT '[]',
    sectors TEXT NOT NULL DEFAULT '[]',
    skills TEXT NOT NULL DEFAULT '[]',
    rating NUMERIC,
    review_count INTEGER DEFAULT 0,
    placement_count INTEGER DEFAULT 0,
    security_clearance TEXT,
    email TEXT,
    phone TEXT,
    linkedin_url TEXT,
    profile_photo_url TEXT,
    education TEXT DEFAULT '[]',
    work_history TEXT DEFAULT '[]',
    notable_projects TEXT DEFAULT '[]',
    languages TEXT DEFAULT '[]',
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_contractors_location ON contractors (location);
CREATE INDEX IF NOT EXISTS idx_contractors_availability ON contractors (availability);

CREATE TABLE IF NOT EXISTS jobs (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    client_name TEXT NOT NULL,
    description TEXT NOT NULL,
    location TEXT NOT NULL,
    remote_option TEXT DEFAULT 'hybrid'
        CHECK (remote_option IN ('onsite', 'hybrid', 'remote')),
    day_rate_min INTEGER,
    day_rate_max INTEGER,
    duration_weeks INTEGER,
    start_date TEXT,
    required_certifications TEXT DEFAULT '[]',
    required_skills TEXT DEFAULT '[]',
    required_clearance TEXT,
    sector TEXT,
    experience_min INTEGER,
    status TEXT NOT NULL DEFAULT 'open'
        CHECK (status IN ('open', 'shortlisting', 'interviewing', 'offered', 'filled', 'cancelled')),
    urgency TEXT DEFAULT 'normal'
        CHECK (urgency IN ('low', 'normal', 'urgent', 'critical')),
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs (status);
CREATE INDEX IF NOT EXISTS idx_jobs_sector ON jobs (sector);

CREATE TABLE IF NOT EXISTS shortlists (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    role_title TEXT,
    client_name TEXT,
    created_by TEXT,
    status TEXT NOT NULL DEFAULT 'active'
        CHECK (status IN ('active', 'closed', 'filled')),
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE TABLE IF NOT EXISTS shortlist_items (
    id TEXT PRIMARY KEY,
    shortlist_id TEXT NOT NULL REFERENCES shortlists(id) ON DELETE CASCADE,
    contractor_id TEXT NOT NULL REFERENCES contractors(id) ON DELETE CASCADE,
    notes TEXT,
    status TEXT NOT NULL DEFAULT 'shortlisted'
        CHECK (status IN ('shortlisted', 'contacted', 'interviewing', 'offered',
                          'accepted', 'declined', 'withdrawn')),
    added_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    UNIQUE (shortlist_id, contractor_id)
);

CREATE INDEX IF NOT EXISTS idx_shortlist_items_shortlist ON shortlist_items (shortlist_id);

CREATE TABLE IF NOT EXISTS engagements (
    id TEXT PRIMARY KEY,
    contractor_id TEXT NOT NULL REFERENCES contractors(id) ON DELETE CASCADE,
    shortlist_id TEXT REFERENCES shortlists(id),
    role_title TEXT NOT NULL,
    client_name TEXT,
    start_date TEXT,
    end_date TEXT,
    agreed_rate INTEGER,
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'confirmed', 'active', 'completed', 'cancelled')),
    notes TEXT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_engagements_contractor ON engagements (contractor_id);

CREATE TABLE IF NOT EXISTS outreach_drafts (
    id TEXT PRIMARY KEY,
    contractor_id TEXT NOT NULL REFERENCES contractors(id) ON DELETE CASCADE,
    shortlist_id TEXT REFERENCES shortlists(id),
    subject TEXT NOT NULL,
    body TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'draft'
        CHECK (status IN ('draft', 'sent', 'replied')),
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


def bootstrap_schema(conn: sqlite3.Connection) -> None:
    """
    Create all record store tables and indexes if they don't exist.

    This operation is idempotent - safe to call on existing databases.

    Args:
        conn: Read-write database connection

    Raises:
        ToolError: If schema creation fails
    """
    try:
        conn.executescript(SCHEMA_SQL)
    except sqlite3.Error as e:
        raise create_db_error(
            f"Failed to bootstrap schema: {str(e)}", retryable=False, original_error=e
        ) from e


def ensure_database(db_path: Optional[str] = None) -> Path:
    """
    Create the database file (and parent directories) and bootstrap the schema.

    Args:
        db_path: Optional database path override

    Returns:
        Resolved path of the ready database

    Raises:
        ToolError: If directory creation or schema bootstrap fails
    """
    resolved_path = resolve_db_path(db_path)

    try:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise create_db_error(
            f"Failed to create parent directories: {str(e)}", retryable=False, original_error=e
        ) from e

    try:
        conn = sqlite3.connect(str(resolved_path), timeout=busy_timeout())
    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=True, original_error=e) from e

    try:
        bootstrap_schema(conn)
        conn.commit()
    finally:
        conn.close()

    logger.info("Record store schema ready")
    return resolved_path
