"""
Connection management for the contractor record store.

Provides database path resolution and a read-only connection context
manager. Every tool call opens its own connection, so concurrent agent
sessions never share a handle.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from config import get_config
from models.errors import (
    create_db_error,
    create_db_not_found_error,
)

# Default database path relative to repository root
DEFAULT_DB_PATH = "data/contractors.db"


def resolve_db_path(db_path: Optional[str] = None) -> Path:
    """
    Resolve the database path with support for overrides and defaults.

    Resolution order:
    1. Provided db_path parameter
    2. CONTRACTOR_SEARCH_DB environment variable
    3. CONTRACTOR_SEARCH_ROOT/data/contractors.db
    4. Default path: data/contractors.db

    Args:
        db_path: Optional database path override

    Returns:
        Resolved absolute Path to the database
    """
    if db_path is not None:
        path_str = db_path
    else:
        db_env = os.getenv("CONTRACTOR_SEARCH_DB")
        if db_env:
            path_str = db_env
        else:
            root_env = os.getenv("CONTRACTOR_SEARCH_ROOT")
            if root_env:
                return Path(root_env) / "data" / "contractors.db"
            path_str = DEFAULT_DB_PATH

    path = Path(path_str)

    # If relative, resolve from repository root
    if not path.is_absolute():
        repo_root = Path(__file__).resolve().parents[1]  # db/ -> repo/
        path = repo_root / path

    return path


def busy_timeout() -> float:
    """Seconds a connection waits on a locked database before failing."""
    return get_config().busy_timeout


def fold(value: Optional[str]) -> Optional[str]:
    """Unicode case folding for case-insensitive comparisons in SQL and Python alike."""
    if value is None:
        return None
    return str(value).casefold()


def register_functions(conn: sqlite3.Connection) -> None:
    """
    Register the SQL functions query templates rely on.

    SQLite's LOWER() only folds ASCII letters, so templates compare with
    ``fold(...)`` instead.
    """
    conn.create_function("fold", 1, fold, deterministic=True)


def _require_existing_file(resolved_path: Path) -> None:
    if not resolved_path.exists() or not resolved_path.is_file():
        raise create_db_not_found_error(str(resolved_path))


@contextmanager
def get_connection(db_path: Optional[str] = None):
    """
    Context manager for read-only SQLite connections.

    Ensures connections are always properly closed, even on errors.

    Args:
        db_path: Optional database path override

    Yields:
        sqlite3.Connection: Database connection with ``sqlite3.Row`` rows

    Raises:
        ToolError: If database file doesn't exist or connection fails
    """
    resolved_path = resolve_db_path(db_path)
    _require_existing_file(resolved_path)

    conn = None
    try:
        uri = f"file:{resolved_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, timeout=busy_timeout())
        conn.row_factory = sqlite3.Row
        register_functions(conn)

        yield conn

    except sqlite3.OperationalError as e:
        error_msg = str(e)
        if "unable to open database" in error_msg.lower():
            raise create_db_not_found_error(str(resolved_path)) from e
        raise create_db_error(error_msg, retryable=True, original_error=e) from e

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e

    finally:
        if conn is not None:
            conn.close()


def open_read_write(resolved_path: Path) -> sqlite3.Connection:
    """
    Open a read-write connection with foreign keys enforced.

    The caller owns the returned connection and must close it.

    Raises:
        ToolError: If the database file is missing or cannot be opened
    """
    _require_existing_file(resolved_path)

    try:
        # isolation_level=None: transactions are started explicitly by the caller
        conn = sqlite3.connect(str(resolved_path), timeout=busy_timeout(), isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        register_functions(conn)
        return conn

    except sqlite3.OperationalError as e:
        error_msg = str(e)
        if "unable to open database" in error_msg.lower():
            raise create_db_not_found_error(str(resolved_path)) from e
        raise create_db_error(error_msg, retryable=True, original_error=e) from e

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
