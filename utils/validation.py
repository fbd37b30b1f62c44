"""
Small shared helpers for tool handlers: timestamps and page-size defaults.

Argument shape validation lives in the pydantic request models under
``schemas/``; these helpers cover what is left once a request is parsed.
"""

from datetime import datetime, timezone
from typing import Optional

from models.errors import create_validation_error
from schemas.common import MAX_LIMIT, MIN_LIMIT


def get_current_utc_timestamp() -> str:
    """
    Generate a UTC timestamp in ISO 8601 format with millisecond precision.

    Returns a timestamp string in the format: YYYY-MM-DDTHH:MM:SS.mmmZ
    Example: 2026-02-04T03:47:36.966Z

    All rows touched by one write operation receive the same timestamp.
    """
    now = datetime.now(timezone.utc)
    # Format with millisecond precision and replace +00:00 with Z
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_limit(limit: Optional[int], default: int) -> int:
    """
    Apply a configured default page size when the caller gave none.

    Raises:
        ToolError: If the configured default is outside the accepted range
    """
    if limit is not None:
        return limit
    if not MIN_LIMIT <= default <= MAX_LIMIT:
        raise create_validation_error(
            f"Invalid default limit: {default} (expected {MIN_LIMIT}-{MAX_LIMIT})"
        )
    return default
