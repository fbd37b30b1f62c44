"""Convert Pydantic validation errors to the ToolError contract."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from models.errors import ToolError, create_validation_error


def _loc_to_field(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc if part != "__root__"]
    return ".".join(parts)


def _clean_pydantic_message(message: str) -> str:
    if message.startswith("Value error, "):
        return message[len("Value error, ") :]
    return message


def _describe(issue: dict) -> str:
    field = _loc_to_field(issue.get("loc", ()))
    message = _clean_pydantic_message(issue.get("msg", "Invalid input"))

    if issue.get("type") == "missing" and field:
        return f"Missing required parameter: '{field}'"
    # Validators already phrase their own "Invalid <field>: ..." messages
    if message.startswith("Invalid "):
        return message
    if field:
        return f"Invalid {field}: {message}"
    return message


def map_pydantic_validation_error(error: ValidationError) -> ToolError:
    """
    Map a request ValidationError to a VALIDATION_ERROR ToolError.

    Only the first issue is described; the count of further issues is
    appended so the caller knows to look again after fixing it.
    """
    issues = error.errors()
    if not issues:
        return create_validation_error("Invalid input")

    message = _describe(issues[0])
    if len(issues) > 1:
        message = f"{message} (and {len(issues) - 1} more)"
    return create_validation_error(message)
