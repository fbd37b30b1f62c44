"""
Boundary coercion helpers for values leaving the record store.

The store may hand back exact-precision numerics as text ("575",
"4.8", "575.00") and set-valued columns as JSON text. These helpers
turn them into native Python values; they are wired into the record
models in ``schemas.records`` so every row goes through the same step.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional


def coerce_int(value: Any) -> Optional[int]:
    """
    Coerce an integer-valued column to ``int``.

    ``None`` and blank strings stay ``None``. Text such as ``"575.00"`` is
    parsed exactly; a value with a fractional part is rejected rather than
    silently truncated.

    Raises:
        ValueError: If the value is not an integral number
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Expected integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and not value.strip():
        return None

    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Expected integer, got {value!r}") from e

    if number != number.to_integral_value():
        raise ValueError(f"Expected integer, got {value!r}")
    return int(number)


def coerce_float(value: Any) -> Optional[float]:
    """
    Coerce a decimal column (e.g. rating) to ``float``.

    ``None`` and blank strings stay ``None``; a missing rating is never
    reported as 0.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Expected number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and not value.strip():
        return None

    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Expected number, got {value!r}") from e

    if not number.is_finite():
        raise ValueError(f"Expected finite number, got {value!r}")
    return float(number)


def parse_json_list(value: Any) -> List[Any]:
    """
    Decode a JSON-array column.

    Lists pass through; ``None``/blank become ``[]``.

    Raises:
        ValueError: If the text is not a JSON array
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return []
        decoded = json.loads(value)
        if not isinstance(decoded, list):
            raise ValueError(f"Expected JSON array, got {type(decoded).__name__}")
        return decoded
    raise ValueError(f"Expected JSON array, got {type(value).__name__}")


def empty_strings_to_none(data: Any) -> Any:
    """Convert empty-string values in a row mapping to None."""
    if isinstance(data, dict):
        return {k: (None if v == "" else v) for k, v in data.items()}
    return data


def row_to_dict(row: Any) -> dict:
    """Turn a ``sqlite3.Row`` (or any mapping) into a plain dict."""
    if isinstance(row, dict):
        return dict(row)
    return {key: row[key] for key in row.keys()}
