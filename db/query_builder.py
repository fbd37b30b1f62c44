"""
Parameterised predicate builder for record store queries.

Filters are collected as (template, values) pairs and assembled into a
WHERE clause only at the end. Templates are fixed strings written in this
package; caller-supplied values only ever travel as bound ``?`` parameters,
so the text of a query depends solely on which filters are present.

Case-insensitive templates call the ``fold`` SQL function, which
``db.connection.register_functions`` installs on every connection.
"""

import json
import re
from typing import Any, Iterable, List, Optional, Sequence, Tuple

# Column references are code-owned, never caller input
_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*(\.[a-z_][a-z0-9_]*)?$")

LIKE_ESCAPE = "\\"


def _column(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid column reference: {name!r}")
    return name


def like_pattern(text: str) -> str:
    """
    Wrap ``text`` for a substring LIKE match, escaping LIKE wildcards.

    ``%`` and ``_`` in the input match literally, so a search for ``50%``
    finds "50%" rather than every string starting with "50".
    """
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class QueryBuilder:
    """
    Collects conjunctive predicates and their bound parameters.

    Usage:
        builder = QueryBuilder()
        builder.equals_ignore_case("location", "London")
        builder.overlaps("certifications", ["CISSP"])
        sql = f"SELECT COUNT(*) FROM contractors {builder.where_clause()}"
        conn.execute(sql, builder.params)

    Every ``add``-style method is a no-op when its value is ``None`` (or an
    empty collection for set filters), which keeps call sites flat.
    """

    def __init__(self):
        self._conditions: List[str] = []
        self._params: List[Any] = []
        self._names: List[str] = []

    def add(self, name: str, template: str, *values: Any) -> "QueryBuilder":
        """
        Append a raw predicate template with one value per ``?`` placeholder.

        Raises:
            ValueError: If the placeholder count doesn't match ``values``
        """
        if template.count("?") != len(values):
            raise ValueError(
                f"Predicate {name!r} has {template.count('?')} placeholders "
                f"but {len(values)} values"
            )
        self._conditions.append(template)
        self._params.extend(values)
        self._names.append(name)
        return self

    def equals(self, column: str, value: Optional[Any]) -> "QueryBuilder":
        if value is None:
            return self
        return self.add(column, f"{_column(column)} = ?", value)

    def equals_ignore_case(self, column: str, value: Optional[str]) -> "QueryBuilder":
        if value is None:
            return self
        return self.add(column, f"fold({_column(column)}) = fold(?)", value)

    def contains_ignore_case(self, json_column: str, value: Optional[str]) -> "QueryBuilder":
        """Match when any element of a JSON array column equals ``value`` (case-insensitive)."""
        if value is None:
            return self
        col = _column(json_column)
        return self.add(
            json_column,
            f"EXISTS (SELECT 1 FROM json_each({col}) WHERE fold(json_each.value) = fold(?))",
            value,
        )

    def overlaps(self, json_column: str, values: Optional[Sequence[str]]) -> "QueryBuilder":
        """
        Match when a JSON array column shares at least one element with ``values``.

        The whole filter set is bound as a single JSON-encoded parameter.
        """
        if not values:
            return self
        col = _column(json_column)
        return self.add(
            json_column,
            f"EXISTS (SELECT 1 FROM json_each({col}) AS have "
            f"WHERE have.value IN (SELECT value FROM json_each(?)))",
            json.dumps(list(values)),
        )

    def at_most(self, column: str, value: Optional[float]) -> "QueryBuilder":
        if value is None:
            return self
        return self.add(column, f"{_column(column)} <= ?", value)

    def at_least(self, column: str, value: Optional[float]) -> "QueryBuilder":
        if value is None:
            return self
        return self.add(column, f"{_column(column)} >= ?", value)

    def not_equal(self, column: str, value: Any) -> "QueryBuilder":
        return self.add(column, f"{_column(column)} != ?", value)

    def text_search(
        self,
        text: Optional[str],
        columns: Iterable[str],
        json_columns: Iterable[str] = (),
    ) -> "QueryBuilder":
        """
        Case-insensitive substring match, OR-ed across text and JSON array columns.

        Args:
            text: Substring to look for (wildcards match literally)
            columns: Plain text columns; NULL is treated as empty
            json_columns: JSON array columns searched element-wise
        """
        if not text:
            return self

        pattern = like_pattern(text)
        clauses = []
        values = []
        for column in columns:
            clauses.append(
                f"fold(COALESCE({_column(column)}, '')) LIKE fold(?) ESCAPE '{LIKE_ESCAPE}'"
            )
            values.append(pattern)
        for column in json_columns:
            clauses.append(
                f"EXISTS (SELECT 1 FROM json_each({_column(column)}) AS elem "
                f"WHERE fold(elem.value) LIKE fold(?) ESCAPE '{LIKE_ESCAPE}')"
            )
            values.append(pattern)

        return self.add("text", "(" + " OR ".join(clauses) + ")", *values)

    @property
    def params(self) -> Tuple[Any, ...]:
        """Bound values in placeholder order."""
        return tuple(self._params)

    @property
    def names(self) -> List[str]:
        """Names of the predicates present, for logging (never values)."""
        return list(self._names)

    def __len__(self) -> int:
        return len(self._conditions)

    def where_clause(self) -> str:
        """Return ``WHERE a AND b ...``, or an empty string when no filter is present."""
        if not self._conditions:
            return ""
        return "WHERE " + " AND ".join(self._conditions)
