"""
Unit tests for QueryBuilder: predicate assembly, parameter ordering and
the guarantee that values only ever travel as bound parameters.
"""

import json
import sqlite3

import pytest
from hypothesis import given, strategies as st

from db.connection import register_functions
from db.query_builder import QueryBuilder, like_pattern


@pytest.fixture
def memory_conn():
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    register_functions(conn)
    conn.execute("CREATE TABLE t (id TEXT, name TEXT, tags TEXT, rate INTEGER)")
    conn.executemany(
        "INSERT INTO t VALUES (?, ?, ?, ?)",
        [
            ("a", "Alpha", json.dumps(["CISSP", "CREST"]), 400),
            ("b", "Beta 50%", json.dumps(["CISM"]), 600),
            ("c", None, json.dumps([]), 800),
        ],
    )
    yield conn
    conn.close()


def select_ids(conn, builder):
    sql = f"SELECT id FROM t {builder.where_clause()} ORDER BY id"
    return [row["id"] for row in conn.execute(sql, builder.params)]


class TestQueryBuilder:
    def test_empty_builder_matches_everything(self, memory_conn):
        builder = QueryBuilder()
        assert builder.where_clause() == ""
        assert builder.params == ()
        assert len(builder) == 0
        assert select_ids(memory_conn, builder) == ["a", "b", "c"]

    def test_none_and_empty_values_add_nothing(self):
        builder = (
            QueryBuilder()
            .equals("id", None)
            .equals_ignore_case("name", None)
            .overlaps("tags", [])
            .overlaps("tags", None)
            .at_most("rate", None)
            .at_least("rate", None)
            .text_search("", ["name"])
            .contains_ignore_case("tags", None)
        )
        assert len(builder) == 0

    def test_predicates_combine_with_and(self, memory_conn):
        builder = QueryBuilder().at_least("rate", 500).overlaps("tags", ["CISM", "CREST"])
        assert builder.where_clause().count(" AND ") == 1
        assert select_ids(memory_conn, builder) == ["b"]

    def test_params_follow_placeholder_order(self):
        builder = QueryBuilder().equals("id", "x").at_most("rate", 5).equals_ignore_case("name", "n")
        assert builder.params == ("x", 5, "n")
        assert builder.names == ["id", "rate", "name"]

    def test_overlap_binds_whole_set_as_one_parameter(self):
        builder = QueryBuilder().overlaps("tags", ["CISSP", "CISM"])
        assert builder.params == (json.dumps(["CISSP", "CISM"]),)

    def test_contains_ignore_case(self, memory_conn):
        builder = QueryBuilder().contains_ignore_case("tags", "cissp")
        assert select_ids(memory_conn, builder) == ["a"]

    def test_case_folding_covers_non_ascii(self, memory_conn):
        memory_conn.execute("INSERT INTO t VALUES ('d', 'Straße Zürich', '[\"Ünit\"]', 1)")
        exact = QueryBuilder().equals_ignore_case("name", "STRASSE ZÜRICH")
        assert select_ids(memory_conn, exact) == ["d"]
        assert select_ids(memory_conn, QueryBuilder().text_search("ZÜR", ["name"])) == ["d"]
        assert select_ids(memory_conn, QueryBuilder().contains_ignore_case("tags", "ünit")) == ["d"]

    def test_text_search_treats_null_as_empty(self, memory_conn):
        builder = QueryBuilder().text_search("a", ["name"], ["tags"])
        assert select_ids(memory_conn, builder) == ["a", "b"]

    def test_text_search_escapes_wildcards(self, memory_conn):
        assert select_ids(memory_conn, QueryBuilder().text_search("%", ["name"])) == ["b"]
        assert select_ids(memory_conn, QueryBuilder().text_search("_", ["name"])) == []

    def test_not_equal(self, memory_conn):
        builder = QueryBuilder().not_equal("id", "a")
        assert select_ids(memory_conn, builder) == ["b", "c"]

    def test_rejects_non_identifier_columns(self):
        with pytest.raises(ValueError):
            QueryBuilder().equals("name; DROP TABLE t", "x")

    def test_add_checks_placeholder_count(self):
        with pytest.raises(ValueError):
            QueryBuilder().add("bad", "a = ? AND b = ?", 1)

    def test_like_pattern(self):
        assert like_pattern("50%_x") == "%50\\%\\_x%"
        assert like_pattern("a\\b") == "%a\\\\b%"


class TestQueryShape:
    @given(first=st.text(), second=st.text(min_size=1))
    def test_query_text_depends_only_on_filter_names(self, first, second):
        def build(value):
            return (
                QueryBuilder()
                .equals_ignore_case("name", value)
                .text_search(value or "x", ["name"], ["tags"])
                .overlaps("tags", [value])
            )

        one, two = build(first), build(second)
        assert one.where_clause() == two.where_clause()
        assert one.params[0] == first
        assert two.params[0] == second
