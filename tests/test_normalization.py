"""
Tests for boundary coercion of store values and record normalization.
"""

import sqlite3

import pytest

from models.errors import ErrorCode, ToolError
from schemas.records import ContractorCV, ContractorRecord, ShortlistSummary, normalize
from utils.normalization import coerce_float, coerce_int, parse_json_list


class TestCoerceInt:
    @pytest.mark.parametrize(
        "value,expected",
        [("575", 575), ("575.00", 575), (575, 575), (" 12 ", 12), (None, None), ("", None)],
    )
    def test_integral_values(self, value, expected):
        assert coerce_int(value) == expected

    @pytest.mark.parametrize("value", ["575.5", "abc", True])
    def test_rejects_non_integral(self, value):
        with pytest.raises(ValueError):
            coerce_int(value)


class TestCoerceFloat:
    def test_text_rating(self):
        assert coerce_float("4.8") == 4.8
        assert coerce_float(5) == 5.0

    def test_missing_stays_none(self):
        assert coerce_float(None) is None
        assert coerce_float("  ") is None

    @pytest.mark.parametrize("value", ["NaN", "four"])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(ValueError):
            coerce_float(value)


class TestParseJsonList:
    def test_decodes_text(self):
        assert parse_json_list('["CISSP", "CISM"]') == ["CISSP", "CISM"]

    def test_empty_inputs(self):
        assert parse_json_list(None) == []
        assert parse_json_list("") == []

    def test_list_passes_through(self):
        assert parse_json_list(("a", "b")) == ["a", "b"]

    def test_rejects_json_object(self):
        with pytest.raises(ValueError):
            parse_json_list('{"a": 1}')


class TestNormalize:
    def _row(self, sql):
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        try:
            return conn.execute(sql).fetchone()
        finally:
            conn.close()

    def test_text_numerics_become_native(self):
        row = self._row(
            "SELECT 'c1' AS id, '575' AS day_rate, '4.8' AS rating, NULL AS review_count, "
            "'[\"CISSP\"]' AS certifications, '' AS bio, 'secret' AS email"
        )
        record = normalize(row, ContractorRecord)

        assert record["day_rate"] == 575
        assert record["rating"] == 4.8
        assert record["review_count"] == 0
        assert record["certifications"] == ["CISSP"]
        assert record["sectors"] == []
        assert record["bio"] is None
        # contact fields belong to the CV view only
        assert "email" not in record

    def test_missing_rating_is_not_zero(self):
        row = self._row("SELECT 'c1' AS id, NULL AS rating")
        assert normalize(row, ContractorRecord)["rating"] is None

    def test_cv_sub_records(self):
        row = self._row(
            "SELECT 'c1' AS id, "
            "'[{\"institution\": \"UCL\", \"degree\": \"MSc\", \"year\": \"2010\"}]' AS education"
        )
        record = normalize(row, ContractorCV)
        assert record["education"] == [{"institution": "UCL", "degree": "MSc", "year": 2010}]
        assert record["work_history"] == []

    def test_count_from_text(self):
        row = self._row("SELECT 's1' AS id, '3' AS candidate_count")
        assert normalize(row, ShortlistSummary)["candidate_count"] == 3

    def test_fractional_integer_column_is_store_fault(self):
        with pytest.raises(ToolError) as exc_info:
            normalize({"id": "c1", "day_rate": "575.5"}, ContractorRecord)
        assert exc_info.value.code == ErrorCode.DB_ERROR
        assert "day_rate" in exc_info.value.message

    def test_non_numeric_rating_is_store_fault(self):
        with pytest.raises(ToolError) as exc_info:
            normalize({"id": "c1", "rating": "excellent"}, ContractorRecord)
        assert exc_info.value.code == ErrorCode.DB_ERROR
        assert "rating" in exc_info.value.message
