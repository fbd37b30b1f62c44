"""
Tests for the contractor/job JSON import script.
"""

import json
import sqlite3

import pytest

from scripts.import_records import (
    clean_contractor,
    clean_job,
    derive_initials,
    import_records,
    main,
)
from seed_data import count_rows, fetch_one

NOW = "2026-01-15T09:30:00.000Z"
RATES = {"day_rate": 575, "years_experience": 12}


class TestCleaning:
    def test_derive_initials(self):
        assert derive_initials("sarah  jane chen") == "SJC"

    def test_contractor_defaults(self):
        item = clean_contractor(
            {
                "id": "c-1",
                "name": "  Sarah Chen ",
                "day_rate": "575",
                "years_experience": "12",
                "certifications": ["CISSP", " CISSP ", "", "CISM"],
            },
            NOW,
        )
        assert item["name"] == "Sarah Chen"
        assert item["initials"] == "SC"
        assert item["day_rate"] == 575
        assert item["years_experience"] == 12
        assert item["rating"] is None
        assert item["review_count"] == 0
        assert item["availability"] == "available"
        assert json.loads(item["certifications"]) == ["CISSP", "CISM"]
        assert json.loads(item["education"]) == []
        assert item["created_at"] == NOW

    def test_contractor_requires_name(self):
        with pytest.raises(ValueError):
            clean_contractor({"id": "c-1"}, NOW)

    def test_contractor_rejects_unknown_availability(self):
        with pytest.raises(ValueError):
            clean_contractor({**RATES, "name": "A B", "availability": "soon"}, NOW)

    def test_generated_id(self):
        assert clean_contractor({**RATES, "name": "A B"}, NOW)["id"]

    def test_text_rating_coerced(self):
        item = clean_contractor({**RATES, "name": "A B", "rating": "4.5"}, NOW)
        assert item["rating"] == 4.5

    def test_contractor_rejects_non_numeric_rating(self):
        with pytest.raises(ValueError, match="rating"):
            clean_contractor({**RATES, "name": "A B", "rating": "excellent"}, NOW)

    @pytest.mark.parametrize("missing", ["day_rate", "years_experience"])
    def test_contractor_requires_rate_and_experience(self, missing):
        record = {**RATES, "name": "A B"}
        del record[missing]
        with pytest.raises(ValueError, match=missing):
            clean_contractor(record, NOW)

    def test_contractor_rejects_fractional_day_rate(self):
        with pytest.raises(ValueError, match="day_rate"):
            clean_contractor({**RATES, "name": "A B", "day_rate": "575.5"}, NOW)

    def test_job_defaults(self):
        item = clean_job({"title": "Lead Auditor", "day_rate_max": 650}, NOW)
        assert item["status"] == "open"
        assert item["urgency"] == "normal"
        assert item["remote_option"] == "hybrid"
        assert item["day_rate_min"] is None
        assert item["day_rate_max"] == 650

    def test_job_rejects_unknown_urgency(self):
        with pytest.raises(ValueError):
            clean_job({"title": "Lead Auditor", "urgency": "asap"}, NOW)


class TestImport:
    def test_duplicates_skipped(self, empty_db):
        contractors = [clean_contractor({**RATES, "id": "c-1", "name": "Sarah Chen"}, NOW)]
        jobs = [clean_job({"id": "j-1", "title": "Lead Auditor"}, NOW)]

        conn = sqlite3.connect(empty_db)
        try:
            assert import_records(conn, contractors, jobs) == (2, 0)
            assert import_records(conn, contractors, jobs) == (0, 2)
        finally:
            conn.close()

        assert count_rows(empty_db, "contractors") == 1
        assert count_rows(empty_db, "jobs") == 1


class TestMain:
    def _write_input(self, tmp_path, payload):
        path = tmp_path / "records.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    def test_import_into_new_database(self, tmp_path, capsys):
        source = self._write_input(
            tmp_path,
            {
                "contractors": [
                    {**RATES, "id": "c-1", "name": "Sarah Chen", "location": "London", "rating": 4.8}
                ],
                "jobs": [{"id": "j-1", "title": "Lead Auditor", "urgency": "urgent"}],
            },
        )
        db_path = tmp_path / "nested" / "store.db"

        assert main(["--input", source, "--db", str(db_path)]) == 0

        assert "inserted: 2" in capsys.readouterr().out
        row = fetch_one(str(db_path), "SELECT location, rating FROM contractors WHERE id = 'c-1'")
        assert row["location"] == "London"
        assert row["rating"] == 4.8

    def test_dry_run_writes_nothing(self, tmp_path, capsys):
        source = self._write_input(tmp_path, {"contractors": [{**RATES, "name": "Sarah Chen"}]})
        db_path = tmp_path / "store.db"

        assert main(["--input", source, "--db", str(db_path), "--dry-run"]) == 0

        printed = json.loads(capsys.readouterr().out)
        assert printed["contractors"][0]["initials"] == "SC"
        assert not db_path.exists()

    def test_bad_record_fails(self, tmp_path, capsys):
        source = self._write_input(tmp_path, {"jobs": [{"title": "X", "status": "done"}]})

        assert main(["--input", source, "--db", str(tmp_path / "store.db")]) == 1
        assert "invalid record" in capsys.readouterr().err

    def test_bad_rating_rejected_before_writing(self, tmp_path, capsys):
        source = self._write_input(
            tmp_path, {"contractors": [{**RATES, "name": "Sarah Chen", "rating": "excellent"}]}
        )
        db_path = tmp_path / "store.db"

        assert main(["--input", source, "--db", str(db_path)]) == 1
        assert "invalid 'rating'" in capsys.readouterr().err
        assert not db_path.exists()
