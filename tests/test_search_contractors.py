"""
Tests for search_contractors, get_contractor, get_contractor_cv and
compare_contractors.

Includes property tests for filter conjunction, case-insensitivity,
the availability "any" sentinel and injection inertness.
"""

import pytest
from hypothesis import given, settings, strategies as st

from models.errors import ErrorCode, ToolError
from seed_data import count_rows, insert_contractor
from tools.search_contractors import (
    compare_contractors,
    get_contractor,
    get_contractor_cv,
    search_contractors,
)

ALL_IDS = {"c-sarah", "c-james", "c-amira", "c-tom", "c-nina"}

FILTER_CHOICES = {
    "query": [None, "iso", "security", "SARAH", "zzz"],
    "location": [None, "London", "manchester"],
    "availability": [None, "any", "available", "within_30_days", "unavailable"],
    "certifications": [None, ["CISSP"], ["CREST", "CISM"]],
    "skills": [None, ["ISO 27001"], ["Cloud Security", "GDPR"]],
    "sector": [None, "Financial Services", "government"],
    "max_rate": [None, 500, 600.0],
    "min_experience": [None, 8, 15],
    "clearance": [None, "SC Cleared", "dv cleared"],
}

INJECTION_PAYLOADS = [
    "'; DROP TABLE contractors; --",
    "' OR 1=1 --",
    '" OR ""="',
    "London'); DELETE FROM contractors; --",
    "%' OR '1'='1",
]


def ids_of(result):
    return {c["id"] for c in result["contractors"]}


def run_search(db_path, **filters):
    args = {key: value for key, value in filters.items() if value is not None}
    args["db_path"] = db_path
    args.setdefault("limit", 100)
    return search_contractors(args)


class TestSearchContractors:
    """Search behaviour against the seeded store."""

    def test_no_filters_returns_all_in_rating_order(self, shared_seeded_db):
        result = search_contractors({"db_path": shared_seeded_db})

        assert result["total_matches"] == 5
        assert result["showing"] == 5
        # rating desc, unrated last
        assert [c["id"] for c in result["contractors"]] == [
            "c-tom", "c-james", "c-sarah", "c-nina", "c-amira"
        ]

    def test_profile_excludes_contact_fields(self, shared_seeded_db):
        result = search_contractors({"db_path": shared_seeded_db})
        for contractor in result["contractors"]:
            assert "email" not in contractor
            assert "education" not in contractor

    def test_limit_caps_page_but_not_total(self, shared_seeded_db):
        result = search_contractors({"db_path": shared_seeded_db, "limit": 2})
        assert result["total_matches"] == 5
        assert result["showing"] == 2
        assert len(result["contractors"]) == 2

    def test_certification_overlap(self, shared_seeded_db):
        result = run_search(shared_seeded_db, certifications=["CISSP"])
        assert ids_of(result) == {"c-james", "c-amira", "c-tom"}

    def test_skills_overlap_matches_any(self, shared_seeded_db):
        result = run_search(shared_seeded_db, skills=["Cloud Security", "Incident Response"])
        assert ids_of(result) == {"c-james", "c-nina"}

    def test_max_rate_is_inclusive(self, shared_seeded_db):
        result = run_search(shared_seeded_db, max_rate=575)
        assert ids_of(result) == {"c-sarah", "c-amira", "c-nina"}

    def test_min_experience_is_inclusive(self, shared_seeded_db):
        result = run_search(shared_seeded_db, min_experience=15)
        assert ids_of(result) == {"c-james", "c-tom"}

    def test_clearance_is_case_insensitive(self, shared_seeded_db):
        result = run_search(shared_seeded_db, clearance="sc cleared")
        assert ids_of(result) == {"c-sarah", "c-amira", "c-tom"}

    def test_sector_membership_is_case_insensitive(self, shared_seeded_db):
        result = run_search(shared_seeded_db, sector="financial services")
        assert ids_of(result) == {"c-sarah", "c-james"}

    def test_availability_filter(self, shared_seeded_db):
        result = run_search(shared_seeded_db, availability="unavailable")
        assert ids_of(result) == {"c-tom"}

    def test_query_searches_skills_elementwise(self, shared_seeded_db):
        result = run_search(shared_seeded_db, query="incident")
        assert ids_of(result) == {"c-nina"}

    def test_query_percent_matches_literally(self, shared_seeded_db):
        result = run_search(shared_seeded_db, query="%")
        assert ids_of(result) == {"c-nina"}

    def test_query_underscore_matches_literally(self, shared_seeded_db):
        result = run_search(shared_seeded_db, query="_")
        assert result["total_matches"] == 0
        assert result["contractors"] == []

    def test_no_match_returns_empty_list(self, shared_seeded_db):
        result = run_search(shared_seeded_db, location="Atlantis")
        assert result == {"total_matches": 0, "showing": 0, "contractors": []}

    def test_blank_filters_are_ignored(self, shared_seeded_db):
        result = search_contractors(
            {"db_path": shared_seeded_db, "query": "  ", "location": "", "certifications": [""]}
        )
        assert result["total_matches"] == 5

    def test_numeric_fields_are_native(self, shared_seeded_db):
        result = run_search(shared_seeded_db, query="sarah")
        sarah = result["contractors"][0]
        assert sarah["day_rate"] == 575 and isinstance(sarah["day_rate"], int)
        assert sarah["rating"] == pytest.approx(4.8)
        assert isinstance(sarah["certifications"], list)

    def test_null_rating_stays_null(self, shared_seeded_db):
        result = run_search(shared_seeded_db, query="amira")
        assert result["contractors"][0]["rating"] is None
        assert result["contractors"][0]["review_count"] == 0

    def test_invalid_availability_is_validation_error(self, shared_seeded_db):
        with pytest.raises(ToolError) as exc_info:
            search_contractors({"db_path": shared_seeded_db, "availability": "soon"})
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_out_of_range(self, shared_seeded_db, limit):
        with pytest.raises(ToolError) as exc_info:
            search_contractors({"db_path": shared_seeded_db, "limit": limit})
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_missing_database(self, tmp_path):
        with pytest.raises(ToolError) as exc_info:
            search_contractors({"db_path": str(tmp_path / "missing.db")})
        assert exc_info.value.code == ErrorCode.DB_NOT_FOUND

    @pytest.mark.parametrize("location", ["Zürich", "zürich", "ZÜRICH"])
    def test_location_folds_non_ascii_case(self, seeded_db, location):
        insert_contractor(
            seeded_db,
            id="c-zurich",
            name="Lena Brunner",
            title="Cloud Security Architect",
            location="Zürich",
            day_rate=900,
            years_experience=11,
            availability="available",
        )
        result = run_search(seeded_db, location=location)
        assert result["total_matches"] == 1
        assert ids_of(result) == {"c-zurich"}

    def test_query_folds_non_ascii_case(self, seeded_db):
        insert_contractor(
            seeded_db,
            id="c-zurich",
            name="Jörg Straße",
            title="Penetration Tester",
            location="Zürich",
            day_rate=900,
            years_experience=11,
            availability="available",
        )
        assert ids_of(run_search(seeded_db, query="JÖRG STRASSE")) == {"c-zurich"}

    def test_malformed_stored_row_is_store_fault(self, seeded_db):
        insert_contractor(
            seeded_db,
            id="c-bad",
            name="Bad Rating",
            title="Auditor",
            location="London",
            day_rate=500,
            years_experience=5,
            availability="available",
            rating="excellent",
        )
        with pytest.raises(ToolError) as exc_info:
            search_contractors({"db_path": seeded_db})
        assert exc_info.value.code == ErrorCode.DB_ERROR
        assert "rating" in exc_info.value.message


class TestSearchProperties:
    """Property-based checks over combinations of filters."""

    @settings(max_examples=60, deadline=None)
    @given(
        choice=st.fixed_dictionaries(
            {name: st.sampled_from(values) for name, values in FILTER_CHOICES.items()}
        )
    )
    def test_filters_combine_as_intersection(self, shared_seeded_db, choice):
        combined = run_search(shared_seeded_db, **choice)

        expected = set(ALL_IDS)
        for name, value in choice.items():
            if value is not None:
                expected &= ids_of(run_search(shared_seeded_db, **{name: value}))

        assert ids_of(combined) == expected
        assert combined["total_matches"] >= combined["showing"] >= 0

    @settings(deadline=None)
    @given(location=st.sampled_from(["London", "london", "LONDON", "lOnDoN"]))
    def test_location_is_case_insensitive(self, shared_seeded_db, location):
        assert ids_of(run_search(shared_seeded_db, location=location)) == {"c-sarah", "c-amira"}

    @settings(deadline=None)
    @given(
        other=st.fixed_dictionaries(
            {
                "location": st.sampled_from(FILTER_CHOICES["location"]),
                "skills": st.sampled_from(FILTER_CHOICES["skills"]),
            }
        )
    )
    def test_availability_any_equals_no_filter(self, shared_seeded_db, other):
        with_any = run_search(shared_seeded_db, availability="any", **other)
        without = run_search(shared_seeded_db, **other)
        assert with_any == without

    @settings(max_examples=40, deadline=None)
    @given(
        payload=st.one_of(st.sampled_from(INJECTION_PAYLOADS), st.text(max_size=40)),
        field=st.sampled_from(["query", "location", "sector", "clearance"]),
    )
    def test_injection_payloads_are_inert(self, shared_seeded_db, payload, field):
        before = count_rows(shared_seeded_db, "contractors")

        result = run_search(shared_seeded_db, **{field: payload})

        assert set(result) == {"total_matches", "showing", "contractors"}
        assert ids_of(result) <= ALL_IDS
        assert count_rows(shared_seeded_db, "contractors") == before

    @settings(max_examples=20, deadline=None)
    @given(payload=st.sampled_from(INJECTION_PAYLOADS))
    def test_injection_in_set_filters_is_inert(self, shared_seeded_db, payload):
        result = run_search(shared_seeded_db, certifications=[payload], skills=[payload])
        assert result["total_matches"] == 0
        assert count_rows(shared_seeded_db, "contractors") == len(ALL_IDS)


class TestContractorLookup:
    def test_get_contractor(self, shared_seeded_db):
        contractor = get_contractor({"id": "c-sarah", "db_path": shared_seeded_db})
        assert contractor["name"] == "Sarah Chen"
        assert contractor["skills"] == ["ISO 27001", "Penetration Testing", "Risk Assessment"]
        assert "email" not in contractor

    def test_get_contractor_missing_returns_none(self, shared_seeded_db):
        assert get_contractor({"id": "nope", "db_path": shared_seeded_db}) is None

    def test_get_contractor_requires_id(self, shared_seeded_db):
        with pytest.raises(ToolError) as exc_info:
            get_contractor({"db_path": shared_seeded_db})
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR

    def test_get_contractor_cv_includes_cv_fields(self, shared_seeded_db):
        cv = get_contractor_cv({"id": "c-sarah", "db_path": shared_seeded_db})
        assert cv["email"] == "sarah.chen@example.com"
        assert cv["education"] == [
            {"institution": "University of Leeds", "degree": "BSc Computer Science", "year": 2008}
        ]
        assert cv["work_history"][0]["role"] == "Senior Auditor"
        assert cv["work_history"][0]["description"] is None
        assert cv["notable_projects"][0]["client"] == "Acme Bank"
        assert cv["languages"] == ["English", "Mandarin"]

    def test_get_contractor_cv_defaults_empty_cv_sections(self, shared_seeded_db):
        cv = get_contractor_cv({"id": "c-nina", "db_path": shared_seeded_db})
        assert cv["education"] == []
        assert cv["languages"] == []
        assert cv["email"] is None

    def test_get_contractor_cv_missing_returns_none(self, shared_seeded_db):
        assert get_contractor_cv({"id": "nope", "db_path": shared_seeded_db}) is None


class TestCompareContractors:
    def test_returns_in_request_order_with_missing_ids(self, shared_seeded_db):
        result = compare_contractors(
            {"ids": ["c-james", "ghost", "c-sarah"], "db_path": shared_seeded_db}
        )
        assert [c["id"] for c in result["contractors"]] == ["c-james", "c-sarah"]
        assert result["missing_ids"] == ["ghost"]
        assert result["contractors"][1]["email"] == "sarah.chen@example.com"

    @pytest.mark.parametrize(
        "ids",
        [["c-sarah"], ["c-sarah", "c-sarah"], [f"c-{n}" for n in range(11)]],
    )
    def test_rejects_bad_id_lists(self, shared_seeded_db, ids):
        with pytest.raises(ToolError) as exc_info:
            compare_contractors({"ids": ids, "db_path": shared_seeded_db})
        assert exc_info.value.code == ErrorCode.VALIDATION_ERROR
