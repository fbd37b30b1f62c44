"""
Matching engine helpers: job requirements -> contractor predicates, and
per-candidate fit annotations.

The store does the filtering and ranking (see
``db.contractors_reader.MATCH_ORDER``); this module decides which
predicates apply for a given job and explains each result.
"""

from typing import Any, Dict, Iterable, List, Optional

from db.connection import fold
from db.query_builder import QueryBuilder
from models.status import Availability


def build_match_filters(job: Dict[str, Any]) -> QueryBuilder:
    """
    Build the candidate predicates for a normalized job record.

    Unavailable contractors are always excluded. Certification overlap,
    skill overlap, clearance and minimum experience only apply when the
    job specifies them.
    """
    builder = QueryBuilder()
    builder.not_equal("availability", Availability.UNAVAILABLE.value)
    builder.overlaps("certifications", job.get("required_certifications"))
    builder.overlaps("skills", job.get("required_skills"))
    builder.equals_ignore_case("security_clearance", job.get("required_clearance"))
    builder.at_least("years_experience", job.get("experience_min"))
    return builder


def intersect_in_order(required: Iterable[str], held: Iterable[str]) -> List[str]:
    """Elements of ``required`` that appear in ``held``, in required order, without repeats."""
    held_set = set(held)
    matched: List[str] = []
    for item in required:
        if item in held_set and item not in matched:
            matched.append(item)
    return matched


def same_location(a: Optional[str], b: Optional[str]) -> bool:
    if a is None or b is None:
        return False
    return fold(a) == fold(b)


def within_budget(day_rate: Optional[int], day_rate_max: Optional[int]) -> bool:
    """A job without a maximum rate has no ceiling."""
    if day_rate_max is None:
        return True
    if day_rate is None:
        return False
    return day_rate <= day_rate_max


def annotate_candidate(candidate: Dict[str, Any], job: Dict[str, Any]) -> Dict[str, Any]:
    """
    Attach fit annotations to a normalized contractor record.

    Returns:
        A new dict: the candidate fields plus matching_certifications,
        matching_skills, location_match and within_budget
    """
    annotated = dict(candidate)
    annotated["matching_certifications"] = intersect_in_order(
        job.get("required_certifications") or [], candidate.get("certifications") or []
    )
    annotated["matching_skills"] = intersect_in_order(
        job.get("required_skills") or [], candidate.get("skills") or []
    )
    annotated["location_match"] = same_location(candidate.get("location"), job.get("location"))
    annotated["within_budget"] = within_budget(
        candidate.get("day_rate"), job.get("day_rate_max")
    )
    return annotated
