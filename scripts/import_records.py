#!/usr/bin/env python3
"""
Import contractors and jobs from a JSON file into the record store.

The input file holds {"contractors": [...], "jobs": [...]}. The schema is
bootstrapped first; records whose id already exists are skipped, so the
import can be re-run safely.

Usage:
    python -m scripts.import_records --input seed.json
    python -m scripts.import_records --input seed.json --db data/contractors.db --dry-run
"""

import argparse
import json
import sqlite3
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Tuple

from db.connection import busy_timeout
from db.schema import ensure_database
from models.status import Availability, JobStatus, JobUrgency, RemoteOption
from utils.normalization import coerce_float, coerce_int
from utils.validation import get_current_utc_timestamp

CONTRACTOR_LIST_FIELDS = ("certifications", "sectors", "skills", "languages")
CONTRACTOR_JSON_FIELDS = ("education", "work_history", "notable_projects")
JOB_LIST_FIELDS = ("required_certifications", "required_skills")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import contractors and jobs into SQLite.")
    parser.add_argument(
        "--input",
        required=True,
        help='Path to JSON file: {"contractors": [...], "jobs": [...]}.',
    )
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite DB path (default: CONTRACTOR_SEARCH_DB or data/contractors.db).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print cleaned records; do not write to DB.",
    )
    return parser.parse_args(argv)


def normalize_text(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def derive_initials(name: str) -> str:
    return "".join(part[0].upper() for part in name.split() if part)


def _string_list(value: Any) -> List[str]:
    if not value:
        return []
    cleaned = []
    for item in value:
        text = normalize_text(item)
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def _number(record: Dict[str, Any], key: str, coerce, required: bool = False):
    try:
        value = coerce(record.get(key))
    except ValueError as e:
        raise ValueError(f"invalid '{key}': {e}") from e
    if value is None and required:
        raise ValueError(f"missing '{key}'")
    return value


def clean_contractor(record: Dict[str, Any], now: str) -> Dict[str, Any]:
    """
    Shape one contractor record for insertion.

    Raises:
        ValueError: If a required field is missing or an enum value is unknown
    """
    name = normalize_text(record.get("name"))
    if not name:
        raise ValueError("contractor is missing 'name'")

    item = {
        "id": normalize_text(record.get("id")) or str(uuid.uuid4()),
        "name": name,
        "initials": normalize_text(record.get("initials")) or derive_initials(name),
        "title": normalize_text(record.get("title")) or "",
        "bio": normalize_text(record.get("bio")),
        "location": normalize_text(record.get("location")) or "",
        "day_rate": _number(record, "day_rate", coerce_int, required=True),
        "years_experience": _number(record, "years_experience", coerce_int, required=True),
        "availability": Availability(record.get("availability") or "available").value,
        "available_from": normalize_text(record.get("available_from")),
        "rating": _number(record, "rating", coerce_float),
        "review_count": _number(record, "review_count", coerce_int) or 0,
        "placement_count": _number(record, "placement_count", coerce_int) or 0,
        "security_clearance": normalize_text(record.get("security_clearance")),
        "email": normalize_text(record.get("email")),
        "phone": normalize_text(record.get("phone")),
        "linkedin_url": normalize_text(record.get("linkedin_url")),
        "profile_photo_url": normalize_text(record.get("profile_photo_url")),
        "created_at": normalize_text(record.get("created_at")) or now,
    }
    for field in CONTRACTOR_LIST_FIELDS:
        item[field] = json.dumps(_string_list(record.get(field)))
    for field in CONTRACTOR_JSON_FIELDS:
        item[field] = json.dumps(record.get(field) or [])
    return item


def clean_job(record: Dict[str, Any], now: str) -> Dict[str, Any]:
    """
    Shape one job record for insertion.

    Raises:
        ValueError: If a required field is missing or an enum value is unknown
    """
    title = normalize_text(record.get("title"))
    if not title:
        raise ValueError("job is missing 'title'")

    def optional_int(key):
        return _number(record, key, coerce_int)

    item = {
        "id": normalize_text(record.get("id")) or str(uuid.uuid4()),
        "title": title,
        "client_name": normalize_text(record.get("client_name")) or "",
        "description": normalize_text(record.get("description")) or "",
        "location": normalize_text(record.get("location")) or "",
        "remote_option": RemoteOption(record.get("remote_option") or "hybrid").value,
        "day_rate_min": optional_int("day_rate_min"),
        "day_rate_max": optional_int("day_rate_max"),
        "duration_weeks": optional_int("duration_weeks"),
        "start_date": normalize_text(record.get("start_date")),
        "required_clearance": normalize_text(record.get("required_clearance")),
        "sector": normalize_text(record.get("sector")),
        "experience_min": optional_int("experience_min"),
        "status": JobStatus(record.get("status") or "open").value,
        "urgency": JobUrgency(record.get("urgency") or "normal").value,
        "notes": normalize_text(record.get("notes")),
        "created_at": normalize_text(record.get("created_at")) or now,
        "updated_at": normalize_text(record.get("updated_at")) or now,
    }
    for field in JOB_LIST_FIELDS:
        item[field] = json.dumps(_string_list(record.get(field)))
    return item


def _insert_ignore(conn: sqlite3.Connection, table: str, item: Dict[str, Any]) -> bool:
    columns = ", ".join(item)
    placeholders = ", ".join("?" * len(item))
    cur = conn.execute(
        f"INSERT OR IGNORE INTO {table} ({columns}) VALUES ({placeholders})",
        tuple(item.values()),
    )
    return cur.rowcount > 0


def import_records(
    conn: sqlite3.Connection,
    contractors: List[Dict[str, Any]],
    jobs: List[Dict[str, Any]],
) -> Tuple[int, int]:
    """
    Insert cleaned contractors and jobs, skipping ids already present.

    Returns:
        (inserted, duplicates)
    """
    inserted = 0
    duplicates = 0
    for table, items in (("contractors", contractors), ("jobs", jobs)):
        for item in items:
            if _insert_ignore(conn, table, item):
                inserted += 1
            else:
                duplicates += 1
    conn.commit()
    return inserted, duplicates


def main(argv=None) -> int:
    args = parse_args(argv)
    data = json.loads(Path(args.input).read_text(encoding="utf-8"))
    now = get_current_utc_timestamp()

    try:
        contractors = [clean_contractor(record, now) for record in data.get("contractors", [])]
        jobs = [clean_job(record, now) for record in data.get("jobs", [])]
    except ValueError as e:
        print(f"invalid record: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        print(json.dumps({"contractors": contractors, "jobs": jobs}, ensure_ascii=False, indent=2))
        return 0

    db_path = ensure_database(args.db)
    conn = sqlite3.connect(db_path, timeout=busy_timeout())
    try:
        inserted, duplicates = import_records(conn, contractors, jobs)
    finally:
        conn.close()

    print(
        f"contractors: {len(contractors)} jobs: {len(jobs)} "
        f"inserted: {inserted} duplicates: {duplicates}"
    )
    print(f"db: {db_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
