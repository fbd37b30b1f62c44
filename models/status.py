"""
Centralized, type-safe vocabulary for every enumerated column in the store.

Each Enum inherits from ``(str, Enum)`` so members compare equal to the
plain strings already stored in the database and serialize unchanged at
the MCP boundary. Constructing a member from an unknown string raises
``ValueError``, which keeps free-form values out of the write paths.
"""

from enum import Enum


class Availability(str, Enum):
    """Contractor availability. Booking forces ``UNAVAILABLE``."""

    AVAILABLE = "available"
    WITHIN_30_DAYS = "within_30_days"
    UNAVAILABLE = "unavailable"


class AvailabilityFilter(str, Enum):
    """Availability values accepted by search; ``ANY`` never becomes a predicate."""

    AVAILABLE = "available"
    WITHIN_30_DAYS = "within_30_days"
    UNAVAILABLE = "unavailable"
    ANY = "any"


class JobStatus(str, Enum):
    """Job lifecycle. Transitions only happen through update_job_status."""

    OPEN = "open"
    SHORTLISTING = "shortlisting"
    INTERVIEWING = "interviewing"
    OFFERED = "offered"
    FILLED = "filled"
    CANCELLED = "cancelled"


# Jobs in these states drop out of the pipeline view
CLOSED_JOB_STATUSES = (JobStatus.FILLED, JobStatus.CANCELLED)


class JobUrgency(str, Enum):
    """Job urgency; ``rank`` is the sort priority (critical first)."""

    LOW = "low"
    NORMAL = "normal"
    URGENT = "urgent"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    JobUrgency.CRITICAL: 1,
    JobUrgency.URGENT: 2,
    JobUrgency.NORMAL: 3,
    JobUrgency.LOW: 4,
}


class RemoteOption(str, Enum):
    ONSITE = "onsite"
    HYBRID = "hybrid"
    REMOTE = "remote"


class ShortlistStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    FILLED = "filled"


class ShortlistItemStatus(str, Enum):
    """Per-candidate pipeline status, independent of the parent shortlist."""

    SHORTLISTED = "shortlisted"
    CONTACTED = "contacted"
    INTERVIEWING = "interviewing"
    OFFERED = "offered"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    WITHDRAWN = "withdrawn"


class OutreachStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    REPLIED = "replied"


class EngagementStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Engagements in these states count as live in the pipeline view
LIVE_ENGAGEMENT_STATUSES = (
    EngagementStatus.PENDING,
    EngagementStatus.CONFIRMED,
    EngagementStatus.ACTIVE,
)
