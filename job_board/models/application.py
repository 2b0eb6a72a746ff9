"""Application status workflow.

Every screen that shows, filters, counts or acts on an application's status
goes through this module. The backend has spoken several vocabularies over
time (``PENDING``/``NEW``, localized ``Новый``/``Отказ``/``Отозван``); they are
all folded into :class:`ApplicationStatus` by :func:`normalize_status`.
"""
from __future__ import annotations

import enum
from collections import Counter
from typing import Any, Iterable, Mapping, Optional

from job_board.models.user import UserRole


class ApplicationStatus(str, enum.Enum):
    NEW = "NEW"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def badge(self) -> str:
        return STATUS_BADGES[self]

    @property
    def is_initial(self) -> bool:
        return self is INITIAL_STATUS


INITIAL_STATUS = ApplicationStatus.NEW

# Statuses an employer can filter application lists by.
FILTERABLE_STATUSES = (
    ApplicationStatus.NEW,
    ApplicationStatus.ACCEPTED,
    ApplicationStatus.REJECTED,
    ApplicationStatus.WITHDRAWN,
)

STATUS_LABELS = {
    ApplicationStatus.NEW: "New",
    ApplicationStatus.ACCEPTED: "Accepted",
    ApplicationStatus.REJECTED: "Rejected",
    ApplicationStatus.WITHDRAWN: "Withdrawn",
    ApplicationStatus.UNKNOWN: "Unknown",
}

STATUS_BADGES = {
    ApplicationStatus.NEW: "badge-new",
    ApplicationStatus.ACCEPTED: "badge-accepted",
    ApplicationStatus.REJECTED: "badge-rejected",
    ApplicationStatus.WITHDRAWN: "badge-withdrawn",
    ApplicationStatus.UNKNOWN: "badge-unknown",
}

_STATUS_ALIASES = {
    "new": ApplicationStatus.NEW,
    "pending": ApplicationStatus.NEW,
    "новый": ApplicationStatus.NEW,
    "ожидает": ApplicationStatus.NEW,
    "accepted": ApplicationStatus.ACCEPTED,
    "принят": ApplicationStatus.ACCEPTED,
    "принято": ApplicationStatus.ACCEPTED,
    "rejected": ApplicationStatus.REJECTED,
    "отказ": ApplicationStatus.REJECTED,
    "отклонено": ApplicationStatus.REJECTED,
    "withdrawn": ApplicationStatus.WITHDRAWN,
    "отозван": ApplicationStatus.WITHDRAWN,
    "отозвано": ApplicationStatus.WITHDRAWN,
}


def normalize_status(raw_status: Any) -> ApplicationStatus:
    """Map any status literal the backend has used onto one enum member."""
    if raw_status is None:
        return ApplicationStatus.UNKNOWN
    if isinstance(raw_status, ApplicationStatus):
        return raw_status
    if hasattr(raw_status, "value"):
        raw_status = raw_status.value
    text_status = str(raw_status).strip()
    if "." in text_status:
        text_status = text_status.split(".")[-1]
    key = text_status.casefold().replace("-", "_").replace(" ", "_")
    return _STATUS_ALIASES.get(key, ApplicationStatus.UNKNOWN)


def parse_status_filter(raw_filter: Optional[str]) -> Optional[ApplicationStatus]:
    """``None`` means "ALL"; unknown filter values also fall back to ALL."""
    if not raw_filter or raw_filter.strip().upper() == "ALL":
        return None
    status = normalize_status(raw_filter)
    if status is ApplicationStatus.UNKNOWN:
        return None
    return status


def _status_of(application) -> ApplicationStatus:
    return normalize_status(getattr(application, "status_name", None))


def can_reject(application, session, vacancy=None) -> bool:
    """Applications without ``employerId`` are owned by whoever owns the vacancy."""
    owner = getattr(application, "employer_id", None)
    if owner is None:
        owner = getattr(vacancy, "employer_id", None)
    return (
        session is not None
        and session.is_authenticated
        and session.user_role is UserRole.EMPLOYER
        and _status_of(application).is_initial
        and owner is not None
        and owner == session.user_id
    )


def can_withdraw(application, session) -> bool:
    return (
        session is not None
        and session.is_authenticated
        and session.user_role is UserRole.JOB_SEEKER
        and _status_of(application).is_initial
        and getattr(application, "candidate_id", None) == session.user_id
    )


def owned_by_employer(applications: Iterable, employer_id: Optional[int]) -> list:
    # Lists already come from an employer-scoped endpoint; a missing owner is kept.
    return [a for a in applications if getattr(a, "employer_id", None) in (None, employer_id)]


def owned_by_candidate(applications: Iterable, candidate_id: Optional[int]) -> list:
    return [a for a in applications if getattr(a, "candidate_id", None) == candidate_id]


def filter_by_status(applications: Iterable, status: Optional[ApplicationStatus]) -> list:
    if status is None:
        return list(applications)
    return [a for a in applications if _status_of(a) is status]


def count_by_status(applications: Iterable) -> dict[ApplicationStatus, int]:
    counts = {status: 0 for status in ApplicationStatus}
    counts.update(Counter(_status_of(a) for a in applications))
    return counts


def group_by_status(applications: Iterable) -> list[dict[str, Any]]:
    """Buckets in display order; empty buckets are kept so counters render zero."""
    buckets: dict[ApplicationStatus, list] = {status: [] for status in FILTERABLE_STATUSES}
    others = []
    for application in applications:
        status = _status_of(application)
        if status in buckets:
            buckets[status].append(application)
        else:
            others.append(application)
    grouped = [
        {"status": status, "label": status.label, "applications": items, "count": len(items)}
        for status, items in buckets.items()
    ]
    if others:
        grouped.append({
            "status": ApplicationStatus.UNKNOWN,
            "label": ApplicationStatus.UNKNOWN.label,
            "applications": others,
            "count": len(others),
        })
    return grouped


def normalize_status_counts(raw_counts: Optional[Mapping[str, int]]) -> dict[ApplicationStatus, int]:
    counts = {status: 0 for status in ApplicationStatus}
    for raw_status, count in (raw_counts or {}).items():
        counts[normalize_status(raw_status)] += int(count or 0)
    return counts


def statistics_consistent(statistics, applications: Iterable) -> bool:
    """True when a statistics payload agrees with the list it summarizes."""
    applications = list(applications)
    by_status = normalize_status_counts(getattr(statistics, "applications_by_status", None))
    if getattr(statistics, "total_applications", 0) != len(applications):
        return False
    if sum(by_status.values()) != len(applications):
        return False
    return by_status == count_by_status(applications)


class SubmissionRefused(ValueError):
    """Raised when an application cannot be submitted from the client side."""


def build_application_request(vacancy, session, resume_id: Optional[int]) -> dict[str, int]:
    if session is None or session.user_role is not UserRole.JOB_SEEKER or session.user_id is None:
        raise SubmissionRefused("Only job seekers can apply to vacancies")
    if not resume_id:
        raise SubmissionRefused("Please select a resume")
    if vacancy is None or vacancy.id is None:
        raise SubmissionRefused("Vacancy not found")
    if vacancy.is_published is False:
        raise SubmissionRefused("This vacancy is not published")
    return {
        "vacancy_id": vacancy.id,
        "employer_id": vacancy.employer_id,
        "candidate_id": session.user_id,
        "resume_id": int(resume_id),
    }
