from job_board.models.user import UserRole
from job_board.models.application import (
    ApplicationStatus,
    INITIAL_STATUS,
    FILTERABLE_STATUSES,
    STATUS_LABELS,
    SubmissionRefused,
    normalize_status,
)

__all__ = [
    "UserRole",
    "ApplicationStatus",
    "INITIAL_STATUS",
    "FILTERABLE_STATUSES",
    "STATUS_LABELS",
    "SubmissionRefused",
    "normalize_status",
]
