import enum
from typing import Optional


class UserRole(str, enum.Enum):
    JOB_SEEKER = "JOB_SEEKER"
    EMPLOYER = "EMPLOYER"

    @classmethod
    def parse(cls, raw) -> Optional["UserRole"]:
        if raw is None:
            return None
        if isinstance(raw, cls):
            return raw
        text_role = str(raw).strip().upper().replace("-", "_").replace(" ", "_")
        if text_role.startswith("ROLE_"):
            text_role = text_role[len("ROLE_"):]
        if text_role == "JOBSEEKER":
            text_role = "JOB_SEEKER"
        try:
            return cls(text_role)
        except ValueError:
            return None

    @property
    def dashboard_url(self) -> str:
        if self is UserRole.EMPLOYER:
            return "/employer/dashboard"
        return "/jobseeker/dashboard"
