from datetime import datetime
from typing import Optional

from job_board.models.application import ApplicationStatus, normalize_status
from job_board.schemas.base import ApiModel


class ApplicationRequest(ApiModel):
    vacancy_id: int
    candidate_id: int
    resume_id: int
    employer_id: Optional[int] = None


class ApplicationResponse(ApiModel):
    id: int
    vacancy_id: int
    candidate_id: int
    resume_id: int
    employer_id: Optional[int] = None
    status_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def status(self) -> ApplicationStatus:
        return normalize_status(self.status_name)

    def as_request(self) -> ApplicationRequest:
        return ApplicationRequest(
            vacancy_id=self.vacancy_id,
            candidate_id=self.candidate_id,
            resume_id=self.resume_id,
            employer_id=self.employer_id,
        )


class ApplicationStatistics(ApiModel):
    total_applications: int = 0
    applications_by_status: dict[str, int] = {}
