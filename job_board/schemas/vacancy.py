from datetime import datetime
from typing import Optional

from job_board.schemas.base import ApiModel


class Vacancy(ApiModel):
    id: Optional[int] = None
    title: str
    description: Optional[str] = None
    salary: Optional[float] = None
    company_name: Optional[str] = None
    company_id: Optional[int] = None
    employer_id: Optional[int] = None
    is_published: Optional[bool] = None
    created_at: Optional[datetime] = None

    def matches(self, term: str) -> bool:
        """Case-insensitive match on title, company name and description."""
        needle = (term or "").strip().lower()
        if not needle:
            return True
        return any(
            needle in (value or "").lower()
            for value in (self.title, self.company_name, self.description)
        )
