from datetime import datetime
from typing import Optional

from job_board.schemas.base import ApiModel


class Education(ApiModel):
    id: Optional[int] = None
    resume_id: Optional[int] = None
    institution: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None


class Skill(ApiModel):
    id: Optional[int] = None
    resume_id: Optional[int] = None
    name: str


class Resume(ApiModel):
    id: Optional[int] = None
    user_id: Optional[int] = None
    title: str
    summary: Optional[str] = None
    experience_years: Optional[int] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    is_published: Optional[bool] = None
    created_at: Optional[datetime] = None
