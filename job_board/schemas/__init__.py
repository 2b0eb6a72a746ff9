from job_board.schemas.page import PageResponse
from job_board.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from job_board.schemas.user import UserProfile
from job_board.schemas.company import Company
from job_board.schemas.vacancy import Vacancy
from job_board.schemas.resume import Education, Resume, Skill
from job_board.schemas.application import (
    ApplicationRequest,
    ApplicationResponse,
    ApplicationStatistics,
)

__all__ = [
    "PageResponse",
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "UserProfile",
    "Company",
    "Vacancy",
    "Education",
    "Resume",
    "Skill",
    "ApplicationRequest",
    "ApplicationResponse",
    "ApplicationStatistics",
]
