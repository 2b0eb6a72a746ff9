from job_board.services.auth_service import AuthService
from job_board.services.vacancy_service import VacancyService
from job_board.services.company_service import CompanyService
from job_board.services.resume_service import EducationService, ResumeService, SkillService
from job_board.services.application_service import ApplicationService
from job_board.services.user_service import UserService

__all__ = [
    "AuthService",
    "VacancyService",
    "CompanyService",
    "ResumeService",
    "EducationService",
    "SkillService",
    "ApplicationService",
    "UserService",
]
