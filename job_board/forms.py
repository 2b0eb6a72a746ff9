"""Form validation run before anything is sent to the backend.

Constraints are declared on the fields; :func:`form_errors` turns pydantic's
error types into the messages shown next to each input.
"""
from __future__ import annotations

from typing import Any, ClassVar, Optional

from pydantic import AnyHttpUrl, BaseModel, EmailStr, Field, ValidationError, field_validator

from job_board.models.user import UserRole
from job_board.schemas.auth import LoginRequest, RegisterRequest
from job_board.schemas.company import Company
from job_board.schemas.resume import Education, Resume, Skill
from job_board.schemas.user import UserProfile
from job_board.schemas.vacancy import Vacancy

ACCOUNT_PHONE_PATTERN = r"^\+?[0-9]{10,15}$"
COMPANY_PHONE_PATTERN = r"^(\+7|8|\+380|\+375)\d{9,11}$"
CONTACT_PHONE_PATTERN = r"^[+]?[- 0-9()]{7,20}$"

# Errors that mean "the value was not a parseable number".
_NUMBER_ERRORS = {"int_parsing", "float_parsing", "int_from_float"}


class FormModel(BaseModel):
    model_config = {"extra": "ignore"}

    # Field name -> message for a missing value / a value in the wrong format.
    required_messages: ClassVar[dict[str, str]] = {}
    invalid_messages: ClassVar[dict[str, str]] = {}

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @classmethod
    def label(cls, name: str) -> str:
        field = cls.model_fields.get(name)
        if field is not None and field.title:
            return field.title
        return name.replace("_", " ").capitalize()

    @classmethod
    def error_message(cls, name: str, err: dict[str, Any]) -> str:
        kind = err.get("type", "")
        ctx = err.get("ctx") or {}
        label = cls.label(name)
        if kind == "missing" or err.get("input", "") is None:
            return cls.required_messages.get(name, f"{label} is required")
        if kind == "string_too_short":
            return f"{label} must be at least {ctx.get('min_length')} characters"
        if kind == "string_too_long":
            return f"{label} must be at most {ctx.get('max_length')} characters"
        if kind == "greater_than_equal":
            if ctx.get("ge") == 0:
                return f"{label} cannot be negative"
            return f"{label} must be at least {ctx.get('ge')}"
        if kind in _NUMBER_ERRORS:
            return f"{label} must be a number"
        if name in cls.invalid_messages:
            return cls.invalid_messages[name]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        return message


def form_errors(exc: ValidationError, form: type[FormModel] = FormModel) -> dict[str, str]:
    """Flatten a pydantic error into ``{field: message}``, first message wins."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = tuple(err.get("loc", ()))
        field = ".".join(str(part) for part in loc) or "__all__"
        if len(loc) == 1:
            message = form.error_message(str(loc[0]), err)
        else:
            # Nested row errors (education.0.start_year) keep pydantic's text.
            message = FormModel.error_message(str(loc[-1]), err) if loc else str(err.get("msg"))
        errors.setdefault(field, message)
    return errors


class LoginForm(FormModel):
    email: EmailStr
    password: str

    invalid_messages: ClassVar[dict[str, str]] = {"email": "Invalid email address"}

    def to_request(self) -> LoginRequest:
        return LoginRequest(email=self.email, password=self.password)


class RegisterForm(FormModel):
    username: str = Field(min_length=3, max_length=32)
    email: EmailStr
    phone: str = Field(title="Phone number", pattern=ACCOUNT_PHONE_PATTERN)
    password: str = Field(min_length=8, max_length=64)
    user_role: UserRole

    required_messages: ClassVar[dict[str, str]] = {"user_role": "Please select a role"}
    invalid_messages: ClassVar[dict[str, str]] = {
        "email": "Invalid email address",
        "phone": "Phone number must be 10-15 digits",
        "user_role": "Please select a role",
    }

    @field_validator("user_role", mode="before")
    @classmethod
    def _role(cls, v):
        return UserRole.parse(v) or v

    def to_request(self) -> RegisterRequest:
        return RegisterRequest(
            username=self.username,
            email=self.email,
            phone=self.phone,
            password=self.password,
            user_role=self.user_role,
        )


class CompanyForm(FormModel):
    name: str = Field(title="Company name", min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    location: str
    email: EmailStr
    phone_number: Optional[str] = Field(None, pattern=COMPANY_PHONE_PATTERN)
    website: Optional[AnyHttpUrl] = None

    invalid_messages: ClassVar[dict[str, str]] = {
        "email": "Invalid email address",
        "phone_number": "Invalid phone number format",
        "website": "Website must be a valid URL",
    }

    def to_company(self, employer_id: Optional[int]) -> Company:
        return Company(employer_id=employer_id, **self.model_dump(mode="json"))


class VacancyForm(FormModel):
    title: str = Field(min_length=3, max_length=255)
    description: str = Field(max_length=5000)
    company_name: str
    salary: Optional[float] = Field(None, ge=0)

    required_messages: ClassVar[dict[str, str]] = {"company_name": "Select a company"}

    def to_vacancy(self, employer_id: Optional[int], company_id: Optional[int] = None) -> Vacancy:
        return Vacancy(employer_id=employer_id, company_id=company_id, **self.model_dump())


class EducationRow(FormModel):
    id: Optional[int] = None
    institution: Optional[str] = None
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_year: Optional[int] = None
    end_year: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.institution and self.degree and self.field_of_study)

    def to_education(self, resume_id: int) -> Education:
        return Education(resume_id=resume_id, **self.model_dump())


class SkillRow(FormModel):
    id: Optional[int] = None
    name: Optional[str] = None


class ResumeForm(FormModel):
    title: str = Field(min_length=3, max_length=255)
    summary: Optional[str] = Field(None, max_length=5000)
    experience_years: Optional[int] = Field(None, title="Experience", ge=0)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = Field(None, pattern=CONTACT_PHONE_PATTERN)
    is_published: bool = False
    education: list[EducationRow] = []
    skills: list[SkillRow] = []

    invalid_messages: ClassVar[dict[str, str]] = {
        "contact_email": "Invalid email address",
        "contact_phone": "Invalid phone number",
    }

    @field_validator("is_published", mode="before")
    @classmethod
    def _checkbox(cls, v):
        if isinstance(v, str):
            return v.lower() in {"on", "true", "1", "yes"}
        return bool(v)

    def to_resume(self, user_id: Optional[int], resume_id: Optional[int] = None) -> Resume:
        return Resume(
            id=resume_id,
            user_id=user_id,
            title=self.title,
            summary=self.summary,
            experience_years=self.experience_years,
            contact_email=self.contact_email,
            contact_phone=self.contact_phone,
            is_published=self.is_published,
        )

    def educations(self, resume_id: int) -> list[Education]:
        """Rows missing institution, degree or field of study are skipped."""
        return [row.to_education(resume_id) for row in self.education if row.is_complete]

    def skill_entries(self, resume_id: int) -> list[Skill]:
        """Blank skill rows are skipped."""
        return [Skill(id=row.id, resume_id=resume_id, name=row.name) for row in self.skills if row.name]

    def removed_skill_ids(self) -> list[int]:
        """Existing skills whose name was cleared on the edit form."""
        return [row.id for row in self.skills if row.id and not row.name]


class ProfileForm(FormModel):
    username: str = Field(min_length=3, max_length=32)
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone_number: Optional[str] = None

    invalid_messages: ClassVar[dict[str, str]] = {"email": "Invalid email address"}

    def to_profile(self, user_id: int) -> UserProfile:
        return UserProfile(id=user_id, **self.model_dump())


def parse_resume_form(form) -> dict[str, Any]:
    """Collect a multi-row resume form (parallel ``education_*`` lists) into a dict."""
    return {
        "title": form.get("title"),
        "summary": form.get("summary"),
        "experience_years": form.get("experience_years"),
        "contact_email": form.get("contact_email"),
        "contact_phone": form.get("contact_phone"),
        "is_published": form.get("is_published", False),
        "education": _rows(form, "education", ("id", "institution", "degree", "field_of_study", "start_year", "end_year")),
        "skills": _rows(form, "skill", ("id", "name")),
    }


def _rows(form, prefix: str, fields: tuple[str, ...]) -> list[dict[str, Any]]:
    columns = {f: form.getlist(f"{prefix}_{f}") for f in fields}
    row_count = max((len(c) for c in columns.values()), default=0)
    return [
        {f: (columns[f][i] if i < len(columns[f]) else None) for f in fields}
        for i in range(row_count)
    ]
