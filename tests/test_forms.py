import pytest
from pydantic import ValidationError
from starlette.datastructures import FormData

from job_board.forms import (
    CompanyForm,
    LoginForm,
    RegisterForm,
    ResumeForm,
    VacancyForm,
    form_errors,
    parse_resume_form,
)
from job_board.models.user import UserRole


def _errors(model, data):
    with pytest.raises(ValidationError) as exc_info:
        model.model_validate(data)
    return form_errors(exc_info.value, model)


def test_login_form_messages():
    errors = _errors(LoginForm, {"email": "  ", "password": ""})
    assert errors == {"email": "Email is required", "password": "Password is required"}
    assert _errors(LoginForm, {"email": "nope", "password": "x"}) == {"email": "Invalid email address"}


def test_register_form_rules():
    errors = _errors(RegisterForm, {
        "username": "ab",
        "email": "a@b.co",
        "phone": "123",
        "password": "short",
        "user_role": "",
    })
    assert errors["username"] == "Username must be at least 3 characters"
    assert errors["phone"] == "Phone number must be 10-15 digits"
    assert errors["password"] == "Password must be at least 8 characters"
    assert errors["user_role"] == "Please select a role"


def test_register_form_builds_request():
    form = RegisterForm.model_validate({
        "username": "anna",
        "email": "anna@mail.io",
        "phone": "+79991234567",
        "password": "password123",
        "user_role": "JOB_SEEKER",
    })
    payload = form.to_request().to_payload()
    assert payload["userRole"] == "JOB_SEEKER"
    assert form.user_role is UserRole.JOB_SEEKER


def test_company_form_phone_and_website():
    errors = _errors(CompanyForm, {
        "name": "Acme",
        "location": "Moscow",
        "email": "hr@acme.io",
        "phone_number": "12345",
        "website": "acme.io",
    })
    assert errors == {
        "phone_number": "Invalid phone number format",
        "website": "Website must be a valid URL",
    }


def test_company_form_optional_fields_may_be_blank():
    form = CompanyForm.model_validate({"name": "Acme", "location": "Moscow", "email": "hr@acme.io",
                                       "phone_number": "", "website": ""})
    company = form.to_company(1)
    assert company.phone_number is None
    assert company.employer_id == 1
    assert "phoneNumber" not in company.to_payload()


def test_vacancy_form_negative_salary():
    errors = _errors(VacancyForm, {"title": "Dev", "description": "d", "company_name": "Acme", "salary": "-1"})
    assert errors == {"salary": "Salary cannot be negative"}


def test_vacancy_form_requires_company():
    errors = _errors(VacancyForm, {"title": "Developer", "description": "d"})
    assert errors["company_name"] == "Select a company"


def test_parse_resume_form_collects_rows():
    data = FormData([
        ("title", "Backend Engineer"),
        ("education_id", ""),
        ("education_institution", "MSU"),
        ("education_degree", "BSc"),
        ("education_field_of_study", "CS"),
        ("education_start_year", "2012"),
        ("education_end_year", ""),
        ("education_id", ""),
        ("education_institution", ""),
        ("education_degree", ""),
        ("education_field_of_study", ""),
        ("education_start_year", ""),
        ("education_end_year", ""),
        ("skill_id", "50"),
        ("skill_name", ""),
        ("skill_id", ""),
        ("skill_name", "Docker"),
    ])
    form = ResumeForm.model_validate(parse_resume_form(data))

    educations = form.educations(20)
    assert len(educations) == 1
    assert educations[0].institution == "MSU"
    assert educations[0].start_year == 2012
    assert educations[0].end_year is None

    skills = form.skill_entries(20)
    assert [(s.id, s.name) for s in skills] == [(None, "Docker")]
    assert form.removed_skill_ids() == [50]
    assert form.is_published is False


def test_resume_form_checkbox_and_validation():
    form = ResumeForm.model_validate({"title": "Engineer", "is_published": "on"})
    assert form.is_published is True
    resume = form.to_resume(10, 20)
    assert resume.id == 20
    assert resume.user_id == 10

    errors = _errors(ResumeForm, {"title": "Engineer", "experience_years": "-2", "contact_phone": "abc"})
    assert errors == {"experience_years": "Experience cannot be negative", "contact_phone": "Invalid phone number"}


def test_email_fields_use_address_validation():
    errors = _errors(CompanyForm, {"name": "Acme", "location": "Moscow", "email": "hr@"})
    assert errors == {"email": "Invalid email address"}
    errors = _errors(ResumeForm, {"title": "Engineer", "contact_email": "anna at mail"})
    assert errors == {"contact_email": "Invalid email address"}


def test_company_website_is_normalized_url():
    form = CompanyForm.model_validate({"name": "Acme", "location": "Moscow", "email": "hr@acme.io",
                                       "website": "https://acme.io"})
    company = form.to_company(1)
    assert isinstance(company.website, str)
    assert company.website.startswith("https://acme.io")


def test_length_limits_are_reported_with_field_label():
    errors = _errors(CompanyForm, {"name": "A", "location": "Moscow", "email": "hr@acme.io",
                                   "description": "x" * 2001})
    assert errors == {
        "name": "Company name must be at least 2 characters",
        "description": "Description must be at most 2000 characters",
    }


def test_non_numeric_experience():
    errors = _errors(ResumeForm, {"title": "Engineer", "experience_years": "five"})
    assert errors == {"experience_years": "Experience must be a number"}
