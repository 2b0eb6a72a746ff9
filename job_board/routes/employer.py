import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from pydantic import ValidationError

from job_board.api_client import ApiClient
from job_board.app import render
from job_board.config import settings
from job_board.deps import get_api_client, require_employer
from job_board.forms import CompanyForm, ProfileForm, VacancyForm, form_errors
from job_board.models.application import (
    FILTERABLE_STATUSES,
    ApplicationStatus,
    INITIAL_STATUS,
    can_reject,
    count_by_status,
    filter_by_status,
    group_by_status,
    normalize_status_counts,
    owned_by_employer,
    parse_status_filter,
    statistics_consistent,
)
from job_board.routes.common import API_ERRORS, gather_optional, recover, redirect, safe_next
from job_board.services import (
    ApplicationService,
    CompanyService,
    EducationService,
    ResumeService,
    SkillService,
    UserService,
    VacancyService,
)
from job_board.session import Session, flash

router = APIRouter()
logger = logging.getLogger(__name__)


def _own_companies(companies, employer_id):
    # Older backends omit employerId on companies; those are shown as-is.
    return [c for c in companies if c.employer_id in (None, employer_id)]


async def _with_details(api: ApiClient, applications):
    """Attach vacancy and resume to each application; failed lookups stay ``None``."""
    vacancies = VacancyService(api)
    resumes = ResumeService(api)

    async def enrich(application):
        vacancy, resume = await gather_optional(
            vacancies.get_by_id(application.vacancy_id),
            resumes.get_by_id(application.resume_id),
        )
        return {"application": application, "vacancy": vacancy, "resume": resume}

    return list(await asyncio.gather(*(enrich(a) for a in applications)))


@router.get("/dashboard")
async def dashboard(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    vacancies, companies, statistics = [], [], None
    try:
        page, companies, statistics = await asyncio.gather(
            VacancyService(api).get_by_employer(session.user_id, 0, settings.dashboard_page_size),
            CompanyService(api).get_all(),
            ApplicationService(api).get_employer_statistics(session.user_id),
        )
        vacancies = page.content
        companies = _own_companies(companies, session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load dashboard data")

    counts = normalize_status_counts(statistics.applications_by_status if statistics else None)
    return render(request, "employer/dashboard.html", {
        "vacancies": vacancies,
        "companies": companies,
        "total_applications": statistics.total_applications if statistics else 0,
        "status_counts": counts,
        "initial_status": INITIAL_STATUS,
        "statuses": ApplicationStatus,
    })


@router.get("/vacancies")
async def vacancies_page(
    request: Request,
    page: int = 0,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    vacancies_page, applications = None, []
    try:
        vacancies_page, applications = await asyncio.gather(
            VacancyService(api).get_by_employer(session.user_id, max(page, 0), settings.page_size),
            ApplicationService(api).get_by_employer(session.user_id),
        )
    except API_ERRORS as e:
        recover(request, e, "Failed to load vacancies")

    applications = owned_by_employer(applications, session.user_id)
    per_vacancy: dict[int, int] = {}
    for application in applications:
        if application.status is INITIAL_STATUS:
            per_vacancy[application.vacancy_id] = per_vacancy.get(application.vacancy_id, 0) + 1

    return render(request, "employer/vacancies.html", {
        "vacancies": vacancies_page.content if vacancies_page else [],
        "page": vacancies_page,
        "new_per_vacancy": per_vacancy,
    })


@router.get("/vacancies/create")
async def create_vacancy_page(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    companies = []
    try:
        companies = _own_companies(await CompanyService(api).get_all(), session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load companies")
    return render(request, "employer/vacancy_form.html", {"companies": companies, "form": {}, "errors": {}})


@router.post("/vacancies/create")
async def create_vacancy(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    raw = dict(await request.form())
    try:
        companies = _own_companies(await CompanyService(api).get_all(), session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load companies")
        return redirect("/employer/vacancies/create")

    if not companies:
        flash(request, "Create a company first", "error")
        return redirect("/employer/companies")

    try:
        form = VacancyForm.model_validate(raw)
    except ValidationError as e:
        return render(request, "employer/vacancy_form.html", {
            "companies": companies, "form": raw, "errors": form_errors(e, VacancyForm),
        }, status_code=400)

    company = next((c for c in companies if c.name == form.company_name), None)
    try:
        await VacancyService(api).create(form.to_vacancy(session.user_id, company.id if company else None))
    except API_ERRORS as e:
        recover(request, e)
        return render(request, "employer/vacancy_form.html", {
            "companies": companies, "form": raw, "errors": {},
        }, status_code=400)

    flash(request, "Vacancy created successfully!")
    return redirect("/employer/vacancies")


async def _load_own_vacancy(api: ApiClient, session: Session, vacancy_id: int):
    vacancy = await VacancyService(api).get_by_id(vacancy_id)
    if vacancy.employer_id is not None and vacancy.employer_id != session.user_id:
        return None
    return vacancy


@router.get("/vacancies/{vacancy_id}")
async def vacancy_detail(
    vacancy_id: int,
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    try:
        vacancy, applications = await asyncio.gather(
            _load_own_vacancy(api, session, vacancy_id),
            ApplicationService(api).get_by_vacancy(vacancy_id),
        )
    except API_ERRORS as e:
        recover(request, e, "Failed to load vacancy")
        return redirect("/employer/vacancies")

    if vacancy is None:
        flash(request, "Vacancy not found", "error")
        return redirect("/employer/vacancies")

    applications = owned_by_employer(applications, session.user_id)
    return render(request, "employer/vacancy_detail.html", {
        "vacancy": vacancy,
        "applications": applications,
        "groups": group_by_status(applications),
        "rejectable": {a.id for a in applications if can_reject(a, session, vacancy)},
    })


@router.post("/vacancies/{vacancy_id}/publish")
async def publish_vacancy(
    vacancy_id: int,
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await VacancyService(api).publish(vacancy_id)
        flash(request, "Vacancy published")
    except API_ERRORS as e:
        recover(request, e)
    return redirect(f"/employer/vacancies/{vacancy_id}")


@router.post("/vacancies/{vacancy_id}/unpublish")
async def unpublish_vacancy(
    vacancy_id: int,
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await VacancyService(api).unpublish(vacancy_id)
        flash(request, "Vacancy unpublished")
    except API_ERRORS as e:
        recover(request, e)
    return redirect(f"/employer/vacancies/{vacancy_id}")


@router.post("/vacancies/{vacancy_id}/delete")
async def delete_vacancy(
    vacancy_id: int,
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await VacancyService(api).delete(vacancy_id)
    except API_ERRORS as e:
        recover(request, e)
        return redirect(f"/employer/vacancies/{vacancy_id}")
    flash(request, "Vacancy deleted successfully")
    return redirect("/employer/vacancies")


async def _load_companies(request: Request, api: ApiClient, session: Session):
    try:
        return _own_companies(await CompanyService(api).get_all(), session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load companies")
        return []


@router.get("/companies")
async def companies_page(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    companies = await _load_companies(request, api, session)
    return render(request, "employer/companies.html", {"companies": companies, "form": {}, "errors": {}})


@router.post("/companies")
async def create_company(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    raw = dict(await request.form())
    try:
        form = CompanyForm.model_validate(raw)
    except ValidationError as e:
        return render(request, "employer/companies.html", {
            "companies": await _load_companies(request, api, session),
            "form": raw,
            "errors": form_errors(e, CompanyForm),
        }, status_code=400)

    try:
        await CompanyService(api).create(form.to_company(session.user_id))
    except API_ERRORS as e:
        # e.g. a duplicate company name
        recover(request, e)
        return render(request, "employer/companies.html", {
            "companies": await _load_companies(request, api, session),
            "form": raw,
            "errors": {},
        }, status_code=400)

    flash(request, "Company created successfully!")
    return redirect("/employer/companies")


@router.post("/companies/{company_id}/delete")
async def delete_company(
    company_id: int,
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await CompanyService(api).delete(company_id)
        flash(request, "Company deleted")
    except API_ERRORS as e:
        recover(request, e)
    return redirect("/employer/companies")


@router.get("/applications")
async def applications_page(
    request: Request,
    status: Optional[str] = None,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    applications = []
    try:
        applications = await ApplicationService(api).get_by_employer(session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load applications")

    applications = owned_by_employer(applications, session.user_id)
    selected = parse_status_filter(status)
    visible = filter_by_status(applications, selected)

    items = await _with_details(api, visible)
    return render(request, "employer/applications.html", {
        "items": items,
        "status_counts": count_by_status(applications),
        "total": len(applications),
        "statuses": FILTERABLE_STATUSES,
        "selected_status": selected,
        "rejectable": {
            item["application"].id for item in items
            if can_reject(item["application"], session, item["vacancy"])
        },
    })


@router.get("/statistics")
async def statistics_page(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    applications, statistics = [], None
    try:
        statistics, applications = await asyncio.gather(
            ApplicationService(api).get_employer_statistics(session.user_id),
            ApplicationService(api).get_by_employer(session.user_id),
        )
    except API_ERRORS as e:
        recover(request, e, "Failed to load statistics")
        return redirect("/employer/dashboard")

    applications = owned_by_employer(applications, session.user_id)
    consistent = statistics_consistent(statistics, applications)
    if not consistent:
        logger.warning(
            f"Statistics for employer {session.user_id} disagree with list: "
            f"total={statistics.total_applications} listed={len(applications)}"
        )
    return render(request, "employer/statistics.html", {
        "reported_total": statistics.total_applications,
        "reported_counts": normalize_status_counts(statistics.applications_by_status),
        "listed_total": len(applications),
        "listed_counts": count_by_status(applications),
        "statuses": FILTERABLE_STATUSES,
        "consistent": consistent,
    })


@router.post("/applications/{application_id}/reject")
async def reject_application(
    application_id: int,
    request: Request,
    next_url: Optional[str] = Form(None, alias="next"),
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    target = safe_next(next_url, "/employer/", "/employer/applications")
    service = ApplicationService(api)
    try:
        application = await service.get_by_id(application_id)
    except API_ERRORS as e:
        recover(request, e)
        return redirect(target)

    vacancy = None
    if application.employer_id is None:
        try:
            vacancy = await VacancyService(api).get_by_id(application.vacancy_id)
        except API_ERRORS as e:
            recover(request, e)
            return redirect(target)

    if not can_reject(application, session, vacancy):
        flash(request, "This application cannot be rejected", "error")
        return redirect(target)

    payload = application.as_request()
    payload.employer_id = session.user_id
    try:
        await service.reject(payload)
    except API_ERRORS as e:
        recover(request, e)
        return redirect(target)

    flash(request, "Application rejected")
    return redirect(target)


@router.get("/resumes/{resume_id}")
async def resume_detail(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    try:
        resume, educations, skills = await asyncio.gather(
            ResumeService(api).get_by_id(resume_id),
            EducationService(api).get_by_resume(resume_id),
            SkillService(api).get_by_resume(resume_id),
        )
    except API_ERRORS as e:
        recover(request, e, "Failed to load resume")
        return redirect("/employer/applications")

    return render(request, "resume_detail.html", {
        "resume": resume,
        "educations": educations,
        "skills": skills,
        "back_url": "/employer/applications",
        "editable": False,
    })


@router.get("/profile")
async def profile_page(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    profile = None
    try:
        profile = await UserService(api).get_profile(session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load profile")
    form = profile.model_dump() if profile else {}
    return render(request, "employer/profile.html", {"profile": profile, "form": form, "errors": {}})


@router.post("/profile")
async def update_profile(
    request: Request,
    session: Session = Depends(require_employer),
    api: ApiClient = Depends(get_api_client),
):
    raw = dict(await request.form())
    try:
        form = ProfileForm.model_validate(raw)
    except ValidationError as e:
        return render(request, "employer/profile.html", {
            "profile": None, "form": raw, "errors": form_errors(e, ProfileForm),
        }, status_code=400)

    try:
        await UserService(api).update_profile(form.to_profile(session.user_id))
    except API_ERRORS as e:
        recover(request, e, "Failed to update profile")
        return redirect("/employer/profile")

    flash(request, "Profile updated successfully!")
    return redirect("/employer/profile")
