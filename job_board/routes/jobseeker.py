import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from pydantic import ValidationError

from job_board.api_client import ApiClient
from job_board.app import render
from job_board.config import settings
from job_board.deps import get_api_client, require_job_seeker
from job_board.forms import ResumeForm, form_errors, parse_resume_form
from job_board.models.application import (
    ApplicationStatus,
    INITIAL_STATUS,
    SubmissionRefused,
    build_application_request,
    can_withdraw,
    count_by_status,
    owned_by_candidate,
)
from job_board.routes.common import API_ERRORS, gather_optional, recover, redirect
from job_board.schemas.application import ApplicationRequest
from job_board.services import (
    ApplicationService,
    EducationService,
    ResumeService,
    SkillService,
    VacancyService,
)
from job_board.session import Session, flash

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/dashboard")
async def dashboard(
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    vacancies, resumes, applications = [], [], []
    try:
        page, resumes, applications = await asyncio.gather(
            VacancyService(api).get_all(0, settings.dashboard_page_size),
            ResumeService(api).get_by_user(session.user_id),
            ApplicationService(api).get_by_candidate(session.user_id),
        )
        vacancies = page.content
    except API_ERRORS as e:
        recover(request, e, "Failed to load dashboard data")

    applications = owned_by_candidate(applications, session.user_id)
    return render(request, "jobseeker/dashboard.html", {
        "vacancies": vacancies,
        "resumes": resumes,
        "applications": applications,
        "new_count": count_by_status(applications)[INITIAL_STATUS],
    })


@router.get("/vacancies")
async def vacancies_page(
    request: Request,
    q: Optional[str] = None,
    page: int = 0,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    vacancies_page = None
    try:
        vacancies_page = await VacancyService(api).get_all(max(page, 0), settings.page_size)
    except API_ERRORS as e:
        recover(request, e, "Failed to load vacancies")

    vacancies = vacancies_page.content if vacancies_page else []
    vacancies = [v for v in vacancies if v.is_published is not False and v.matches(q or "")]
    return render(request, "jobseeker/vacancies.html", {
        "vacancies": vacancies,
        "page": vacancies_page,
        "q": q or "",
    })


@router.get("/vacancies/{vacancy_id}")
async def vacancy_detail(
    vacancy_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    try:
        vacancy = await VacancyService(api).get_by_id(vacancy_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load vacancy")
        return redirect("/jobseeker/vacancies")

    resumes = []
    try:
        resumes = await ResumeService(api).get_by_user(session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load your resumes")

    return render(request, "jobseeker/vacancy_detail.html", {"vacancy": vacancy, "resumes": resumes})


@router.post("/vacancies/{vacancy_id}/apply")
async def apply(
    vacancy_id: int,
    request: Request,
    resume_id: Optional[str] = Form(None),
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    back = f"/jobseeker/vacancies/{vacancy_id}"
    try:
        vacancy = await VacancyService(api).get_by_id(vacancy_id)
        selected = int(resume_id) if resume_id and resume_id.strip().isdigit() else None
        payload = build_application_request(vacancy, session, selected)
        await ApplicationService(api).create(ApplicationRequest(**payload))
    except SubmissionRefused as e:
        flash(request, str(e), "error")
        return redirect(back)
    except API_ERRORS as e:
        recover(request, e)
        return redirect(back)

    flash(request, "Application submitted successfully!")
    return redirect("/jobseeker/applications")


@router.get("/resumes")
async def resumes_page(
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    resumes = []
    try:
        resumes = await ResumeService(api).get_by_user(session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load resumes")
    return render(request, "jobseeker/resumes.html", {"resumes": resumes})


@router.get("/resumes/create")
def create_resume_page(request: Request, session: Session = Depends(require_job_seeker)):
    return render(request, "jobseeker/resume_form.html", {"form": {}, "errors": {}, "action": "/jobseeker/resumes/create"})


@router.post("/resumes/create")
async def create_resume(
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    raw = parse_resume_form(await request.form())
    try:
        form = ResumeForm.model_validate(raw)
    except ValidationError as e:
        return render(request, "jobseeker/resume_form.html", {
            "form": raw, "errors": form_errors(e, ResumeForm), "action": "/jobseeker/resumes/create",
        }, status_code=400)

    try:
        resume = await ResumeService(api).create(form.to_resume(session.user_id))
    except API_ERRORS as e:
        recover(request, e)
        return render(request, "jobseeker/resume_form.html", {
            "form": raw, "errors": {}, "action": "/jobseeker/resumes/create",
        }, status_code=400)

    # Child rows need the new resume id. Past this point a retry goes through edit.
    try:
        for education in form.educations(resume.id):
            await EducationService(api).create(education)
        for skill in form.skill_entries(resume.id):
            await SkillService(api).create(skill)
    except API_ERRORS as e:
        recover(request, e, "Resume saved, but some sections could not be saved")
        return redirect(f"/jobseeker/resumes/{resume.id}/edit")

    flash(request, "Resume created successfully!")
    return redirect("/jobseeker/resumes")


async def _load_resume(api: ApiClient, resume_id: int):
    return await asyncio.gather(
        ResumeService(api).get_by_id(resume_id),
        EducationService(api).get_by_resume(resume_id),
        SkillService(api).get_by_resume(resume_id),
    )


@router.get("/resumes/{resume_id}")
async def resume_detail(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    try:
        resume, educations, skills = await _load_resume(api, resume_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load resume")
        return redirect("/jobseeker/resumes")

    if resume.user_id is not None and resume.user_id != session.user_id:
        flash(request, "Resume not found", "error")
        return redirect("/jobseeker/resumes")

    return render(request, "resume_detail.html", {
        "resume": resume,
        "educations": educations,
        "skills": skills,
        "back_url": "/jobseeker/resumes",
        "editable": True,
    })


@router.get("/resumes/{resume_id}/edit")
async def edit_resume_page(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    try:
        resume, educations, skills = await _load_resume(api, resume_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load resume")
        return redirect("/jobseeker/resumes")

    if resume.user_id is not None and resume.user_id != session.user_id:
        flash(request, "Resume not found", "error")
        return redirect("/jobseeker/resumes")

    form = resume.model_dump()
    form["education"] = [e.model_dump() for e in educations]
    form["skills"] = [s.model_dump() for s in skills]
    return render(request, "jobseeker/resume_form.html", {
        "form": form, "errors": {}, "action": f"/jobseeker/resumes/{resume_id}/edit", "resume_id": resume_id,
    })


@router.post("/resumes/{resume_id}/edit")
async def edit_resume(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    action = f"/jobseeker/resumes/{resume_id}/edit"
    raw = parse_resume_form(await request.form())
    try:
        form = ResumeForm.model_validate(raw)
    except ValidationError as e:
        return render(request, "jobseeker/resume_form.html", {
            "form": raw, "errors": form_errors(e, ResumeForm), "action": action, "resume_id": resume_id,
        }, status_code=400)

    educations, skills = EducationService(api), SkillService(api)
    try:
        await ResumeService(api).update(form.to_resume(session.user_id, resume_id))
        for education in form.educations(resume_id):
            if education.id:
                await educations.update(education.id, education)
            else:
                await educations.create(education)
        for skill in form.skill_entries(resume_id):
            if skill.id:
                await skills.update(skill.id, skill)
            else:
                await skills.create(skill)
        for skill_id in form.removed_skill_ids():
            await skills.delete(skill_id)
    except API_ERRORS as e:
        recover(request, e)
        return render(request, "jobseeker/resume_form.html", {
            "form": raw, "errors": {}, "action": action, "resume_id": resume_id,
        }, status_code=400)

    flash(request, "Resume updated successfully!")
    return redirect("/jobseeker/resumes")


@router.post("/resumes/{resume_id}/delete")
async def delete_resume(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await ResumeService(api).delete(resume_id)
        flash(request, "Resume deleted successfully")
    except API_ERRORS as e:
        recover(request, e, "Failed to delete resume")
    return redirect("/jobseeker/resumes")


@router.post("/resumes/{resume_id}/publish")
async def publish_resume(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await ResumeService(api).publish(resume_id)
        flash(request, "Resume published")
    except API_ERRORS as e:
        recover(request, e)
    return redirect("/jobseeker/resumes")


@router.post("/resumes/{resume_id}/unpublish")
async def unpublish_resume(
    resume_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    try:
        await ResumeService(api).unpublish(resume_id)
        flash(request, "Resume unpublished")
    except API_ERRORS as e:
        recover(request, e)
    return redirect("/jobseeker/resumes")


@router.get("/applications")
async def applications_page(
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    applications = []
    try:
        applications = await ApplicationService(api).get_by_candidate(session.user_id)
    except API_ERRORS as e:
        recover(request, e, "Failed to load applications")

    applications = owned_by_candidate(applications, session.user_id)
    vacancies = VacancyService(api)
    found = await gather_optional(*(vacancies.get_by_id(a.vacancy_id) for a in applications))
    counts = count_by_status(applications)
    return render(request, "jobseeker/applications.html", {
        "items": [{"application": a, "vacancy": v} for a, v in zip(applications, found)],
        "new_count": counts[INITIAL_STATUS],
        "withdrawn_count": counts[ApplicationStatus.WITHDRAWN],
        "withdrawable": {a.id for a in applications if can_withdraw(a, session)},
    })


@router.post("/applications/{application_id}/withdraw")
async def withdraw_application(
    application_id: int,
    request: Request,
    session: Session = Depends(require_job_seeker),
    api: ApiClient = Depends(get_api_client),
):
    service = ApplicationService(api)
    try:
        application = await service.get_by_id(application_id)
    except API_ERRORS as e:
        recover(request, e)
        return redirect("/jobseeker/applications")

    if not can_withdraw(application, session):
        flash(request, "This application cannot be withdrawn", "error")
        return redirect("/jobseeker/applications")

    try:
        await service.withdraw(application.as_request())
    except API_ERRORS as e:
        recover(request, e)
        return redirect("/jobseeker/applications")

    flash(request, "Application withdrawn")
    return redirect("/jobseeker/applications")
