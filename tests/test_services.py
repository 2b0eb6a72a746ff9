import httpx
import pytest

from job_board.api_client import ApiClient, ApiError
from job_board.models.application import ApplicationStatus
from job_board.schemas.application import ApplicationRequest
from job_board.schemas.auth import LoginRequest
from job_board.schemas.company import Company
from job_board.services import (
    ApplicationService,
    AuthService,
    CompanyService,
    EducationService,
    ResumeService,
    SkillService,
    UserService,
    VacancyService,
)
from tests.backend import PASSWORD, make_token


def _api(backend, user_id=None, role=None):
    http = httpx.AsyncClient(base_url="http://backend.test", transport=httpx.MockTransport(backend.handler))
    token = make_token(user_id, role) if user_id else None
    return ApiClient(http, token)


@pytest.mark.asyncio
async def test_login_returns_token(backend):
    response = await AuthService(_api(backend)).login(LoginRequest(email="boss@mail.io", password=PASSWORD))
    assert response.token
    sent = backend.calls("POST", "/api/auth/login")[0]
    assert b'"email":"boss@mail.io"' in sent.content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_validate_token(backend):
    auth = AuthService(_api(backend))
    assert await auth.validate_token(make_token(1, "EMPLOYER")) is True
    assert await auth.validate_token("garbage") is False


@pytest.mark.asyncio
async def test_vacancy_page_is_typed(backend):
    page = await VacancyService(_api(backend, 10, "JOB_SEEKER")).get_all(0, 10)
    assert page.total_elements == 2
    assert {v.id for v in page.content} == {1, 3}
    assert page.first and page.last
    sent = backend.requests[-1]
    assert sent.url.params["page"] == "0"
    assert sent.url.params["size"] == "10"


@pytest.mark.asyncio
async def test_vacancies_by_employer(backend):
    page = await VacancyService(_api(backend, 1, "EMPLOYER")).get_by_employer(1)
    assert {v.id for v in page.content} == {1, 2}


@pytest.mark.asyncio
async def test_publish_uses_patch(backend):
    await VacancyService(_api(backend, 1, "EMPLOYER")).publish(2)
    assert backend.calls("PATCH", "/api/vacancies/2/publish")
    assert backend.vacancies[2]["isPublished"] is True


@pytest.mark.asyncio
async def test_duplicate_company_surfaces_conflict(backend):
    with pytest.raises(ApiError) as exc_info:
        await CompanyService(_api(backend, 1, "EMPLOYER")).create(
            Company(name="Acme", location="Moscow", email="x@acme.io", employer_id=1)
        )
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_resume_children(backend):
    api = _api(backend, 10, "JOB_SEEKER")
    educations = await EducationService(api).get_by_resume(20)
    skills = await SkillService(api).get_by_resume(20)
    assert [e.institution for e in educations] == ["MSU"]
    assert {s.name for s in skills} == {"Python", "PostgreSQL"}
    assert await EducationService(api).get_by_resume(21) == []


@pytest.mark.asyncio
async def test_resumes_by_user(backend):
    resumes = await ResumeService(_api(backend, 10, "JOB_SEEKER")).get_by_user(10)
    assert {r.id for r in resumes} == {20, 21}


@pytest.mark.asyncio
async def test_application_payload_is_camel_case(backend):
    api = _api(backend, 10, "JOB_SEEKER")
    created = await ApplicationService(api).create(
        ApplicationRequest(vacancy_id=1, candidate_id=10, resume_id=21, employer_id=1)
    )
    assert created.status is ApplicationStatus.NEW
    sent = backend.calls("POST", "/api/applications")[0]
    body = sent.content.decode()
    assert '"vacancyId"' in body
    assert '"candidateId"' in body
    assert "vacancy_id" not in body


@pytest.mark.asyncio
async def test_withdraw_by_candidate(backend):
    service = ApplicationService(_api(backend, 10, "JOB_SEEKER"))
    application = await service.get_by_id(30)
    await service.withdraw(application.as_request())
    assert backend.applications[30]["statusName"] == "WITHDRAWN"


@pytest.mark.asyncio
async def test_reject_by_other_employer_is_forbidden(backend):
    service = ApplicationService(_api(backend, 2, "EMPLOYER"))
    application = await service.get_by_id(30)
    with pytest.raises(ApiError) as exc_info:
        await service.reject(application.as_request())
    assert exc_info.value.status_code == 403
    assert backend.applications[30]["statusName"] == "NEW"


@pytest.mark.asyncio
async def test_get_by_status_sends_canonical_literal():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json=[])

    http = httpx.AsyncClient(base_url="http://backend.test", transport=httpx.MockTransport(handler))
    service = ApplicationService(ApiClient(http, "t"))
    assert await service.get_by_status(ApplicationStatus.REJECTED) == []
    await service.get_by_status(" NEW ")
    assert seen == ["/api/applications/status/REJECTED", "/api/applications/status/NEW"]


@pytest.mark.asyncio
async def test_employer_statistics(backend):
    stats = await ApplicationService(_api(backend, 1, "EMPLOYER")).get_employer_statistics(1)
    assert stats.total_applications == 2
    assert stats.applications_by_status == {"NEW": 1, "Отказ": 1}


@pytest.mark.asyncio
async def test_user_profile_roundtrip(backend):
    users = UserService(_api(backend, 1, "EMPLOYER"))
    profile = await users.get_profile(1)
    assert profile.username == "boss"
    profile.first_name = "Big"
    await users.update_profile(profile)
    assert backend.users[1]["firstName"] == "Big"
