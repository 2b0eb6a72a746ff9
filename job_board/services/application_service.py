from job_board.api_client import ApiClient
from job_board.models.application import ApplicationStatus
from job_board.schemas.application import (
    ApplicationRequest,
    ApplicationResponse,
    ApplicationStatistics,
)


def _many(data) -> list[ApplicationResponse]:
    return [ApplicationResponse.model_validate(a) for a in data or []]


class ApplicationService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def create(self, request: ApplicationRequest) -> ApplicationResponse:
        return ApplicationResponse.model_validate(await self.api.post("/api/applications", json=request.to_payload()))

    async def get_by_id(self, application_id: int) -> ApplicationResponse:
        return ApplicationResponse.model_validate(await self.api.get(f"/api/applications/{application_id}"))

    async def get_by_vacancy(self, vacancy_id: int) -> list[ApplicationResponse]:
        return _many(await self.api.get(f"/api/applications/vacancy/{vacancy_id}"))

    async def get_by_candidate(self, candidate_id: int) -> list[ApplicationResponse]:
        return _many(await self.api.get(f"/api/applications/candidate/{candidate_id}"))

    async def get_by_employer(self, employer_id: int) -> list[ApplicationResponse]:
        return _many(await self.api.get(f"/api/applications/employer/{employer_id}"))

    async def get_by_status(self, status: ApplicationStatus | str) -> list[ApplicationResponse]:
        """Unscoped: returns every account's applications in that status."""
        literal = status.value if isinstance(status, ApplicationStatus) else str(status).strip()
        return _many(await self.api.get(f"/api/applications/status/{literal}"))

    async def reject(self, request: ApplicationRequest) -> ApplicationResponse:
        return ApplicationResponse.model_validate(
            await self.api.post("/api/applications/reject", json=request.to_payload())
        )

    async def withdraw(self, request: ApplicationRequest) -> ApplicationResponse:
        return ApplicationResponse.model_validate(
            await self.api.post("/api/applications/withdrawn", json=request.to_payload())
        )

    async def get_statistics(self) -> ApplicationStatistics:
        return ApplicationStatistics.model_validate(await self.api.get("/api/applications/statistics") or {})

    async def get_employer_statistics(self, employer_id: int) -> ApplicationStatistics:
        return ApplicationStatistics.model_validate(
            await self.api.get(f"/api/applications/employer/{employer_id}/statistics") or {}
        )
