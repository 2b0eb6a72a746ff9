from job_board.api_client import ApiClient
from job_board.config import settings
from job_board.schemas.page import PageResponse
from job_board.schemas.vacancy import Vacancy


class VacancyService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_all(self, page: int = 0, size: int = settings.page_size) -> PageResponse[Vacancy]:
        data = await self.api.get("/api/vacancies", params={"page": page, "size": size})
        return PageResponse[Vacancy].model_validate(data or {})

    async def get_by_id(self, vacancy_id: int) -> Vacancy:
        return Vacancy.model_validate(await self.api.get(f"/api/vacancies/{vacancy_id}"))

    async def get_by_employer(self, employer_id: int, page: int = 0, size: int = settings.page_size) -> PageResponse[Vacancy]:
        data = await self.api.get(f"/api/vacancies/employer/{employer_id}", params={"page": page, "size": size})
        return PageResponse[Vacancy].model_validate(data or {})

    async def create(self, vacancy: Vacancy) -> Vacancy:
        return Vacancy.model_validate(await self.api.post("/api/vacancies", json=vacancy.to_payload()))

    async def update(self, vacancy: Vacancy) -> Vacancy:
        return Vacancy.model_validate(await self.api.post("/api/vacancies/update", json=vacancy.to_payload()))

    async def publish(self, vacancy_id: int) -> None:
        await self.api.patch(f"/api/vacancies/{vacancy_id}/publish")

    async def unpublish(self, vacancy_id: int) -> None:
        await self.api.patch(f"/api/vacancies/{vacancy_id}/unpublish")

    async def delete(self, vacancy_id: int) -> None:
        await self.api.delete(f"/api/vacancies/{vacancy_id}")
