from job_board.api_client import ApiClient
from job_board.schemas.company import Company


class CompanyService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_all(self) -> list[Company]:
        return [Company.model_validate(c) for c in await self.api.get("/api/companies") or []]

    async def get_by_id(self, company_id: int) -> Company:
        return Company.model_validate(await self.api.get(f"/api/companies/{company_id}"))

    async def create(self, company: Company) -> Company:
        return Company.model_validate(await self.api.post("/api/companies", json=company.to_payload()))

    async def delete(self, company_id: int) -> None:
        await self.api.delete(f"/api/companies/{company_id}")
