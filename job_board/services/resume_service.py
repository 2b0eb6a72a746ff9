from job_board.api_client import ApiClient
from job_board.config import settings
from job_board.schemas.page import PageResponse
from job_board.schemas.resume import Education, Resume, Skill


class ResumeService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_all(self, page: int = 0, size: int = settings.page_size) -> PageResponse[Resume]:
        data = await self.api.get("/api/resumes", params={"page": page, "size": size})
        return PageResponse[Resume].model_validate(data or {})

    async def get_by_id(self, resume_id: int) -> Resume:
        return Resume.model_validate(await self.api.get(f"/api/resumes/{resume_id}"))

    async def get_by_user(self, user_id: int) -> list[Resume]:
        return [Resume.model_validate(r) for r in await self.api.get(f"/api/resumes/user/{user_id}") or []]

    async def create(self, resume: Resume) -> Resume:
        return Resume.model_validate(await self.api.post("/api/resumes", json=resume.to_payload()))

    async def update(self, resume: Resume) -> Resume:
        return Resume.model_validate(await self.api.post("/api/resumes/update", json=resume.to_payload()))

    async def publish(self, resume_id: int) -> None:
        await self.api.patch(f"/api/resumes/{resume_id}/publish")

    async def unpublish(self, resume_id: int) -> None:
        await self.api.patch(f"/api/resumes/{resume_id}/unpublish")

    async def delete(self, resume_id: int) -> None:
        await self.api.delete(f"/api/resumes/{resume_id}")


class EducationService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_by_resume(self, resume_id: int) -> list[Education]:
        return [Education.model_validate(e) for e in await self.api.get(f"/api/educations/resume/{resume_id}") or []]

    async def create(self, education: Education) -> Education:
        return Education.model_validate(await self.api.post("/api/educations", json=education.to_payload()))

    async def update(self, education_id: int, education: Education) -> Education:
        return Education.model_validate(
            await self.api.put(f"/api/educations/{education_id}", json=education.to_payload())
        )


class SkillService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_by_resume(self, resume_id: int) -> list[Skill]:
        return [Skill.model_validate(s) for s in await self.api.get(f"/api/skills/resume/{resume_id}") or []]

    async def create(self, skill: Skill) -> Skill:
        return Skill.model_validate(await self.api.post("/api/skills", json=skill.to_payload()))

    async def update(self, skill_id: int, skill: Skill) -> Skill:
        return Skill.model_validate(await self.api.put(f"/api/skills/{skill_id}", json=skill.to_payload()))

    async def delete(self, skill_id: int) -> None:
        await self.api.delete(f"/api/skills/{skill_id}")
