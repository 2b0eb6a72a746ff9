from job_board.api_client import ApiClient
from job_board.schemas.user import UserProfile


class UserService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_profile(self, user_id: int) -> UserProfile:
        return UserProfile.model_validate(await self.api.get(f"/api/users/{user_id}/profile"))

    async def update_profile(self, profile: UserProfile) -> None:
        await self.api.post("/api/users/update", json=profile.to_payload())
