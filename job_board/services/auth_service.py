from job_board.api_client import ApiClient
from job_board.schemas.auth import AuthResponse, LoginRequest, RegisterRequest


class AuthService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def register(self, data: RegisterRequest) -> AuthResponse:
        return AuthResponse.model_validate(await self.api.post("/api/auth/register", json=data.to_payload()))

    async def login(self, data: LoginRequest) -> AuthResponse:
        return AuthResponse.model_validate(await self.api.post("/api/auth/login", json=data.to_payload()))

    async def validate_token(self, token: str) -> bool:
        return bool(await self.api.get("/api/auth/validate", params={"token": token}))
