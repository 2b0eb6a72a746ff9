from typing import Optional

from job_board.models.user import UserRole
from job_board.schemas.base import ApiModel


class LoginRequest(ApiModel):
    email: str
    password: str


class RegisterRequest(ApiModel):
    username: str
    email: str
    phone: str
    password: str
    user_role: UserRole


class AuthResponse(ApiModel):
    token: str
    user_id: Optional[int] = None
    user_role: Optional[str] = None
