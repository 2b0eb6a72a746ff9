"""Per-request identity built from the bearer token kept in the session cookie."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from jose import JWTError, jwt
from starlette.requests import Request

from job_board.models.user import UserRole
from job_board.schemas.auth import AuthResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"
FLASH_KEY = "_flashes"


def decode_token(token: Optional[str]) -> Optional[dict[str, Any]]:
    """Read the token claims. The signature is the backend's concern, not ours."""
    if not token:
        return None
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.warning(f"Failed to decode token: {e}")
        return None


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Session:
    token: Optional[str] = None
    user_id: Optional[int] = None
    user_role: Optional[UserRole] = None
    expires_at: Optional[float] = None

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()

    @classmethod
    def from_token(cls, token: Optional[str], fallback: Optional[AuthResponse] = None) -> "Session":
        claims = decode_token(token)
        if claims is None:
            return cls.anonymous()
        user_id = _as_int(claims.get("userId", claims.get("sub")))
        user_role = UserRole.parse(claims.get("userRole", claims.get("role")))
        if fallback is not None:
            user_id = user_id if user_id is not None else fallback.user_id
            user_role = user_role or UserRole.parse(fallback.user_role)
        exp = claims.get("exp")
        return cls(
            token=token,
            user_id=user_id,
            user_role=user_role,
            expires_at=float(exp) if isinstance(exp, (int, float)) else None,
        )

    @classmethod
    def from_request(cls, request: Request) -> "Session":
        return cls.from_token(request.session.get(TOKEN_KEY))

    def is_expired(self, now: Optional[float] = None) -> bool:
        if not self.token:
            return True
        if self.expires_at is None:
            return False
        return self.expires_at < (now if now is not None else time.time())

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and not self.is_expired()

    @property
    def is_employer(self) -> bool:
        return self.is_authenticated and self.user_role is UserRole.EMPLOYER

    @property
    def is_job_seeker(self) -> bool:
        return self.is_authenticated and self.user_role is UserRole.JOB_SEEKER

    @property
    def home_url(self) -> str:
        if self.is_authenticated and self.user_role is not None:
            return self.user_role.dashboard_url
        return "/"

    def persist(self, request: Request) -> None:
        request.session[TOKEN_KEY] = self.token

    def clear(self, request: Request) -> None:
        request.session.pop(TOKEN_KEY, None)
        self.token = None
        self.user_id = None
        self.user_role = None
        self.expires_at = None


async def login(request: Request, auth_service, credentials: LoginRequest) -> Session:
    response = await auth_service.login(credentials)
    session = Session.from_token(response.token, fallback=response)
    session.persist(request)
    logger.info(f"User {session.user_id} logged in as {session.user_role}")
    return session


async def register(request: Request, auth_service, profile: RegisterRequest) -> Session:
    response = await auth_service.register(profile)
    session = Session.from_token(response.token, fallback=response)
    if session.user_role is None:
        session.user_role = profile.user_role
    session.persist(request)
    logger.info(f"User {session.user_id} registered as {session.user_role}")
    return session


def logout(request: Request, session: Optional[Session] = None) -> Session:
    session = session or Session.from_request(request)
    session.clear(request)
    return session


def flash(request: Request, message: str, category: str = "success") -> None:
    request.session.setdefault(FLASH_KEY, []).append({"message": message, "category": category})


def pop_flashes(request: Request) -> list[dict[str, str]]:
    return request.session.pop(FLASH_KEY, None) or []
