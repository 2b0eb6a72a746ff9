from fastapi import Depends, Request

from job_board.api_client import ApiClient
from job_board.models.user import UserRole
from job_board.session import Session


class LoginRequired(Exception):
    """Raised by route guards; the app answers with a redirect to the login page."""


def get_session(request: Request) -> Session:
    """FastAPI dependency that decodes the current identity from the session cookie."""
    return Session.from_request(request)


def get_api_client(request: Request, session: Session = Depends(get_session)) -> ApiClient:
    token = session.token if session.is_authenticated else None
    return ApiClient(request.app.state.http_client, token)


def require_role(role: UserRole):
    def guard(session: Session = Depends(get_session)) -> Session:
        if not session.is_authenticated or session.user_role is not role:
            raise LoginRequired()
        return session

    return guard


require_employer = require_role(UserRole.EMPLOYER)
require_job_seeker = require_role(UserRole.JOB_SEEKER)
