from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
import logging
import time
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from starlette.middleware.sessions import SessionMiddleware

from job_board.api_client import ApiError, AuthExpiredError, create_http_client, handle_api_error
from job_board.config import settings
from job_board.deps import LoginRequired
from job_board.models.application import normalize_status
from job_board.session import Session, flash, logout, pop_flashes
from job_board.utils.logging_config import setup_logging

PACKAGE_DIR = Path(__file__).resolve().parent
LOGIN_URL = "/auth/login"

logger = logging.getLogger(__name__)

# Initialize Logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.http_client.aclose()


def create_app(transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.http_client = create_http_client(transport)

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        same_site="lax",
    )

    # Static files
    app.mount(
        "/static",
        StaticFiles(directory=str(PACKAGE_DIR / "static")),
        name="static",
    )

    # Register routes
    from job_board.routes.pages import router as pages_router
    from job_board.routes.auth import router as auth_router
    from job_board.routes.employer import router as employer_router
    from job_board.routes.jobseeker import router as jobseeker_router

    app.include_router(pages_router)
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(employer_router, prefix="/employer", tags=["employer"])
    app.include_router(jobseeker_router, prefix="/jobseeker", tags=["jobseeker"])

    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        session = Session.from_request(request)
        if session.token and session.is_expired():
            logout(request, session)
        return RedirectResponse(url=LOGIN_URL, status_code=303)

    @app.exception_handler(AuthExpiredError)
    async def auth_expired_handler(request: Request, exc: AuthExpiredError):
        logger.info(f"Backend rejected the token on {request.url.path}; logging out")
        logout(request)
        flash(request, handle_api_error(exc), "error")
        return RedirectResponse(url=LOGIN_URL, status_code=303)

    @app.exception_handler(ApiError)
    @app.exception_handler(httpx.HTTPError)
    @app.exception_handler(ValidationError)
    async def api_error_handler(request: Request, exc: Exception):
        logger.warning(f"Unhandled backend error on {request.url.path}: {exc}")
        flash(request, handle_api_error(exc), "error")
        target = Session.from_request(request).home_url
        if target == request.url.path:
            target = "/"
        return RedirectResponse(url=target, status_code=303)

    @app.middleware("http")
    async def add_cache_headers(request: Request, call_next):
        response = await call_next(request)
        path = request.url.path

        # Rendered pages carry per-user data and must never be cached.
        if not path.startswith("/static/"):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
            return response

        # Cache static assets with revalidation. In debug, disable cache for rapid iteration.
        if settings.debug:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        else:
            response.headers["Cache-Control"] = "public, max-age=3600, must-revalidate"
        return response

    return app


templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))


def format_date(value) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value.strftime("%d.%m.%Y")


def format_salary(value) -> str:
    if value is None:
        return "Not specified"
    return f"{value:,.0f}".replace(",", " ")


templates.env.filters["format_date"] = format_date
templates.env.filters["format_salary"] = format_salary
templates.env.filters["status"] = normalize_status


def asset_url(path: str) -> str:
    normalized = path.lstrip("/")
    file_path = PACKAGE_DIR / normalized
    try:
        version = int(file_path.stat().st_mtime)
    except OSError:
        version = int(time.time())
    return f"/{normalized}?v={version}"


templates.env.globals["asset_url"] = asset_url


def render(request: Request, name: str, context: Optional[dict] = None, status_code: int = 200):
    """Render a page with the current identity and pending flash messages."""
    session = Session.from_request(request)
    payload = {
        "request": request,
        "session": session,
        "app_name": settings.app_name,
        "flashes": pop_flashes(request),
    }
    payload.update(context or {})
    return templates.TemplateResponse(request, name, payload, status_code=status_code)
