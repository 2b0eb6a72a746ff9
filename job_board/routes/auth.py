import logging

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from job_board import session as auth_session
from job_board.api_client import ApiClient, handle_api_error
from job_board.app import render
from job_board.deps import get_api_client, get_session
from job_board.forms import LoginForm, RegisterForm, form_errors
from job_board.routes.common import API_ERRORS, redirect
from job_board.services import AuthService
from job_board.session import Session, flash

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/login")
def login_page(request: Request, session: Session = Depends(get_session)):
    if session.is_authenticated:
        return redirect(session.home_url)
    return render(request, "auth/login.html", {"form": {}, "errors": {}})


@router.post("/login")
async def login(request: Request, api: ApiClient = Depends(get_api_client)):
    raw = dict(await request.form())
    try:
        form = LoginForm.model_validate(raw)
    except ValidationError as e:
        return render(request, "auth/login.html", {"form": raw, "errors": form_errors(e, LoginForm)}, status_code=400)

    try:
        session = await auth_session.login(request, AuthService(api.with_token(None)), form.to_request())
    except API_ERRORS as e:
        # Bad credentials come back as 401 too; that is not an expired session.
        logger.info(f"Login failed for {form.email}: {e}")
        flash(request, "Login failed. Please check your credentials.", "error")
        return render(request, "auth/login.html", {"form": raw, "errors": {}}, status_code=400)

    flash(request, "Successfully logged in!")
    return redirect(session.home_url)


@router.get("/register")
def register_page(request: Request, session: Session = Depends(get_session)):
    if session.is_authenticated:
        return redirect(session.home_url)
    return render(request, "auth/register.html", {"form": {}, "errors": {}})


@router.post("/register")
async def register(request: Request, api: ApiClient = Depends(get_api_client)):
    raw = dict(await request.form())
    try:
        form = RegisterForm.model_validate(raw)
    except ValidationError as e:
        errors = form_errors(e, RegisterForm)
        if "user_role" in errors:
            flash(request, errors["user_role"], "error")
        return render(request, "auth/register.html", {"form": raw, "errors": errors}, status_code=400)

    try:
        session = await auth_session.register(request, AuthService(api.with_token(None)), form.to_request())
    except API_ERRORS as e:
        logger.info(f"Registration failed for {form.email}: {e}")
        flash(request, handle_api_error(e), "error")
        return render(request, "auth/register.html", {"form": raw, "errors": {}}, status_code=400)

    flash(request, "Successfully registered!")
    return redirect(session.home_url)


@router.post("/logout")
def logout(request: Request):
    auth_session.logout(request)
    flash(request, "Logged out successfully")
    return redirect("/")
