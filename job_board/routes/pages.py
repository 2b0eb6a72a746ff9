from fastapi import APIRouter, Depends, Request

from job_board.app import render
from job_board.deps import get_session
from job_board.session import Session

router = APIRouter()


@router.get("/")
def index(request: Request, session: Session = Depends(get_session)):
    return render(request, "index.html", {"dashboard_url": session.home_url})
