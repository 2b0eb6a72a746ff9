import asyncio
import logging
from typing import Optional

import httpx
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from starlette.requests import Request

from job_board.api_client import ApiError, AuthExpiredError, handle_api_error
from job_board.session import flash

logger = logging.getLogger(__name__)

# Errors a page recovers from with a toast; AuthExpiredError is re-raised by recover().
# ValidationError here is a backend payload the DTOs could not parse.
API_ERRORS = (ApiError, httpx.HTTPError, ValidationError)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def recover(request: Request, error: Exception, message: Optional[str] = None) -> None:
    """Surface a failed backend call as a toast; a 401 keeps propagating."""
    if isinstance(error, AuthExpiredError):
        raise error
    logger.warning(f"{request.method} {request.url.path} failed: {error}")
    flash(request, message or handle_api_error(error), "error")


def safe_next(raw: Optional[str], prefix: str, default: str) -> str:
    """Only follow local redirects inside the caller's own area."""
    if raw and raw.startswith(prefix) and not raw.startswith("//"):
        return raw
    return default


async def gather_optional(*coros):
    """Run independent fetches together; a failed fetch yields ``None``."""
    results = await asyncio.gather(*coros, return_exceptions=True)
    out = []
    for result in results:
        if isinstance(result, AuthExpiredError):
            raise result
        if isinstance(result, BaseException):
            if not isinstance(result, API_ERRORS):
                raise result
            logger.warning(f"Optional fetch failed: {result}")
            out.append(None)
        else:
            out.append(result)
    return out
