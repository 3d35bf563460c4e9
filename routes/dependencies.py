"""
Shared route helpers: console lookup, session guard and error rendering.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
import structlog

from exceptions import AppError
from models.admin import Admin
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)


def get_console(request: Request) -> AdminConsole:
    """Console created by the app lifespan."""
    return request.app.state.console


def current_admin(console: AdminConsole = Depends(get_console)) -> Admin:
    """
    Signed-in admin, for protected screens.

    Raises:
        NotAuthenticatedError: Nobody is signed in
    """
    return console.auth.require_admin()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception, console: Optional[AdminConsole] = None) -> JSONResponse:
    """
    Convert exception to JSON response.

    A redirect forced while handling the request (401 from the backend)
    is added as "redirect".
    """
    if isinstance(e, AppError):
        content = e.to_dict()
        if console is not None:
            redirect = console.navigator.pop_redirect()
            if redirect:
                content["redirect"] = redirect
        return JSONResponse(
            status_code=e.status_code,
            content=content
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )
