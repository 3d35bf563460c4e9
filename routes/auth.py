"""
Login, logout and session routes.
"""

from fastapi import APIRouter, Depends
import structlog

from models.admin import LoginRequest, SessionView
from routes.dependencies import get_console, handle_error
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/login")
def login(data: LoginRequest, console: AdminConsole = Depends(get_console)):
    """
    Sign an admin in.

    Raises:
        401: Credentials refused
        409: Another login is in progress
    """
    try:
        admin = console.login(data.email, data.password)
        return {
            "success": True,
            "admin": admin.model_dump(by_alias=True, mode="json"),
            "redirect": console.navigator.current_path
        }

    except Exception as e:
        return handle_error(e, console)


@router.post("/logout")
def logout(console: AdminConsole = Depends(get_console)):
    """Sign out. Always succeeds locally."""
    console.logout()
    return {"success": True, "redirect": console.navigator.current_path}


@router.get("/session", response_model=SessionView)
def get_session(console: AdminConsole = Depends(get_console)):
    """Current session state."""
    return console.auth.session_view()
