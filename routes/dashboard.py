"""
Dashboard routes.
"""

from fastapi import APIRouter, Depends
import structlog

from models.admin import Admin
from models.analytics import DashboardView
from routes.dependencies import current_admin, get_console, handle_error
from services.console_service import AdminConsole

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=DashboardView)
def get_dashboard(
    console: AdminConsole = Depends(get_console),
    admin: Admin = Depends(current_admin)
):
    """
    Dashboard: signed-in admin and platform counters.

    A failed analytics read is reported in analytics_error, not as a
    failed response.
    """
    try:
        console.navigator.visit("/dashboard")
        return console.analytics.dashboard(admin)

    except Exception as e:
        return handle_error(e, console)
