"""
Notification routes.
"""

from fastapi import APIRouter, Depends

from routes.dependencies import get_console
from services.console_service import AdminConsole

router = APIRouter()


@router.get("")
def drain_notifications(console: AdminConsole = Depends(get_console)):
    """Pending notifications, oldest first. Each is returned once."""
    return {"notifications": [n.to_dict() for n in console.notifier.drain()]}
