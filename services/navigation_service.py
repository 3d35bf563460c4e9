"""
Client-side navigation state.

Tracks which screen the admin is on and records forced redirects, so the
HTTP surface can tell the browser where to go next.
"""

from typing import Optional
import structlog

logger = structlog.get_logger(__name__)

LOGIN_PATH = "/login"


class Navigator:
    """Current screen plus the redirects forced on the admin."""

    def __init__(self, current_path: str = "/"):
        self.current_path = current_path
        self.redirects: list[str] = []

    def visit(self, path: str) -> None:
        self.current_path = path

    @property
    def on_login_screen(self) -> bool:
        return self.current_path == LOGIN_PATH

    def redirect_to_login(self) -> None:
        """Force the admin back to the login entry point."""
        logger.info("redirect_to_login", from_path=self.current_path)
        self.redirects.append(LOGIN_PATH)
        self.current_path = LOGIN_PATH

    def pop_redirect(self) -> Optional[str]:
        """Latest pending redirect, consumed."""
        if not self.redirects:
            return None
        target = self.redirects[-1]
        self.redirects.clear()
        return target
