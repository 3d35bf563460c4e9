"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_http_session: Function to get the shared backend HTTP session
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.backend import (
    get_http_session,
    check_connection,
    reset_http_session,
    BackendSession,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Backend
    "get_http_session",
    "check_connection",
    "reset_http_session",
    "BackendSession",
]
