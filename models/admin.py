"""
Admin (session principal) and login schemas.
"""

from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import ApiSchema, BaseSchema


class AuthStatus(str, Enum):
    """Session state of the console."""
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class Admin(ApiSchema):
    """Signed-in admin as issued by the backend at login."""
    id: str
    email: str
    phone_number: Optional[str] = None
    role: str
    permissions: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: Optional[int] = None
    last_login_at: Optional[int] = None


class LoginRequest(BaseSchema):
    """Credentials submitted on the login screen."""
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class LoginResponse(ApiSchema):
    """
    Backend login answer.

    customFirebaseToken is exchanged with the identity provider;
    adminData becomes the persisted session principal.
    """
    success: bool
    message: Optional[str] = None
    custom_firebase_token: Optional[str] = None
    admin_data: Optional[Admin] = None


class SessionView(BaseSchema):
    """What the console knows about the current session."""
    status: AuthStatus
    is_authenticated: bool
    is_loading: bool
    admin: Optional[dict] = None
