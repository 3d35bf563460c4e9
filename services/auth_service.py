"""
Admin session (auth context).

State machine over three states:
    unknown          console started, provider has not reported yet
    authenticated    admin principal present
    unauthenticated  no principal

The principal is persisted in session storage at login and replayed
when the identity provider reports a live session on startup.
"""

import threading
from typing import Callable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from exceptions import (
    AppError,
    AuthenticationError,
    LoginInProgressError,
    NotAuthenticatedError,
)
from models.admin import Admin, AuthStatus, LoginResponse, SessionView

logger = structlog.get_logger(__name__)

ADMIN_STORAGE_KEY = "admin_data"
ACCOUNT_TYPE = "ADMIN"


class AdminAuthContext:
    """
    Signed-in admin state for one console.

    Call init() once to subscribe to the identity provider, and
    teardown() to unsubscribe.
    """

    def __init__(self, api, identity_provider, storage):
        self.api = api
        self.identity_provider = identity_provider
        self.storage = storage
        self._status = AuthStatus.UNKNOWN
        self._admin: Optional[Admin] = None
        self._lock = threading.Lock()
        self._login_in_progress = False
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ===================
    # LIFECYCLE
    # ===================

    def init(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self.identity_provider.on_auth_state_changed(
            self._on_auth_state_changed
        )
        self.identity_provider.start()

    def teardown(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_auth_state_changed(self, user) -> None:
        if self._login_in_progress:
            # login() settles the state itself
            return

        if user is None:
            logger.info("auth_session_ended")
            self._reset()
            return

        try:
            self.api.set_default_authorization(self.identity_provider.get_id_token())
            saved = self.storage.get(ADMIN_STORAGE_KEY)
            if not saved:
                raise AuthenticationError("No saved admin session")
            self._admin = Admin.model_validate(saved)
            self._status = AuthStatus.AUTHENTICATED
            logger.info("auth_session_restored", admin_id=self._admin.id)
        except (AppError, PydanticValidationError) as e:
            logger.warning("auth_session_restore_failed", error=str(e))
            self._reset()

    # ===================
    # LOGIN / LOGOUT
    # ===================

    def login(self, email: str, password: str) -> Admin:
        """
        Sign an admin in.

        Steps: backend login, persist principal, exchange the custom token
        with the identity provider, attach the ID token as default header.

        Raises:
            LoginInProgressError: Another login is running
            AuthenticationError: Backend refused or returned no admin data
            BackendApiError: Transport failure
            IdentityProviderError: Token exchange failed
        """
        with self._lock:
            if self._login_in_progress:
                raise LoginInProgressError()
            self._login_in_progress = True

        logger.info("admin_login_started", email=email)

        try:
            payload = self.api.post(
                "/admin/login",
                json={"email": email, "password": password, "accountType": ACCOUNT_TYPE}
            )
            response = self.api.parse(LoginResponse, payload, "/admin/login")

            if not response.success:
                raise AuthenticationError(response.message or "Login failed")
            if response.admin_data is None:
                raise AuthenticationError("Admin data not found in response")

            admin = response.admin_data
            self.storage.set(ADMIN_STORAGE_KEY, admin.model_dump(by_alias=True, mode="json"))

            self.identity_provider.sign_in_with_custom_token(response.custom_firebase_token or "")
            self.api.set_default_authorization(self.identity_provider.get_id_token())

            self._admin = admin
            self._status = AuthStatus.AUTHENTICATED

            logger.info("admin_logged_in", admin_id=admin.id, role=admin.role)
            return admin

        except Exception as e:
            logger.warning("admin_login_failed", email=email, error=str(e))
            self._discard_provider_session()
            self._reset()
            raise

        finally:
            self._login_in_progress = False

    def logout(self) -> None:
        """End the session locally. Never raises."""
        admin_id = self._admin.id if self._admin else None
        self._discard_provider_session()
        self._reset()
        logger.info("admin_logged_out", admin_id=admin_id)

    def _discard_provider_session(self) -> None:
        if self.identity_provider.current_user is None:
            return
        try:
            self.identity_provider.sign_out()
        except AppError as e:
            logger.warning("provider_sign_out_failed", error=e.message)

    def _reset(self) -> None:
        try:
            self.storage.remove(ADMIN_STORAGE_KEY)
        except OSError as e:
            logger.error("session_storage_clear_failed", error=str(e))
        self.api.clear_default_authorization()
        self._admin = None
        self._status = AuthStatus.UNAUTHENTICATED

    # ===================
    # STATE
    # ===================

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def admin(self) -> Optional[Admin]:
        return self._admin

    @property
    def is_loading(self) -> bool:
        return self._status == AuthStatus.UNKNOWN or self._login_in_progress

    @property
    def is_authenticated(self) -> bool:
        return self._status == AuthStatus.AUTHENTICATED and self._admin is not None

    def require_admin(self) -> Admin:
        """
        Signed-in admin for a protected screen.

        Raises:
            NotAuthenticatedError: Nobody is signed in
        """
        if not self.is_authenticated:
            raise NotAuthenticatedError()
        return self._admin

    def session_view(self) -> SessionView:
        return SessionView(
            status=self._status,
            is_authenticated=self.is_authenticated,
            is_loading=self.is_loading,
            admin=self._admin.model_dump(by_alias=True, mode="json") if self._admin else None
        )
