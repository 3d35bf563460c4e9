"""
Unit tests for AdminAuthContext.

Run: pytest tests/unit/test_auth_service.py -v
"""

from unittest.mock import patch

import pytest

from exceptions import (
    AuthenticationError,
    BackendApiError,
    IdentityProviderError,
    LoginInProgressError,
    NotAuthenticatedError,
)
from integrations.identity_provider import IdentityUser
from models.admin import AuthStatus
from services.api_client import ApiClient
from services.auth_service import ADMIN_STORAGE_KEY, AdminAuthContext
from services.navigation_service import Navigator

from tests.conftest import BACKEND_URL, FakeIdentityProvider
from tests.factories import AdminFactory


@pytest.fixture
def api(backend, identity) -> ApiClient:
    return ApiClient(BACKEND_URL, identity_provider=identity, navigator=Navigator(), session=backend)


@pytest.fixture
def auth(api, identity, storage) -> AdminAuthContext:
    context = AdminAuthContext(api, identity, storage)
    context.init()
    yield context
    context.teardown()


class TestAuthLifecycle:
    """Tests for startup and session restore."""

    def test_starts_unauthenticated_without_provider_session(self, auth):
        """Should settle to unauthenticated when the provider reports nobody."""
        assert auth.status == AuthStatus.UNAUTHENTICATED
        assert not auth.is_loading
        assert auth.admin is None

    def test_unknown_before_provider_reports(self, api, identity, storage):
        """Should be loading until init() lets the provider report."""
        context = AdminAuthContext(api, identity, storage)

        assert context.status == AuthStatus.UNKNOWN
        assert context.is_loading

    def test_restores_saved_admin_when_provider_has_user(self, backend, storage):
        """Should replay the persisted principal and attach the token."""
        # Arrange
        identity = FakeIdentityProvider(restored_user=IdentityUser(
            uid="uid-1", id_token="restored-token", refresh_token="r", expires_at=9999999999
        ))
        api = ApiClient(BACKEND_URL, identity_provider=identity, session=backend)
        storage.set(ADMIN_STORAGE_KEY, AdminFactory.create(id="admin-7"))
        context = AdminAuthContext(api, identity, storage)

        # Act
        context.init()

        # Assert
        assert context.is_authenticated
        assert context.admin.id == "admin-7"
        assert api.default_headers["Authorization"] == "Bearer restored-token"

    def test_provider_user_without_saved_admin_is_unauthenticated(self, backend, storage):
        """Should not trust a provider session without the saved principal."""
        # Arrange
        identity = FakeIdentityProvider(restored_user=IdentityUser(
            uid="uid-1", id_token="t", refresh_token="r", expires_at=9999999999
        ))
        api = ApiClient(BACKEND_URL, identity_provider=identity, session=backend)
        context = AdminAuthContext(api, identity, storage)

        # Act
        context.init()

        # Assert
        assert context.status == AuthStatus.UNAUTHENTICATED
        assert not api.has_default_authorization

    def test_teardown_unsubscribes(self, auth, identity):
        auth.teardown()
        assert identity.listeners == []


class TestAuthLogin:
    """Tests for login()."""

    def test_login_success(self, auth, api, backend, identity, storage):
        """Should persist the admin, exchange the token and attach it."""
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response(
            admin=AdminFactory.create(id="admin-1", role="SUPER_ADMIN")
        ))

        # Act
        admin = auth.login("admin@platform.test", "secret")

        # Assert
        assert admin.id == "admin-1"
        assert auth.is_authenticated
        assert storage.get(ADMIN_STORAGE_KEY)["id"] == "admin-1"
        assert identity.signed_in_tokens == ["custom-token-abc"]
        assert api.default_headers["Authorization"] == "Bearer id-token-0"
        assert backend.calls[0]["json"] == {
            "email": "admin@platform.test",
            "password": "secret",
            "accountType": "ADMIN",
        }

    def test_login_refused_by_backend(self, auth, backend, identity):
        """Should surface the backend message and stay signed out."""
        # Arrange
        backend.add("POST", "/admin/login", body={"success": False, "message": "Invalid credentials"})

        # Act & Assert
        with pytest.raises(AuthenticationError) as exc_info:
            auth.login("admin@platform.test", "wrong")

        assert exc_info.value.message == "Invalid credentials"
        assert auth.status == AuthStatus.UNAUTHENTICATED
        assert identity.signed_in_tokens == []

    def test_login_refused_without_message(self, auth, backend):
        backend.add("POST", "/admin/login", body={"success": False})

        with pytest.raises(AuthenticationError) as exc_info:
            auth.login("admin@platform.test", "wrong")

        assert exc_info.value.message == "Login failed"

    def test_login_without_admin_data(self, auth, backend, storage):
        """Should fail when the backend omits the principal."""
        # Arrange
        backend.add("POST", "/admin/login", body={"success": True, "customFirebaseToken": "t"})

        # Act & Assert
        with pytest.raises(AuthenticationError) as exc_info:
            auth.login("admin@platform.test", "secret")

        assert exc_info.value.message == "Admin data not found in response"
        assert storage.get(ADMIN_STORAGE_KEY) is None

    def test_token_exchange_failure_leaves_no_session(self, auth, api, backend, identity, storage):
        """Should clear the persisted admin when the provider rejects the token."""
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response())
        identity.fail_sign_in = IdentityProviderError("INVALID_CUSTOM_TOKEN")

        # Act & Assert
        with pytest.raises(IdentityProviderError):
            auth.login("admin@platform.test", "secret")

        assert storage.get(ADMIN_STORAGE_KEY) is None
        assert not api.has_default_authorization
        assert auth.status == AuthStatus.UNAUTHENTICATED
        assert not auth.is_loading

    def test_backend_error_propagates(self, auth, backend):
        backend.add("POST", "/admin/login", status=500, body={"message": "Database down"})

        with pytest.raises(BackendApiError):
            auth.login("admin@platform.test", "secret")

        assert auth.status == AuthStatus.UNAUTHENTICATED

    def test_second_login_while_busy_is_rejected(self, auth, backend):
        """Should refuse to start a login while another is running."""
        # Arrange
        auth._login_in_progress = True

        # Act & Assert
        with pytest.raises(LoginInProgressError):
            auth.login("admin@platform.test", "secret")

        assert backend.calls == []

    def test_provider_events_ignored_during_login(self, auth, backend, identity):
        """Should let login() settle state instead of the sign-in event."""
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response())

        # Act
        auth.login("admin@platform.test", "secret")

        # Assert
        assert auth.status == AuthStatus.AUTHENTICATED
        assert identity.current_user is not None


class TestAuthLogout:
    """Tests for logout() and the session guard."""

    def test_logout_clears_everything(self, auth, api, backend, identity, storage):
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response())
        auth.login("admin@platform.test", "secret")

        # Act
        auth.logout()

        # Assert
        assert auth.status == AuthStatus.UNAUTHENTICATED
        assert identity.current_user is None
        assert storage.get(ADMIN_STORAGE_KEY) is None
        assert not api.has_default_authorization

    def test_logout_never_raises(self, auth, backend, identity):
        """Should end the local session even when provider sign-out fails."""
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response())
        auth.login("admin@platform.test", "secret")

        def failing_sign_out():
            raise IdentityProviderError("network down")

        identity.sign_out = failing_sign_out

        # Act
        auth.logout()

        # Assert
        assert auth.status == AuthStatus.UNAUTHENTICATED

    def test_logout_survives_storage_failure(self, auth, api, backend, storage):
        """Should finish logging out when the session file cannot be written."""
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response())
        auth.login("admin@platform.test", "secret")

        # Act
        with patch.object(storage, "remove", side_effect=OSError("read-only file system")):
            auth.logout()

        # Assert
        assert auth.status == AuthStatus.UNAUTHENTICATED
        assert auth.admin is None
        assert not api.has_default_authorization

    def test_failed_login_reports_original_error_when_storage_fails(self, auth, backend, identity, storage):
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response())
        identity.fail_sign_in = IdentityProviderError("INVALID_CUSTOM_TOKEN")

        # Act & Assert
        with patch.object(storage, "remove", side_effect=OSError("read-only file system")):
            with pytest.raises(IdentityProviderError):
                auth.login("admin@platform.test", "secret")

        assert auth.status == AuthStatus.UNAUTHENTICATED

    def test_require_admin_when_signed_out(self, auth):
        with pytest.raises(NotAuthenticatedError) as exc_info:
            auth.require_admin()

        assert exc_info.value.details["redirect"] == "/login"

    def test_session_view(self, auth, backend):
        """Should expose status flags and the camelCase principal."""
        # Arrange
        backend.add("POST", "/admin/login", body=AdminFactory.create_login_response(
            admin=AdminFactory.create(id="admin-9")
        ))
        auth.login("admin@platform.test", "secret")

        # Act
        view = auth.session_view()

        # Assert
        assert view.is_authenticated
        assert not view.is_loading
        assert view.admin["id"] == "admin-9"
        assert "phoneNumber" in view.admin
