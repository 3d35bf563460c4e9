"""
Unit tests for FirebaseIdentityProvider.

The Identity Toolkit and Secure Token APIs are replaced by a MagicMock
session.

Run: pytest tests/unit/test_identity_provider.py -v
"""

import base64
from unittest.mock import MagicMock

import jwt
import pytest
import requests

from exceptions import IdentityProviderError
from integrations.identity_provider import SESSION_KEY, FirebaseIdentityProvider


def make_id_token(uid: str) -> str:
    return jwt.encode({"user_id": uid, "sub": uid}, "test-signing-key", algorithm="HS256")


def http_response(body: dict, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = body
    return response


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def now():
    return {"t": 1_700_000_000.0}


@pytest.fixture
def provider(http, storage, now) -> FirebaseIdentityProvider:
    return FirebaseIdentityProvider(
        api_key="web-key",
        storage=storage,
        http=http,
        clock=lambda: now["t"]
    )


@pytest.fixture
def signed_in(provider, http):
    http.post.return_value = http_response({
        "idToken": make_id_token("uid-42"),
        "refreshToken": "refresh-1",
        "expiresIn": "3600",
    })
    provider.sign_in_with_custom_token("custom-token")
    http.post.reset_mock()
    return provider


class TestSignIn:
    """Tests for the custom token exchange."""

    def test_sign_in_stores_session_and_notifies(self, provider, http, storage):
        # Arrange
        events = []
        provider.on_auth_state_changed(events.append)
        http.post.return_value = http_response({
            "idToken": make_id_token("uid-42"),
            "refreshToken": "refresh-1",
            "expiresIn": "3600",
        })

        # Act
        user = provider.sign_in_with_custom_token("custom-token")

        # Assert
        assert user.uid == "uid-42"
        assert events == [user]
        assert storage.get(SESSION_KEY)["refresh_token"] == "refresh-1"
        url = http.post.call_args.args[0]
        assert url.endswith("/accounts:signInWithCustomToken")
        assert http.post.call_args.kwargs["params"] == {"key": "web-key"}
        assert http.post.call_args.kwargs["json"] == {"token": "custom-token", "returnSecureToken": True}

    @pytest.mark.parametrize("id_token", [
        "not-a-jwt",
        base64.urlsafe_b64encode(b'{"alg":"none"}').decode().rstrip("=") + ".W10.",
    ])
    def test_unreadable_id_token_claims(self, provider, http, id_token):
        """Should still sign in when the ID token claims cannot be read."""
        # Arrange
        http.post.return_value = http_response({
            "idToken": id_token,
            "refreshToken": "refresh-1",
            "expiresIn": "3600",
        })

        # Act
        user = provider.sign_in_with_custom_token("custom-token")

        # Assert
        assert user.uid == "unknown"
        assert provider.current_user is user

    def test_empty_custom_token_rejected(self, provider, http):
        with pytest.raises(IdentityProviderError):
            provider.sign_in_with_custom_token("")

        http.post.assert_not_called()

    def test_provider_error_reason_surfaced(self, provider, http):
        """Should name the provider's error reason."""
        # Arrange
        http.post.return_value = http_response({"error": {"message": "INVALID_CUSTOM_TOKEN"}}, status=400)

        # Act & Assert
        with pytest.raises(IdentityProviderError) as exc_info:
            provider.sign_in_with_custom_token("bad")

        assert "INVALID_CUSTOM_TOKEN" in exc_info.value.message
        assert provider.current_user is None

    def test_unreachable_provider(self, provider, http):
        http.post.side_effect = requests.exceptions.ConnectionError("dns failure")

        with pytest.raises(IdentityProviderError) as exc_info:
            provider.sign_in_with_custom_token("custom-token")

        assert "unreachable" in exc_info.value.message

    def test_not_configured(self, storage, http):
        """Should refuse to call out without an API key."""
        provider = FirebaseIdentityProvider(api_key=None, storage=storage, http=http)

        with pytest.raises(IdentityProviderError) as exc_info:
            provider.sign_in_with_custom_token("custom-token")

        assert exc_info.value.message == "Identity provider is not configured"
        http.post.assert_not_called()


class TestTokens:
    """Tests for get_id_token()."""

    def test_valid_token_returned_without_refresh(self, signed_in, http):
        token = signed_in.get_id_token()

        assert token == make_id_token("uid-42")
        http.post.assert_not_called()

    def test_forced_refresh(self, signed_in, http, storage):
        """Should exchange the refresh token and persist the new one."""
        # Arrange
        http.post.return_value = http_response({
            "id_token": "fresh-id-token",
            "refresh_token": "refresh-2",
            "expires_in": "3600",
            "user_id": "uid-42",
        })

        # Act
        token = signed_in.get_id_token(force_refresh=True)

        # Assert
        assert token == "fresh-id-token"
        assert http.post.call_args.kwargs["data"] == {
            "grant_type": "refresh_token",
            "refresh_token": "refresh-1",
        }
        assert storage.get(SESSION_KEY)["refresh_token"] == "refresh-2"

    def test_expired_token_refreshed(self, signed_in, http, now):
        """Should refresh on its own shortly before expiry."""
        # Arrange
        now["t"] += 3600 - 30
        http.post.return_value = http_response({"id_token": "fresh-id-token", "expires_in": "3600"})

        # Act & Assert
        assert signed_in.get_id_token() == "fresh-id-token"

    def test_no_user(self, provider):
        with pytest.raises(IdentityProviderError):
            provider.get_id_token()


class TestSessionLifecycle:
    """Tests for start() and sign_out()."""

    def test_start_restores_persisted_session(self, storage, http):
        # Arrange
        storage.set(SESSION_KEY, {
            "uid": "uid-42", "id_token": "t", "refresh_token": "r", "expires_at": 1.0
        })
        provider = FirebaseIdentityProvider(api_key="web-key", storage=storage, http=http)
        events = []
        provider.on_auth_state_changed(events.append)

        # Act
        provider.start()

        # Assert
        assert provider.current_user.uid == "uid-42"
        assert len(events) == 1

    def test_start_drops_malformed_session(self, storage, http):
        storage.set(SESSION_KEY, {"unexpected": True})
        provider = FirebaseIdentityProvider(api_key="web-key", storage=storage, http=http)

        provider.start()

        assert provider.current_user is None
        assert storage.get(SESSION_KEY) is None

    def test_sign_out_forgets_session(self, signed_in, storage):
        # Arrange
        events = []
        signed_in.on_auth_state_changed(events.append)

        # Act
        signed_in.sign_out()

        # Assert
        assert signed_in.current_user is None
        assert storage.get(SESSION_KEY) is None
        assert events == [None]

    def test_unsubscribe_stops_events(self, provider):
        events = []
        unsubscribe = provider.on_auth_state_changed(events.append)

        unsubscribe()
        provider.sign_out()

        assert events == []
