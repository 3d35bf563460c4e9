"""
Firebase identity provider integration.

Exchanges the backend-issued custom token for an ID token, refreshes
ID tokens, and notifies subscribers when the signed-in user changes.
Talks to the Identity Toolkit and Secure Token REST APIs.
"""

import time
from dataclasses import dataclass, asdict
from typing import Callable, Optional

import jwt
import requests
import structlog

from exceptions import IdentityProviderError

logger = structlog.get_logger(__name__)

SESSION_KEY = "provider_session"

# Refresh a little before the provider's expiry to absorb clock skew.
EXPIRY_MARGIN_SECONDS = 60

AuthListener = Callable[[Optional["IdentityUser"]], None]


@dataclass
class IdentityUser:
    """Signed-in provider user and its current tokens."""
    uid: str
    id_token: str
    refresh_token: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at - EXPIRY_MARGIN_SECONDS


def _uid_from_id_token(id_token: str) -> str:
    """Read the subject claim from an ID token without verifying it."""
    try:
        claims = jwt.decode(id_token, options={"verify_signature": False, "verify_exp": False})
    except jwt.PyJWTError as e:
        logger.warning("id_token_claims_unreadable", error=str(e))
        return "unknown"
    return claims.get("user_id") or claims.get("sub") or "unknown"


class FirebaseIdentityProvider:
    """
    Identity provider session.

    The provider session (tokens) is persisted in session storage so a
    restarted console can resume it; start() replays it to subscribers.
    """

    def __init__(
        self,
        api_key: Optional[str],
        storage,
        identity_toolkit_url: str = "https://identitytoolkit.googleapis.com/v1",
        secure_token_url: str = "https://securetoken.googleapis.com/v1",
        http: Optional[requests.Session] = None,
        timeout: float = 10,
        clock: Callable[[], float] = time.time
    ):
        self.api_key = api_key
        self.storage = storage
        self.identity_toolkit_url = identity_toolkit_url.rstrip("/")
        self.secure_token_url = secure_token_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout
        self.clock = clock
        self._current_user: Optional[IdentityUser] = None
        self._listeners: list[AuthListener] = []

    @property
    def current_user(self) -> Optional[IdentityUser]:
        return self._current_user

    # ===================
    # SUBSCRIPTIONS
    # ===================

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """
        Subscribe to sign-in/sign-out events.

        Returns:
            Function that removes the subscription
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._current_user)

    def start(self) -> None:
        """Restore a persisted provider session and announce the current state."""
        saved = self.storage.get(SESSION_KEY)
        if saved:
            try:
                self._current_user = IdentityUser(**saved)
                logger.info("identity_session_restored", uid=self._current_user.uid)
            except TypeError:
                logger.warning("identity_session_malformed")
                self.storage.remove(SESSION_KEY)
                self._current_user = None
        self._notify()

    # ===================
    # SIGN IN / OUT
    # ===================

    def sign_in_with_custom_token(self, custom_token: str) -> IdentityUser:
        """
        Exchange a backend-issued custom token for a provider session.

        Raises:
            IdentityProviderError: If the exchange fails
        """
        if not custom_token:
            raise IdentityProviderError("Custom token missing from login response")

        logger.info("identity_sign_in_started", token_length=len(custom_token))

        data = self._post(
            f"{self.identity_toolkit_url}/accounts:signInWithCustomToken",
            json={"token": custom_token, "returnSecureToken": True}
        )
        user = IdentityUser(
            uid=_uid_from_id_token(data["idToken"]),
            id_token=data["idToken"],
            refresh_token=data["refreshToken"],
            expires_at=self.clock() + float(data.get("expiresIn", 3600))
        )
        self._set_user(user)

        logger.info("identity_sign_in_complete", uid=user.uid)
        return user

    def sign_out(self) -> None:
        """Forget the provider session locally and announce it."""
        uid = self._current_user.uid if self._current_user else None
        self._current_user = None
        self.storage.remove(SESSION_KEY)
        logger.info("identity_signed_out", uid=uid)
        self._notify()

    # ===================
    # TOKENS
    # ===================

    def get_id_token(self, force_refresh: bool = False) -> str:
        """
        Current ID token, refreshed when forced or expired.

        Raises:
            IdentityProviderError: If no user is signed in or refresh fails
        """
        user = self._current_user
        if user is None:
            raise IdentityProviderError("No signed-in user")

        if not force_refresh and not user.is_expired(self.clock()):
            return user.id_token

        data = self._post(
            f"{self.secure_token_url}/token",
            data={"grant_type": "refresh_token", "refresh_token": user.refresh_token}
        )
        refreshed = IdentityUser(
            uid=data.get("user_id") or user.uid,
            id_token=data["id_token"],
            refresh_token=data.get("refresh_token", user.refresh_token),
            expires_at=self.clock() + float(data.get("expires_in", 3600))
        )
        self._current_user = refreshed
        self.storage.set(SESSION_KEY, asdict(refreshed))

        logger.debug("identity_token_refreshed", uid=refreshed.uid)
        return refreshed.id_token

    # ===================
    # HELPERS
    # ===================

    def _set_user(self, user: IdentityUser) -> None:
        self._current_user = user
        self.storage.set(SESSION_KEY, asdict(user))
        self._notify()

    def _post(self, url: str, **kwargs) -> dict:
        if not self.api_key:
            raise IdentityProviderError("Identity provider is not configured")

        try:
            response = self.http.post(
                url,
                params={"key": self.api_key},
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.error("identity_request_failed", url=url, error=str(e))
            raise IdentityProviderError(f"Identity provider unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            error = body.get("error", {}) if isinstance(body, dict) else {}
            reason = error.get("message") if isinstance(error, dict) else str(error)
            logger.error("identity_api_error", status=response.status_code, reason=reason)
            raise IdentityProviderError(
                f"Identity provider error: {reason or response.status_code}",
                details={"status": response.status_code}
            )

        return body
