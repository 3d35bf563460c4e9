"""
Authenticated gateway to the commerce backend.

Every outbound call goes through ApiClient.request(), which:
    - attaches a freshly refreshed ID token when an admin is signed in
    - maps non-2xx answers and transport failures to BackendApiError
    - sends the admin back to the login screen on 401, except for the
      login call itself or when the admin is already on the login screen
"""

from typing import Any, Optional, TypeVar

import requests
import structlog
from pydantic import BaseModel

from config import get_http_session
from exceptions import (
    BackendApiError,
    BackendUnauthorizedError,
    BackendUnavailableError,
    BackendTimeoutError,
    ResponseSchemaError,
    IdentityProviderError,
)
from models.base import parse_payload

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

LOGIN_ENDPOINT = "/admin/login"


class ApiClient:
    """
    Backend REST client.

    Args:
        base_url: Backend base URL, e.g. http://localhost:8080
        identity_provider: Source of ID tokens (None = unauthenticated calls)
        navigator: Receives the redirect to login on 401
        timeout: Default client-side timeout in seconds
        session: Outbound HTTP session (defaults to the shared one)
    """

    def __init__(
        self,
        base_url: str,
        identity_provider=None,
        navigator=None,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.identity_provider = identity_provider
        self.navigator = navigator
        self.timeout = timeout
        self.session = session or get_http_session()
        self.default_headers: dict[str, str] = {}

    # ===================
    # DEFAULT CREDENTIAL
    # ===================

    def set_default_authorization(self, id_token: str) -> None:
        self.default_headers["Authorization"] = f"Bearer {id_token}"

    def clear_default_authorization(self) -> None:
        self.default_headers.pop("Authorization", None)

    @property
    def has_default_authorization(self) -> bool:
        return "Authorization" in self.default_headers

    def _fresh_authorization(self) -> Optional[str]:
        """Force-refreshed bearer header, or None when nobody is signed in."""
        provider = self.identity_provider
        if provider is None or provider.current_user is None:
            return None

        try:
            return f"Bearer {provider.get_id_token(force_refresh=True)}"
        except IdentityProviderError as e:
            # Fall back to whatever default header is attached
            logger.warning("token_refresh_failed", error=e.message)
            return None

    # ===================
    # REQUESTS
    # ===================

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Any = None,
        data: Optional[dict] = None,
        files: Optional[dict] = None,
        timeout: Optional[float] = None
    ) -> Any:
        """
        Send one request to the backend.

        Args:
            method: HTTP method
            path: Path below the base URL, starting with "/"
            params: Query parameters (None values dropped)
            json: JSON body
            data: Form fields (multipart when files are given)
            files: Multipart files as {field: (name, bytes, content_type)}
            timeout: Override of the default timeout

        Returns:
            Decoded JSON body (None for an empty body)

        Raises:
            BackendUnauthorizedError: Backend answered 401
            BackendApiError: Any other non-2xx answer
            BackendTimeoutError: No answer within the timeout
            BackendUnavailableError: Network failure
            ResponseSchemaError: 2xx answer that is not JSON
        """
        url = f"{self.base_url}{path}"
        effective_timeout = timeout or self.timeout

        headers = dict(self.default_headers)
        fresh = self._fresh_authorization()
        if fresh:
            headers["Authorization"] = fresh

        if params:
            params = {k: v for k, v in params.items() if v is not None}

        logger.debug(
            "api_request",
            method=method,
            path=path,
            authenticated="Authorization" in headers
        )

        try:
            response = self.session.request(
                method,
                url,
                params=params or None,
                json=json,
                data=data,
                files=files,
                headers=headers,
                timeout=effective_timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error("api_request_timeout", method=method, path=path, timeout=effective_timeout)
            raise BackendTimeoutError(path, effective_timeout) from e
        except requests.exceptions.RequestException as e:
            logger.error("api_request_failed", method=method, path=path, error=str(e))
            raise BackendUnavailableError(path, str(e)) from e

        body, is_json = self._decode(response)

        if response.status_code == 401:
            logger.warning("api_unauthorized", method=method, path=path)
            self._handle_unauthorized(path)
            raise BackendUnauthorizedError(path, self._error_message(body), body)

        if not 200 <= response.status_code < 300:
            message = self._error_message(body)
            logger.warning(
                "api_error_response",
                method=method,
                path=path,
                status=response.status_code,
                message=message
            )
            raise BackendApiError(path, response.status_code, message, body)

        if not is_json:
            raise ResponseSchemaError(
                path,
                "json",
                [{"loc": "", "msg": "Response body is not JSON"}]
            )

        return body

    def get(self, path: str, params: Optional[dict] = None, **kwargs) -> Any:
        return self.request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def patch(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PATCH", path, json=json, **kwargs)

    def parse(self, model: type[T], payload: Any, path: str) -> T:
        """
        Validate a backend body at the boundary.

        Raises:
            ResponseSchemaError: If the payload does not match the model
        """
        result = parse_payload(model, payload)
        if not result.ok:
            logger.error(
                "api_payload_invalid",
                path=path,
                schema=result.schema,
                errors=result.errors
            )
            raise ResponseSchemaError(path, result.schema, result.errors)
        return result.value

    # ===================
    # HELPERS
    # ===================

    def _handle_unauthorized(self, path: str) -> None:
        if self.navigator is None:
            return
        if path.rstrip("/").endswith(LOGIN_ENDPOINT) or self.navigator.on_login_screen:
            return
        self.navigator.redirect_to_login()

    @staticmethod
    def _decode(response) -> tuple[Any, bool]:
        """Decoded body and whether it was JSON. Empty bodies count as JSON null."""
        if not response.content:
            return None, True
        try:
            return response.json(), True
        except ValueError:
            return None, False

    @staticmethod
    def _error_message(body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
        return None
