"""
JSON-over-HTTP client for the task manager REST backend.

Maps every response onto the auth error taxonomy so that callers only
deal with typed exceptions:

- 2xx                      -> decoded JSON body (empty dict if none)
- 422 with "errors" map    -> FieldValidationError
- 401 on a token request   -> SessionInvalidError
- any other status         -> AuthenticationError
- non-2xx, body not JSON   -> TransportError
- no response              -> TransportError
"""

import json
import logging
from typing import Any

import requests

from auth.exceptions import (
    AuthenticationError,
    FieldValidationError,
    SessionInvalidError,
    TransportError,
)

logger = logging.getLogger(__name__)

_UNREADABLE = object()


def _normalize_field_errors(raw: Any) -> dict[str, list[str]] | None:
    """Coerce a backend "errors" value into {field: [messages]}."""
    if not isinstance(raw, dict) or not raw:
        return None
    errors: dict[str, list[str]] = {}
    for field, messages in raw.items():
        if isinstance(messages, (list, tuple)):
            errors[str(field)] = [str(m) for m in messages]
        elif messages is not None:
            errors[str(field)] = [str(messages)]
    return errors or None


class BackendClient:
    """Send JSON requests to the backend and raise typed errors on failure."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10,
        session: requests.Session | None = None,
    ):
        """
        Initialize with backend location.

        Args:
            base_url: Backend root, e.g. https://tasks.example.com/api
            timeout_seconds: Per-request timeout
            session: Optional pre-configured requests session

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._http = session or requests.Session()

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        payload: dict | None = None,
        token: str | None = None,
        failure_message: str = "Request failed",
    ) -> dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to base_url
            payload: JSON body
            token: Bearer access token, for authenticated calls
            failure_message: Banner text when the backend gives none

        Raises:
            FieldValidationError: 422 with per-field errors
            SessionInvalidError: 401 on a request carrying a token
            AuthenticationError: Any other non-2xx status
            TransportError: No response (connection error, timeout), or an
                error status whose body is not JSON (proxy or gateway page)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = self.url(path)
        try:
            response = self._http.request(
                method,
                url,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Backend connection failed for {method} {path}: {e}")
            raise TransportError(f"Connection failed: {e}") from e

        body = self._decode(response)
        status = response.status_code

        if 200 <= status < 300:
            return body if isinstance(body, dict) else {}

        if body is _UNREADABLE:
            logger.error(f"{method} {path} failed with status {status} and an undecodable body")
            raise TransportError(f"Unreadable response from server (status {status})")

        if status == 422:
            field_errors = _normalize_field_errors(body.get("errors")) if isinstance(body, dict) else None
            if field_errors:
                logger.info(f"{method} {path} rejected with field errors: {sorted(field_errors)}")
                raise FieldValidationError(field_errors)

        message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(message, str) or not message:
            message = failure_message

        if status == 401 and token:
            logger.warning(f"{method} {path} returned 401, token no longer accepted")
            raise SessionInvalidError(message, status_code=status)

        logger.info(f"{method} {path} failed with status {status}")
        raise AuthenticationError(message, status_code=status)

    def _decode(self, response: requests.Response) -> Any:
        """Decode JSON body. Empty bodies decode to {}, non-JSON bodies to _UNREADABLE."""
        if not response.content:
            return {}
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            logger.warning(f"Backend returned non-JSON body (status {response.status_code})")
            return _UNREADABLE

    def post(self, path: str, payload: dict | None = None, **kwargs) -> dict[str, Any]:
        return self.request("POST", path, payload, **kwargs)

    def get(self, path: str, **kwargs) -> dict[str, Any]:
        return self.request("GET", path, None, **kwargs)

    def put(self, path: str, payload: dict | None = None, **kwargs) -> dict[str, Any]:
        return self.request("PUT", path, payload, **kwargs)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._http.close()
