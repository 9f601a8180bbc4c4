"""Client for the remote database service's login endpoint."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Protocol

import httpx
from pydantic import BaseModel, Field, ValidationError

if TYPE_CHECKING:
    from wchelper.core.config import Settings

logger = logging.getLogger(__name__)


class RemoteIdentity(BaseModel):
    """Identity the remote service vouches for after a successful login."""

    username: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)


class RemoteVerdict(BaseModel):
    """Clean answer from the remote service: accepted (with identity) or rejected."""

    accepted: bool
    identity: RemoteIdentity | None = None
    reason: str | None = None


class RemoteAuthUnavailableError(Exception):
    """Raised when the remote service could not give a verdict (network, 5xx, bad payload)."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)


class RemoteAuthenticator(Protocol):
    async def authenticate(self, username: str, password: str) -> RemoteVerdict: ...


def _rejection_reason(body: object) -> str:
    if isinstance(body, dict):
        reason = body.get("error") or body.get("message")
        if reason:
            return str(reason)[:500]
    return "Invalid username or password."


class HttpRemoteAuthenticator:
    """
    POSTs {username, password} to the remote login endpoint.

    2xx with success=true and a user object is an acceptance; 401/403 or
    success=false is a rejection carrying the service's reason. Everything else
    raises RemoteAuthUnavailableError so the caller can fall back.
    """

    def __init__(
        self,
        base_url: str,
        path: str,
        timeout_sec: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{base_url.rstrip('/')}{path}"
        self._timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> HttpRemoteAuthenticator:
        return cls(
            settings.REMOTE_BASE_URL,
            settings.REMOTE_AUTH_PATH,
            timeout_sec=settings.REMOTE_AUTH_TIMEOUT_SEC,
            transport=transport,
        )

    async def authenticate(self, username: str, password: str) -> RemoteVerdict:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._url, json={"username": username, "password": password}
                )
        except httpx.TimeoutException as e:
            raise RemoteAuthUnavailableError("Remote login timed out.", cause=e) from e
        except httpx.HTTPError as e:
            raise RemoteAuthUnavailableError("Remote login request failed.", cause=e) from e

        if response.status_code >= 500:
            raise RemoteAuthUnavailableError(
                f"Remote login returned status {response.status_code}."
            )

        # 401/403 is a verdict whatever the body looks like.
        if response.status_code in (401, 403):
            try:
                body = response.json()
            except ValueError:
                body = None
            return RemoteVerdict(accepted=False, reason=_rejection_reason(body))

        try:
            body = response.json()
        except json.JSONDecodeError as e:
            raise RemoteAuthUnavailableError("Remote login response is not valid JSON.", cause=e) from e
        if not isinstance(body, dict):
            raise RemoteAuthUnavailableError("Remote login response is not a JSON object.")

        if body.get("success") is False:
            return RemoteVerdict(accepted=False, reason=_rejection_reason(body))

        if not response.is_success or body.get("success") is not True:
            raise RemoteAuthUnavailableError(
                f"Remote login returned an unexpected response (status {response.status_code})."
            )
        try:
            identity = RemoteIdentity.model_validate(body.get("user"))
        except ValidationError as e:
            raise RemoteAuthUnavailableError("Remote login response is missing the user.", cause=e) from e
        return RemoteVerdict(accepted=True, identity=identity)
