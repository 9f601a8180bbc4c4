"""Login orchestration: prefer the remote service, fall back to the local credential store."""

import logging
import time

from wchelper.core.security import verify_password
from wchelper.schemas.auth import AuthFailureReason, AuthResult
from wchelper.schemas.connection import ConnectionState
from wchelper.services.connection import ConnectionHealthMonitor
from wchelper.services.credentials import CredentialStore
from wchelper.services.remote_auth import RemoteAuthenticator, RemoteAuthUnavailableError
from wchelper.services.session import SessionManager

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password."


class AuthenticationOrchestrator:
    """
    One login attempt: probe, then remote or fallback auth, then session.

    Only connectivity problems (probe says disconnected, or the remote call
    cannot produce a verdict) select the fallback path. An authoritative
    rejection from either path ends the attempt. StorageFailureError from the
    local store propagates to the caller. There is no retry.
    """

    def __init__(
        self,
        monitor: ConnectionHealthMonitor,
        credentials: CredentialStore,
        sessions: SessionManager,
        remote: RemoteAuthenticator,
    ) -> None:
        self._monitor = monitor
        self._credentials = credentials
        self._sessions = sessions
        self._remote = remote

    async def authenticate(
        self, username: str, password: str, timeout_ms: int | None = None
    ) -> AuthResult:
        start = time.perf_counter()
        status = await self._monitor.check_connection(timeout_ms=timeout_ms)

        if status.state == ConnectionState.CONNECTED:
            try:
                result = await self._authenticate_remote(username, password)
            except RemoteAuthUnavailableError as e:
                logger.warning(
                    "Remote login unavailable; using local credentials",
                    extra={"reason": e.message[:200]},
                )
                result = self._authenticate_fallback(username, password)
        else:
            result = self._authenticate_fallback(username, password)

        logger.info(
            "Login attempt completed",
            extra={
                "auth_status": "success" if result.success else "failure",
                "auth_mode": result.session.auth_mode if result.session else None,
                "reason": result.reason.value if result.reason else None,
                "auth_latency_seconds": time.perf_counter() - start,
            },
        )
        return result

    async def _authenticate_remote(self, username: str, password: str) -> AuthResult:
        verdict = await self._remote.authenticate(username, password)
        if not verdict.accepted or verdict.identity is None:
            return AuthResult.failed(
                AuthFailureReason.REMOTE_REJECTED,
                verdict.reason or INVALID_CREDENTIALS_MESSAGE,
            )
        return AuthResult.ok(self._sessions.create(verdict.identity, "remote"))

    def _authenticate_fallback(self, username: str, password: str) -> AuthResult:
        user = self._credentials.find_active_by_username(username)
        # find_active_by_username already filters inactive records; is_active is rechecked here.
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            return AuthResult.failed(
                AuthFailureReason.INVALID_CREDENTIALS, INVALID_CREDENTIALS_MESSAGE
            )
        return AuthResult.ok(self._sessions.create(user, "fallback"))
