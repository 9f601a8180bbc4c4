"""Login/logout and auth dependencies (get_current_session, require_admin)."""

import logging
from typing import Annotated, Any

import jwt
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from wchelper.api.deps import get_credential_store, get_orchestrator, get_session_manager
from wchelper.core.config import get_settings
from wchelper.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    create_access_token,
    decode_access_token,
)
from wchelper.core.store import StorageFailureError
from wchelper.schemas.auth import LoginRequest, LoginResponse
from wchelper.schemas.session import SessionRecord
from wchelper.schemas.users import UserListItem, UsersListResponse
from wchelper.services.auth import AuthenticationOrchestrator
from wchelper.services.credentials import CredentialStore
from wchelper.services.session import SessionManager

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)

STORAGE_UNAVAILABLE_DETAIL = "Local credential store is unavailable."


def _validate_username(username: str) -> None:
    if not (USERNAME_MIN_LEN <= len(username.strip()) <= USERNAME_MAX_LEN):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid username length.",
        )


def _validate_password(password: str) -> None:
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid password length.",
        )


def _storage_unavailable(e: StorageFailureError) -> HTTPException:
    logger.error(
        "Local store failure",
        extra={"slot": e.key, "reason": (e.message or str(e))[:500]},
    )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=STORAGE_UNAVAILABLE_DETAIL,
    )


@router.post("", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    orchestrator: Annotated[AuthenticationOrchestrator, Depends(get_orchestrator)],
) -> LoginResponse:
    """
    Authenticate with username and password; returns a bearer token for the new session.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    _validate_username(body.username)
    _validate_password(body.password)

    try:
        result = await orchestrator.authenticate(
            body.username.strip(), body.password, timeout_ms=body.timeout_ms
        )
    except StorageFailureError as e:
        raise _storage_unavailable(e) from e

    if not result.success or result.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.message or "Invalid username or password.",
        )
    session = result.session
    token = create_access_token(
        sub=session.subject_username,
        role=session.role,
        auth_mode=session.auth_mode,
        issued_at=session.issued_at,
    )
    return LoginResponse(access_token=token, token_type="bearer", session=session)


def _decode_bearer(credentials: HTTPAuthorizationCredentials | None) -> dict[str, Any]:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def _issued_for(payload: dict[str, Any], session: SessionRecord) -> bool:
    """True when the token was issued for this exact session."""
    return (
        session.subject_username.casefold() == str(payload["sub"]).casefold()
        and payload.get("session_iat") == session.issued_at.timestamp()
    )


def get_current_session(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionRecord:
    """Dependency: require the active session (and, when auth is enabled, a bearer token for it)."""
    try:
        session = sessions.current()
    except StorageFailureError as e:
        raise _storage_unavailable(e) from e

    if not get_settings().AUTH_ENABLED:
        if session is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )
        return session

    payload = _decode_bearer(credentials)
    # Tokens are valid only while their session holds the slot.
    if session is None or not _issued_for(payload, session):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session has ended",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def require_admin(
    current: Annotated[SessionRecord, Depends(get_current_session)],
) -> SessionRecord:
    """Dependency: require an active session with role 'admin'. Raises 403 for non-admin."""
    if current.role.lower() != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current


@router.get("/session", response_model=SessionRecord)
def get_session(
    current: Annotated[SessionRecord, Depends(get_current_session)],
) -> SessionRecord:
    """Return the active session."""
    return current


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> Response:
    """
    End the session the bearer token was issued for.

    Idempotent: with no active session, or a token for a session that has
    already been replaced, nothing is cleared and 204 is still returned.
    """
    payload = _decode_bearer(credentials) if get_settings().AUTH_ENABLED else None
    try:
        session = sessions.current()
        if session is not None and (payload is None or _issued_for(payload, session)):
            sessions.clear()
    except StorageFailureError as e:
        raise _storage_unavailable(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[SessionRecord, Depends(require_admin)],
    credential_store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> UsersListResponse:
    """List local users (admin only)."""
    try:
        users = credential_store.list()
    except StorageFailureError as e:
        raise _storage_unavailable(e) from e
    return UsersListResponse(
        users=[
            UserListItem(id=u.id, username=u.username, role=u.role, is_active=u.is_active)
            for u in users
        ]
    )
