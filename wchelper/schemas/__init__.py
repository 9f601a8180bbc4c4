"""Pydantic record and request/response schemas."""

from wchelper.schemas.auth import AuthFailureReason, AuthResult, LoginRequest, LoginResponse
from wchelper.schemas.connection import ConnectionState, ConnectionStatus
from wchelper.schemas.health import HealthResponse
from wchelper.schemas.session import SessionRecord
from wchelper.schemas.settings import SettingsRecord
from wchelper.schemas.users import UserRecord

__all__ = [
    "AuthFailureReason",
    "AuthResult",
    "ConnectionState",
    "ConnectionStatus",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "SessionRecord",
    "SettingsRecord",
    "UserRecord",
]
