"""Request/response schemas for auth endpoints and login outcomes."""

from enum import Enum

from pydantic import BaseModel, Field

from wchelper.schemas.session import SessionRecord


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username (usually an email)")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    timeout_ms: int | None = Field(
        default=None, gt=0, le=60000, description="Override for the health probe deadline"
    )


class AuthFailureReason(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    REMOTE_REJECTED = "remote_rejected"


class AuthResult(BaseModel):
    """Outcome of one login attempt: either a session or a failure reason."""

    success: bool
    session: SessionRecord | None = None
    reason: AuthFailureReason | None = None
    message: str | None = None

    @classmethod
    def ok(cls, session: SessionRecord) -> "AuthResult":
        return cls(success=True, session=session)

    @classmethod
    def failed(cls, reason: AuthFailureReason, message: str) -> "AuthResult":
        return cls(success=False, reason=reason, message=message)


class LoginResponse(BaseModel):
    """Bearer token and session returned after successful login."""

    access_token: str = Field(..., description="Bearer token bound to the active session")
    token_type: str = Field(default="bearer", description="Token type")
    session: SessionRecord
