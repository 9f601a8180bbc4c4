"""Pydantic schema for local credential records (users slot)."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator


class UserRecord(BaseModel):
    """
    One entry of the local credential store.

    password_hash is a hex SHA-256 digest. It is persisted under the key
    'password' (the stored shape the local store has always used); either key is
    accepted on read.
    """

    id: str = Field(..., min_length=1, description="Opaque stable identifier")
    username: str = Field(..., min_length=1, max_length=255)
    password_hash: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("password_hash", "password"),
        serialization_alias="password",
    )
    role: str = Field(default="user", min_length=1, max_length=32)
    is_active: bool = True
    created_by: str | None = None
    created_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        # Remote-synced rows carry integer ids.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("password_hash")
    @classmethod
    def normalize_hash(cls, v: str) -> str:
        return v.strip().lower()

    def to_storage(self) -> dict[str, Any]:
        """Serialize for the users slot."""
        return self.model_dump(mode="json", by_alias=True)


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    id: str
    username: str
    role: str
    is_active: bool


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserListItem]
