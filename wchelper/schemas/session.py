"""Pydantic schema for the single active session record."""

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

AuthMode = Literal["remote", "fallback"]


class SessionRecord(BaseModel):
    """
    Session held in the session slot.

    subject_username and role are copies taken at creation time. Older clients
    stored {email, role, signedInAt}; those keys are accepted on read.
    """

    subject_username: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("subject_username", "email"),
    )
    role: str = Field(..., min_length=1)
    issued_at: datetime = Field(
        ...,
        validation_alias=AliasChoices("issued_at", "signedInAt"),
    )
    auth_mode: AuthMode = "fallback"
