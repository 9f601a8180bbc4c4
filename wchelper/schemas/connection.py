"""Pydantic schemas for remote connection status."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, computed_field


class ConnectionState(str, Enum):
    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class ConnectionStatus(BaseModel):
    """Outcome of the last health probe against the remote database service."""

    state: ConnectionState = ConnectionState.UNKNOWN
    checked_at: datetime | None = Field(default=None, description="When the last probe finished")
    endpoint: str | None = Field(default=None, description="Endpoint that produced the verdict")
    error: str | None = Field(default=None, description="Why the service was classified disconnected")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def fallback_active(self) -> bool:
        return self.state != ConnectionState.CONNECTED


class ConnectionCheckRequest(BaseModel):
    """Optional overrides for a forced probe."""

    endpoint: str | None = Field(default=None, description="Probe only this endpoint")
    timeout_ms: int | None = Field(default=None, gt=0, le=60000)
