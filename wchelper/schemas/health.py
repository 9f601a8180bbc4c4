"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field

from wchelper.schemas.connection import ConnectionStatus


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Local store connectivity status when check is performed",
    )
    # success/message mirror the remote health contract so this service can be probed too.
    success: bool = Field(default=False, description="True when the local store answered")
    message: str = Field(default="", description="Human-readable connectivity message")
    remote: ConnectionStatus | None = Field(
        default=None, description="Last known status of the remote database service"
    )
