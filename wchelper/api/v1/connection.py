"""Remote connection status and on-demand health probe."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from wchelper.api.deps import get_monitor
from wchelper.schemas.connection import ConnectionCheckRequest, ConnectionStatus
from wchelper.services.connection import ConnectionHealthMonitor

router = APIRouter()


@router.get("/", response_model=ConnectionStatus)
def get_connection_status(
    monitor: Annotated[ConnectionHealthMonitor, Depends(get_monitor)],
) -> ConnectionStatus:
    """Last known status of the remote database service (no probe)."""
    return monitor.status


@router.post("/check", response_model=ConnectionStatus)
async def check_connection(
    monitor: Annotated[ConnectionHealthMonitor, Depends(get_monitor)],
    body: ConnectionCheckRequest | None = None,
) -> ConnectionStatus:
    """Probe the remote service now and return the new status."""
    body = body or ConnectionCheckRequest()
    # Only configured endpoints may be probed; this route must not fetch arbitrary URLs.
    if body.endpoint is not None and body.endpoint not in monitor.endpoints:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Endpoint is not one of the configured health endpoints.",
        )
    return await monitor.check_connection(endpoint=body.endpoint, timeout_ms=body.timeout_ms)
