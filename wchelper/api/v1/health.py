"""Health check endpoint with local store connectivity and remote connection status."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wchelper.api.deps import get_monitor
from wchelper.core.config import settings
from wchelper.core.database import check_db_connected, get_db
from wchelper.schemas.health import HealthResponse
from wchelper.services.connection import ConnectionHealthMonitor

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    db: Annotated[Session, Depends(get_db)],
    monitor: Annotated[ConnectionHealthMonitor, Depends(get_monitor)],
) -> HealthResponse:
    """
    Return service health, local store connectivity and the last remote status.
    Used by load balancers, monitoring, and other instances' health probes.
    """
    connected = check_db_connected(db)

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database="connected" if connected else "disconnected",
        success=connected,
        message="Local store connection successful" if connected else "Local store connection failed",
        remote=monitor.status,
    )
