"""FastAPI application entrypoint. No business logic; only wiring, startup and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wchelper.api.deps import get_monitor
from wchelper.api.v1 import router as v1_router
from wchelper.core.config import settings
from wchelper.core.database import slot_store
from wchelper.services.bootstrap import Bootstrapper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Ensure local state exists before serving; optionally keep probing the remote service."""
    slot_store.create_schema()
    Bootstrapper.from_settings(slot_store, settings).ensure_initialized()
    monitor = get_monitor()
    if settings.MONITOR_ENABLED:
        monitor.start_monitoring(settings.MONITOR_INTERVAL_SEC)
    try:
        yield
    finally:
        await monitor.stop_monitoring()


app = FastAPI(
    title="WC Helper API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix=settings.API_V1_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    """Root route; minimal payload for discovery."""
    return {"message": "WC Helper API"}
