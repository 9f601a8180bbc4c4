"""API v1 routes."""

from fastapi import APIRouter

from wchelper.api.v1 import auth, connection, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(connection.router, prefix="/connection", tags=["connection"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
