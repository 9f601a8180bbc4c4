"""Core app configuration and local store."""

from wchelper.core.config import get_settings, settings
from wchelper.core.database import get_db, get_store

__all__ = ["get_settings", "settings", "get_db", "get_store"]
