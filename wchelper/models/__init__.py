"""SQLAlchemy ORM models."""

from wchelper.models.base import Base
from wchelper.models.slot import Slot

__all__ = ["Base", "Slot"]
