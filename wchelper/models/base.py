"""Declarative base for the local slot store tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base for ORM models persisted in the local store (STORE_URL)."""
