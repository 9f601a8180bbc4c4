"""Local durable slot store: named key -> JSON record, with SQL and in-memory backends."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wchelper.models import Base, Slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageKeys:
    """Logical slot names, all sharing one prefix."""

    users: str
    session: str
    settings: str
    homestays: str
    faqs: str
    logs: str
    conversation_memory: str
    homestay_general_knowledge: str

    @classmethod
    def with_prefix(cls, prefix: str = "wc_") -> StorageKeys:
        return cls(
            users=f"{prefix}users",
            session=f"{prefix}session",
            settings=f"{prefix}settings",
            homestays=f"{prefix}homestays",
            faqs=f"{prefix}faqs",
            logs=f"{prefix}logs",
            conversation_memory=f"{prefix}conversation_memory",
            homestay_general_knowledge=f"{prefix}homestay_general_knowledge",
        )

    def all(self) -> dict[str, str]:
        """Return name -> key for every slot, in declaration order."""
        return dict(self.__dict__)


class StorageFailureError(Exception):
    """Raised when the local durable store cannot be read or written."""

    def __init__(self, message: str, key: str | None = None, cause: Exception | None = None) -> None:
        self.message = message
        self.key = key
        self.cause = cause
        super().__init__(message)


class CorruptSlotError(StorageFailureError):
    """Raised when a slot exists but its content cannot be decoded."""


class SlotStore(Protocol):
    """Capability handed to components that persist local state."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


def _encode(key: str, value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise StorageFailureError(f"Value for slot '{key}' is not serializable.", key=key, cause=e) from e


def _decode(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptSlotError(f"Slot '{key}' holds corrupt data.", key=key, cause=e) from e


class SqlSlotStore:
    """
    Slot store backed by the `slots` table.

    Every call runs in its own short transaction, so writes are durable when the
    call returns. Database errors surface as StorageFailureError.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def create_schema(self) -> None:
        """Create the slots table if missing (SQLite/dev; Alembic manages prod)."""
        db = self._session_factory()
        try:
            Base.metadata.create_all(bind=db.get_bind())
        except SQLAlchemyError as e:
            raise StorageFailureError("Could not create local store schema.", cause=e) from e
        finally:
            db.close()

    def get(self, key: str) -> Any | None:
        db = self._session_factory()
        try:
            raw = db.execute(select(Slot.value).where(Slot.key == key)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageFailureError(f"Could not read slot '{key}'.", key=key, cause=e) from e
        finally:
            db.close()
        if raw is None:
            return None
        return _decode(key, raw)

    def set(self, key: str, value: Any) -> None:
        raw = _encode(key, value)
        db = self._session_factory()
        try:
            slot = db.get(Slot, key)
            if slot is None:
                db.add(Slot(key=key, value=raw))
            else:
                slot.value = raw
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageFailureError(f"Could not write slot '{key}'.", key=key, cause=e) from e
        finally:
            db.close()

    def remove(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(Slot).filter(Slot.key == key).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageFailureError(f"Could not remove slot '{key}'.", key=key, cause=e) from e
        finally:
            db.close()

    def raw_sizes(self) -> dict[str, int]:
        """Return key -> serialized length for every stored slot."""
        db = self._session_factory()
        try:
            rows = db.execute(select(Slot.key, Slot.value)).all()
        except SQLAlchemyError as e:
            raise StorageFailureError("Could not list slots.", cause=e) from e
        finally:
            db.close()
        return {key: len(value) for key, value in rows}


class MemorySlotStore:
    """Process-local slot store. Values are JSON round-tripped like the SQL backend."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._slots: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str) -> Any | None:
        raw = self._slots.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    def set(self, key: str, value: Any) -> None:
        self._slots[key] = _encode(key, copy.deepcopy(value))

    def remove(self, key: str) -> None:
        self._slots.pop(key, None)

    def raw_sizes(self) -> dict[str, int]:
        return {key: len(raw) for key, raw in self._slots.items()}
