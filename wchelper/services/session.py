"""Single active session slot: create, read back with validation, clear."""

import logging
from datetime import UTC, datetime
from typing import Protocol

from pydantic import ValidationError

from wchelper.core.store import CorruptSlotError, SlotStore
from wchelper.schemas.session import AuthMode, SessionRecord

logger = logging.getLogger(__name__)


class SessionSubject(Protocol):
    """Anything carrying an identity and role (local UserRecord or remote identity)."""

    username: str
    role: str


class SessionManager:
    """Owns the session slot. At most one session exists; a new one replaces the old."""

    def __init__(self, store: SlotStore, key: str) -> None:
        self._store = store
        self._key = key

    def create(self, user: SessionSubject, mode: AuthMode) -> SessionRecord:
        session = SessionRecord(
            subject_username=user.username,
            role=user.role,
            issued_at=datetime.now(UTC),
            auth_mode=mode,
        )
        self._store.set(self._key, session.model_dump(mode="json"))
        logger.info(
            "Session created",
            extra={"auth_mode": mode, "role": session.role},
        )
        return session

    def current(self) -> SessionRecord | None:
        """
        Return the active session, or None if there is none.

        A stored value missing subject, role or issue time is not a session: it is
        removed and None is returned.
        """
        try:
            raw = self._store.get(self._key)
        except CorruptSlotError:
            raw = {}
        if raw is None:
            return None
        try:
            return SessionRecord.model_validate(raw)
        except ValidationError:
            logger.warning("Invalid session detected; clearing", extra={"slot": self._key})
            self._store.remove(self._key)
            return None

    def clear(self) -> None:
        self._store.remove(self._key)
