"""Local credential store: ordered user records kept in the users slot."""

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from wchelper.core.store import SlotStore, StorageFailureError
from wchelper.schemas.users import UserRecord

logger = logging.getLogger(__name__)


class DuplicateUsernameError(Exception):
    """Raised by add() when a user with the same case-folded username exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        self.message = f"User '{username}' already exists."
        super().__init__(self.message)


def _fold(username: str) -> str:
    return username.strip().casefold()


class CredentialStore:
    """
    Fallback authority for logins while the remote service is unreachable.

    Order of the stored list is significant: it breaks ties between records
    sharing a username (first match wins). replace_all() does not enforce
    uniqueness; add() does.
    """

    def __init__(self, store: SlotStore, key: str) -> None:
        self._store = store
        self._key = key

    def list(self) -> list[UserRecord]:
        raw = self._store.get(self._key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise StorageFailureError(
                f"Slot '{self._key}' does not hold a list of users.", key=self._key
            )
        records: list[UserRecord] = []
        for index, item in enumerate(raw):
            try:
                records.append(UserRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed user record",
                    extra={"slot": self._key, "index": index, "errors": e.error_count()},
                )
        return records

    def replace_all(self, records: Iterable[UserRecord]) -> None:
        self._store.set(self._key, [r.to_storage() for r in records])

    def find_active_by_username(self, username: str) -> UserRecord | None:
        wanted = _fold(username)
        for record in self.list():
            if record.is_active and _fold(record.username) == wanted:
                return record
        return None

    def add(self, record: UserRecord) -> None:
        """Append a record, rejecting a username already present (any case, any state)."""
        records = self.list()
        wanted = _fold(record.username)
        if any(_fold(r.username) == wanted for r in records):
            raise DuplicateUsernameError(record.username)
        records.append(record)
        self.replace_all(records)
