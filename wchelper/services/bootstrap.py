"""Startup self-healing: make sure every required local slot exists with a complete default."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from wchelper.core.security import hash_password
from wchelper.core.store import CorruptSlotError, SlotStore, StorageKeys
from wchelper.schemas.settings import DEFAULT_TIMEZONE, SettingsRecord
from wchelper.schemas.users import UserRecord
from wchelper.services.credentials import CredentialStore

if TYPE_CHECKING:
    from wchelper.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ID = "admin-001"
DEFAULT_ADMIN_USERNAME = "admin@demo.com"
# Documented default; exists only so an empty system is not locked out.
DEFAULT_ADMIN_PASSWORD = "Passw0rd!"
SYSTEM_ACTOR = "system"


@dataclass
class BootstrapReport:
    created_slots: list[str] = field(default_factory=list)
    admin_seeded: bool = False


def default_admin(username: str = DEFAULT_ADMIN_USERNAME, password: str = DEFAULT_ADMIN_PASSWORD) -> UserRecord:
    now = datetime.now(UTC)
    return UserRecord(
        id=DEFAULT_ADMIN_ID,
        username=username,
        password_hash=hash_password(password),
        role="admin",
        is_active=True,
        created_by=SYSTEM_ACTOR,
        created_at=now,
        updated_by=SYSTEM_ACTOR,
        updated_at=now,
    )


def load_settings(store: SlotStore, key: str, timezone: str = DEFAULT_TIMEZONE) -> SettingsRecord:
    """
    Read the settings slot as a SettingsRecord.

    Missing keys are filled from defaults by the model. A value that does not
    validate at all is replaced by defaults in memory (the slot is left as is).
    """
    raw = store.get(key)
    if raw is None:
        return SettingsRecord.default(timezone)
    try:
        return SettingsRecord.model_validate(raw)
    except ValidationError as e:
        logger.warning(
            "Stored settings are invalid; using defaults",
            extra={"slot": key, "errors": e.error_count()},
        )
        return SettingsRecord.default(timezone)


class Bootstrapper:
    """
    Idempotent: existing slots are never touched and the default admin is
    written only while the credential store is empty.
    """

    def __init__(
        self,
        store: SlotStore,
        keys: StorageKeys,
        admin_username: str = DEFAULT_ADMIN_USERNAME,
        admin_password: str = DEFAULT_ADMIN_PASSWORD,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> None:
        self._store = store
        self._keys = keys
        self._admin_username = admin_username
        self._admin_password = admin_password
        self._timezone = timezone

    @classmethod
    def from_settings(cls, store: SlotStore, settings: Settings) -> Bootstrapper:
        return cls(
            store,
            StorageKeys.with_prefix(settings.STORAGE_KEY_PREFIX),
            admin_username=settings.DEFAULT_ADMIN_USERNAME,
            admin_password=settings.DEFAULT_ADMIN_PASSWORD.get_secret_value(),
            timezone=settings.DEFAULT_TIMEZONE,
        )

    def _defaults(self) -> list[tuple[str, Any]]:
        keys = self._keys
        return [
            (keys.settings, SettingsRecord.default(self._timezone).to_storage()),
            (keys.homestays, []),
            (keys.faqs, []),
            (keys.logs, []),
            (keys.conversation_memory, {}),
            (keys.homestay_general_knowledge, ""),
        ]

    def _read(self, key: str) -> tuple[bool, Any]:
        """Return (present, value). A corrupt slot is present and left as is."""
        try:
            value = self._store.get(key)
        except CorruptSlotError as e:
            logger.warning(
                "Slot holds corrupt data; leaving it untouched",
                extra={"slot": key, "reason": e.message},
            )
            return True, None
        return value is not None, value

    def ensure_initialized(self) -> BootstrapReport:
        report = BootstrapReport()
        for key, value in self._defaults():
            present, _ = self._read(key)
            if not present:
                self._store.set(key, value)
                report.created_slots.append(key)

        present, users_raw = self._read(self._keys.users)
        if not present or users_raw == []:
            admin = default_admin(self._admin_username, self._admin_password)
            CredentialStore(self._store, self._keys.users).replace_all([admin])
            if not present:
                report.created_slots.append(self._keys.users)
            report.admin_seeded = True
            logger.info("Default admin user created", extra={"username": admin.username})

        if report.created_slots:
            logger.info(
                "Local state initialized",
                extra={"created_slots": ",".join(report.created_slots)},
            )
        return report
