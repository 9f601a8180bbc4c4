"""Dependency providers wiring the auth services to the process-wide slot store."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from wchelper.core.config import get_settings
from wchelper.core.database import get_store
from wchelper.core.store import SlotStore, StorageKeys
from wchelper.services.auth import AuthenticationOrchestrator
from wchelper.services.connection import ConnectionHealthMonitor
from wchelper.services.credentials import CredentialStore
from wchelper.services.remote_auth import HttpRemoteAuthenticator
from wchelper.services.session import SessionManager


def get_storage_keys() -> StorageKeys:
    return StorageKeys.with_prefix(get_settings().STORAGE_KEY_PREFIX)


@lru_cache
def get_monitor() -> ConnectionHealthMonitor:
    """Process-wide monitor so the last known status is shared by all requests."""
    return ConnectionHealthMonitor.from_settings(get_settings())


def get_credential_store(
    store: Annotated[SlotStore, Depends(get_store)],
    keys: Annotated[StorageKeys, Depends(get_storage_keys)],
) -> CredentialStore:
    return CredentialStore(store, keys.users)


def get_session_manager(
    store: Annotated[SlotStore, Depends(get_store)],
    keys: Annotated[StorageKeys, Depends(get_storage_keys)],
) -> SessionManager:
    return SessionManager(store, keys.session)


def get_orchestrator(
    monitor: Annotated[ConnectionHealthMonitor, Depends(get_monitor)],
    credentials: Annotated[CredentialStore, Depends(get_credential_store)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> AuthenticationOrchestrator:
    return AuthenticationOrchestrator(
        monitor,
        credentials,
        sessions,
        HttpRemoteAuthenticator.from_settings(get_settings()),
    )
