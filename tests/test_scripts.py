"""Tests for the admin scripts: create_user, reset_local_state, store_stats."""

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from wchelper.core.security import hash_password
from wchelper.core.store import MemorySlotStore, StorageKeys
from wchelper.scripts import create_user, reset_local_state, store_stats
from wchelper.services.bootstrap import Bootstrapper
from wchelper.services.credentials import CredentialStore

KEYS = StorageKeys.with_prefix("wc_")


class _Store(MemorySlotStore):
    """In-memory store with the SQL store's schema hook."""

    def create_schema(self) -> None:
        pass


class TestCreateUser(unittest.TestCase):
    def setUp(self) -> None:
        self.store = _Store()
        patcher = patch.object(create_user, "slot_store", self.store)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_creates_user(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            code = create_user.main(["staff@demo.com", "staff-pw", "user"])
        self.assertEqual(code, 0)
        self.assertIn("Created user 'staff@demo.com'", out.getvalue())
        user = CredentialStore(self.store, KEYS.users).find_active_by_username("staff@demo.com")
        self.assertEqual(user.password_hash, hash_password("staff-pw"))
        self.assertEqual(user.role, "user")
        self.assertEqual(user.created_by, "system")

    def test_duplicate_rejected(self) -> None:
        Bootstrapper(self.store, KEYS).ensure_initialized()
        err = io.StringIO()
        with redirect_stderr(err):
            code = create_user.main(["ADMIN@demo.com", "other", "admin"])
        self.assertEqual(code, 1)
        self.assertIn("already exists", err.getvalue())
        self.assertEqual(len(CredentialStore(self.store, KEYS.users).list()), 1)

    def test_blank_username_rejected(self) -> None:
        with redirect_stderr(io.StringIO()):
            self.assertEqual(create_user.main(["  ", "pw"]), 1)


class TestResetLocalState(unittest.TestCase):
    def test_restores_default_admin_and_keeps_content(self) -> None:
        store = MemorySlotStore()
        bootstrapper = Bootstrapper(store, KEYS)
        bootstrapper.ensure_initialized()
        CredentialStore(store, KEYS.users).replace_all([])
        store.set(KEYS.session, {"subject_username": "x", "role": "admin", "issued_at": "2026-01-01T00:00:00Z"})
        store.set(KEYS.faqs, [{"id": "faq-001"}])

        report = reset_local_state.reset_local_state(store, bootstrapper, KEYS)

        self.assertTrue(report.admin_seeded)
        self.assertIsNone(store.get(KEYS.session))
        self.assertEqual(store.get(KEYS.faqs), [{"id": "faq-001"}])
        self.assertEqual(len(store.get(KEYS.users)), 1)

    def test_everything_clears_content(self) -> None:
        store = MemorySlotStore()
        bootstrapper = Bootstrapper(store, KEYS)
        bootstrapper.ensure_initialized()
        store.set(KEYS.faqs, [{"id": "faq-001"}])
        reset_local_state.reset_local_state(store, bootstrapper, KEYS, everything=True)
        self.assertEqual(store.get(KEYS.faqs), [])


class TestStoreStats(unittest.TestCase):
    def test_collect_stats(self) -> None:
        stats = store_stats.collect_stats({"wc_users": 120, "wc_logs": 2}, KEYS)
        self.assertEqual(stats["users"], {"key": "wc_users", "size": 120, "has_data": True})
        self.assertEqual(stats["logs"]["size"], 2)
        self.assertFalse(stats["session"]["has_data"])
        self.assertEqual(len(stats), 8)


if __name__ == "__main__":
    unittest.main()
