"""Unit tests for wchelper.services.credentials: local credential lookup and persistence."""

import unittest

from wchelper.core.security import hash_password
from wchelper.core.store import MemorySlotStore, StorageFailureError
from wchelper.schemas.users import UserRecord
from wchelper.services.credentials import CredentialStore, DuplicateUsernameError

USERS_KEY = "wc_users"


class _RawStore(MemorySlotStore):
    """In-memory store that can hold undecodable slot content."""

    def put_raw(self, key: str, raw: str) -> None:
        self._slots[key] = raw


def _user(id: str, username: str, password: str = "Passw0rd!", **kwargs: object) -> UserRecord:
    """Build a UserRecord for tests."""
    return UserRecord(
        id=id,
        username=username,
        password_hash=hash_password(password),
        **kwargs,
    )


class TestListAndReplace(unittest.TestCase):
    def test_empty_store_lists_nothing(self) -> None:
        self.assertEqual(CredentialStore(MemorySlotStore(), USERS_KEY).list(), [])

    def test_replace_all_preserves_order(self) -> None:
        credentials = CredentialStore(MemorySlotStore(), USERS_KEY)
        credentials.replace_all([_user("3", "c@x.com"), _user("1", "a@x.com"), _user("2", "b@x.com")])
        self.assertEqual([u.id for u in credentials.list()], ["3", "1", "2"])

    def test_roles_are_opaque_strings(self) -> None:
        credentials = CredentialStore(MemorySlotStore(), USERS_KEY)
        credentials.replace_all([_user("1", "ops@x.com", role="manager")])
        self.assertEqual(credentials.list()[0].role, "manager")

    def test_stored_shape_uses_password_key(self) -> None:
        store = MemorySlotStore()
        CredentialStore(store, USERS_KEY).replace_all([_user("admin-001", "admin@demo.com")])
        raw = store.get(USERS_KEY)
        self.assertEqual(raw[0]["password"], hash_password("Passw0rd!"))
        self.assertNotIn("password_hash", raw[0])
        self.assertTrue(raw[0]["is_active"])

    def test_reads_legacy_records(self) -> None:
        store = MemorySlotStore(
            {
                USERS_KEY: [
                    {
                        "id": 7,
                        "username": "admin@demo.com",
                        "password": hash_password("Passw0rd!").upper(),
                        "role": "admin",
                        "is_active": True,
                        "created_by": "system",
                        "created_at": "2025-01-01T00:00:00.000Z",
                    }
                ]
            }
        )
        users = CredentialStore(store, USERS_KEY).list()
        self.assertEqual(users[0].id, "7")
        self.assertEqual(users[0].password_hash, hash_password("Passw0rd!"))
        self.assertIsNotNone(users[0].created_at)

    def test_malformed_entries_skipped(self) -> None:
        store = MemorySlotStore(
            {
                USERS_KEY: [
                    {"id": "x", "username": "no-hash@x.com"},
                    "not a record",
                    _user("1", "ok@x.com").to_storage(),
                ]
            }
        )
        self.assertEqual([u.id for u in CredentialStore(store, USERS_KEY).list()], ["1"])

    def test_non_list_slot_is_storage_failure(self) -> None:
        store = MemorySlotStore({USERS_KEY: {"admin": "oops"}})
        with self.assertRaises(StorageFailureError):
            CredentialStore(store, USERS_KEY).list()

    def test_corrupt_slot_is_storage_failure(self) -> None:
        store = _RawStore()
        store.put_raw(USERS_KEY, "[{")
        with self.assertRaises(StorageFailureError):
            CredentialStore(store, USERS_KEY).find_active_by_username("admin@demo.com")


class TestFindActiveByUsername(unittest.TestCase):
    def setUp(self) -> None:
        self.credentials = CredentialStore(MemorySlotStore(), USERS_KEY)

    def test_case_insensitive(self) -> None:
        self.credentials.replace_all(
            [_user("1", "Admin@Demo.com"), _user("2", "staff@demo.com"), _user("3", "ÄRGER@demo.com")]
        )
        for variant in ("admin@demo.com", "ADMIN@DEMO.COM", "aDmIn@dEmO.cOm"):
            self.assertEqual(self.credentials.find_active_by_username(variant).id, "1")
        self.assertEqual(self.credentials.find_active_by_username("STAFF@demo.com").id, "2")
        self.assertEqual(self.credentials.find_active_by_username("ärger@DEMO.com").id, "3")

    def test_unknown_user(self) -> None:
        self.credentials.replace_all([_user("1", "admin@demo.com")])
        self.assertIsNone(self.credentials.find_active_by_username("nobody@demo.com"))

    def test_inactive_only_match_is_not_found(self) -> None:
        self.credentials.replace_all([_user("1", "demo@example.com", is_active=False)])
        self.assertIsNone(self.credentials.find_active_by_username("demo@example.com"))

    def test_duplicate_usernames_first_active_wins(self) -> None:
        self.credentials.replace_all(
            [
                _user("old", "dup@demo.com", password="one", is_active=False),
                _user("first", "DUP@demo.com", password="two"),
                _user("second", "dup@demo.com", password="three"),
            ]
        )
        self.assertEqual(self.credentials.find_active_by_username("dup@demo.com").id, "first")


class TestAdd(unittest.TestCase):
    def test_appends(self) -> None:
        credentials = CredentialStore(MemorySlotStore(), USERS_KEY)
        credentials.add(_user("1", "a@x.com"))
        credentials.add(_user("2", "b@x.com"))
        self.assertEqual([u.id for u in credentials.list()], ["1", "2"])

    def test_rejects_duplicate_any_case(self) -> None:
        credentials = CredentialStore(MemorySlotStore(), USERS_KEY)
        credentials.add(_user("1", "a@x.com", is_active=False))
        with self.assertRaises(DuplicateUsernameError):
            credentials.add(_user("2", "A@X.COM"))
        self.assertEqual(len(credentials.list()), 1)


if __name__ == "__main__":
    unittest.main()
