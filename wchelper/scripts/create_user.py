"""
Create a local user (fallback credential store). Run from project root:
  python -m wchelper.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m wchelper.scripts.create_user staff@demo.com your-password user
"""
import argparse
import sys
import uuid
from datetime import UTC, datetime

from wchelper.core.config import get_settings
from wchelper.core.database import slot_store
from wchelper.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, hash_password
from wchelper.core.store import StorageFailureError, StorageKeys
from wchelper.schemas.users import UserRecord
from wchelper.services.credentials import CredentialStore, DuplicateUsernameError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a WC Helper local user (no registration UI).")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password (1-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--created-by", default="system", help="Audit actor recorded on the user")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not args.password or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be 1-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    keys = StorageKeys.with_prefix(get_settings().STORAGE_KEY_PREFIX)
    credentials = CredentialStore(slot_store, keys.users)
    now = datetime.now(UTC)
    user = UserRecord(
        id=f"user-{uuid.uuid4().hex[:12]}",
        username=username,
        password_hash=hash_password(args.password),
        role=args.role,
        is_active=True,
        created_by=args.created_by,
        created_at=now,
        updated_by=args.created_by,
        updated_at=now,
    )
    try:
        slot_store.create_schema()
        credentials.add(user)
    except DuplicateUsernameError as e:
        print(e.message, file=sys.stderr)
        return 1
    except StorageFailureError as e:
        print(f"Local store error: {e.message}", file=sys.stderr)
        return 1
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
