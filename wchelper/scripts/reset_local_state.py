"""
Reset local auth state when logins are stuck. Run from project root:
  python -m wchelper.scripts.reset_local_state [--all]

Clears the session, users and settings slots (with --all, every content slot
too) and re-runs bootstrap, which restores the default admin and settings.
"""
import argparse
import logging
import sys

from wchelper.core.config import get_settings
from wchelper.core.database import slot_store
from wchelper.core.store import SlotStore, StorageFailureError, StorageKeys
from wchelper.services.bootstrap import Bootstrapper, BootstrapReport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def reset_local_state(
    store: SlotStore,
    bootstrapper: Bootstrapper,
    keys: StorageKeys,
    everything: bool = False,
) -> BootstrapReport:
    """Remove auth slots (or all slots) and rebuild defaults."""
    if everything:
        targets = list(keys.all().values())
    else:
        targets = [keys.session, keys.users, keys.settings]
    for key in targets:
        store.remove(key)
    logger.info("Cleared local slots: %s", ", ".join(targets))
    return bootstrapper.ensure_initialized()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Reset WC Helper local auth state.")
    parser.add_argument("--all", action="store_true", help="Also clear homestays, FAQs, logs and memory")
    args = parser.parse_args(argv)

    settings = get_settings()
    keys = StorageKeys.with_prefix(settings.STORAGE_KEY_PREFIX)
    try:
        slot_store.create_schema()
        report = reset_local_state(
            slot_store, Bootstrapper.from_settings(slot_store, settings), keys, everything=args.all
        )
    except StorageFailureError as e:
        logger.exception("Reset failed: %s", e.message)
        return 1
    logger.info("Reset completed: admin_seeded=%s", report.admin_seeded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
