"""
CLI entrypoint for local state initialization. Run at deploy time or by hand:

  python -m wchelper.bootstrap

Safe to run repeatedly: existing slots and users are left untouched.
"""

import logging
import sys

from wchelper.core.config import get_settings
from wchelper.core.database import slot_store
from wchelper.core.store import StorageFailureError
from wchelper.services.bootstrap import Bootstrapper

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Create the store schema and any missing default slots."""
    try:
        slot_store.create_schema()
        report = Bootstrapper.from_settings(slot_store, get_settings()).ensure_initialized()
    except StorageFailureError as e:
        logger.exception("Bootstrap failed: %s", e.message)
        return 1
    logger.info(
        "Bootstrap completed: created_slots=%s admin_seeded=%s",
        len(report.created_slots),
        report.admin_seeded,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
