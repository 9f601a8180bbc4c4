"""
Show which local slots hold data and how large they are. Run from project root:
  python -m wchelper.scripts.store_stats
"""
import sys

from wchelper.core.config import get_settings
from wchelper.core.database import slot_store
from wchelper.core.store import StorageFailureError, StorageKeys


def collect_stats(sizes: dict[str, int], keys: StorageKeys) -> dict[str, dict[str, int | bool | str]]:
    """Per logical slot name: key, serialized size and whether it holds data."""
    stats: dict[str, dict[str, int | bool | str]] = {}
    for name, key in keys.all().items():
        size = sizes.get(key, 0)
        stats[name] = {"key": key, "size": size, "has_data": key in sizes}
    return stats


def main() -> int:
    keys = StorageKeys.with_prefix(get_settings().STORAGE_KEY_PREFIX)
    try:
        sizes = slot_store.raw_sizes()
    except StorageFailureError as e:
        print(f"Local store error: {e.message}", file=sys.stderr)
        return 1
    stats = collect_stats(sizes, keys)
    total_keys = sum(1 for s in stats.values() if s["has_data"])
    total_size = sum(int(s["size"]) for s in stats.values())
    for name, entry in stats.items():
        marker = "yes" if entry["has_data"] else "no"
        print(f"{name:<28} {entry['key']:<36} {marker:<4} {entry['size']}")
    print(f"total: {total_keys} slots, {total_size} bytes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
