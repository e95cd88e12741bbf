"""In-process response cache for task reads.

Learn: A plain dict behind one lock. Reads populate it, writes
invalidate it; there is no TTL and no size bound, so absence is the
only miss signal.

invalidate() also bumps one cache-wide generation counter. A reader
grabs the generation before it queries the database and stores its
result with set_if_current(); if any write invalidated anything in the
meantime the result is dropped instead of cached. That costs a miss
under concurrent writes and keeps the bookkeeping to a single int,
however many users and task ids pass through.

Keys are partitioned by owner email so one user's cached list can
never be served to another user.
"""

import copy
import threading
from typing import Any, Optional


def task_list_key(email: str) -> str:
    return f"tasks:{email}"


def task_key(email: str, task_id: int) -> str:
    return f"task:{email}:{task_id}"


class ResponseCache:
    """Keyed store with explicit invalidation."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, Any] = {}
        self._generation = 0

    def get(self, key: str) -> Optional[Any]:
        """Return a copy of the cached value, or None on a miss."""
        with self._lock:
            if key not in self._entries:
                return None
            return copy.deepcopy(self._entries[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = copy.deepcopy(value)

    def generation(self) -> int:
        """Snapshot to pass to set_if_current() when the read finishes."""
        with self._lock:
            return self._generation

    def set_if_current(self, key: str, value: Any, generation: int) -> bool:
        """Store value only if nothing was invalidated since `generation`.

        Returns True when the value was cached.
        """
        with self._lock:
            if self._generation != generation:
                return False
            self._entries[key] = copy.deepcopy(value)
            return True

    def invalidate(self, *keys: str) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
            self._generation += 1

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generation += 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Process-wide instance shared by every request
response_cache = ResponseCache()


def get_cache() -> ResponseCache:
    """FastAPI dependency — the shared response cache."""
    return response_cache
