"""
Save-point side-channel for wizard state.

A save-point is an opaque JSON-able snapshot of a wizard session, stored under
a fixed storage key (optionally namespaced per session) and stamped with the
time it was written. Snapshots older than SAVEPOINT_EXPIRY_DAYS are treated as
absent and removed on load.
"""
import copy
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from app.config import SAVEPOINT_EXPIRY_DAYS, SAVEPOINT_STORAGE_KEY

logger = logging.getLogger("configurator-savepoints")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _saved_after(entry: Any, cutoff: datetime) -> bool:
    try:
        return datetime.fromisoformat(entry["saved_at"]) >= cutoff
    except (KeyError, TypeError, ValueError):
        return False


class InMemorySavePointBackend:
    """Process-local key/value backend shared by SavePointStore instances."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            entry = self._data.get(key)
            return copy.deepcopy(entry) if entry is not None else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def purge_expired(self, now: datetime, expiry: timedelta) -> int:
        """Drop every entry saved before ``now - expiry`` or with an unreadable stamp."""
        cutoff = now - expiry
        with self._lock:
            stale = [key for key, entry in self._data.items() if not _saved_after(entry, cutoff)]
            for key in stale:
                del self._data[key]
        if stale:
            logger.info("Purged %d expired save-point(s)", len(stale))
        return len(stale)


class SavePointStore:
    """save / load / clear for one storage key, with expiry on load."""

    def __init__(
        self,
        backend: InMemorySavePointBackend,
        namespace: Optional[str] = None,
        clock: Clock = utc_now,
        expiry: timedelta = timedelta(days=SAVEPOINT_EXPIRY_DAYS),
    ) -> None:
        self._backend = backend
        self.key = f"{SAVEPOINT_STORAGE_KEY}:{namespace}" if namespace else SAVEPOINT_STORAGE_KEY
        self._clock = clock
        self._expiry = expiry

    def save(self, state: Dict[str, Any]) -> datetime:
        """Write the snapshot and sweep expired snapshots of other sessions."""
        saved_at = self._clock()
        self._backend.purge_expired(saved_at, self._expiry)
        self._backend.set(self.key, {"saved_at": saved_at.isoformat(), "state": state})
        return saved_at

    def load(self) -> Optional[Dict[str, Any]]:
        entry = self._backend.get(self.key)
        if entry is None:
            return None

        try:
            saved_at = datetime.fromisoformat(entry["saved_at"])
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding save-point %s with unreadable timestamp", self.key)
            self.clear()
            return None

        if self._clock() - saved_at > self._expiry:
            logger.info("Save-point %s expired (saved %s), discarding", self.key, saved_at.isoformat())
            self.clear()
            return None

        return entry.get("state")

    def clear(self) -> None:
        self._backend.delete(self.key)
