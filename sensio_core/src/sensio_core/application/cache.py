import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from sensio_core.domain.models import format_timestamp

log = logging.getLogger(__name__)

LATEST_NAMESPACE = "latest"
HISTORY_NAMESPACE = "history"


class TTLStore:
    """In-process key/value store; every entry expires ``ttl_seconds`` after it was written."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        self._purge(now)
        self._entries[key] = (now + self.ttl_seconds, value)

    def _purge(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in list(self._entries.items()) if now >= expires_at]
        for k in expired:
            self._entries.pop(k, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ReadingCache:
    """
    Two independent TTL namespaces: latest-reading results and history results.

    One instance is built at startup and handed to the query functions; it
    lives as long as the process. There is no locking and no manual
    invalidation. Concurrent misses on the same key both fetch and the last
    write wins.
    """

    def __init__(
        self,
        latest_ttl: float,
        history_ttl: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._latest = TTLStore(latest_ttl, clock)
        self._history = TTLStore(history_ttl, clock)

    def get_latest(self, key: str) -> Optional[Any]:
        return self._lookup(self._latest, key)

    def set_latest(self, key: str, value: Any) -> None:
        self._latest.set(key, value)

    def get_history(self, key: str) -> Optional[Any]:
        return self._lookup(self._history, key)

    def set_history(self, key: str, value: Any) -> None:
        self._history.set(key, value)

    def clear(self) -> None:
        self._latest.clear()
        self._history.clear()

    @staticmethod
    def _lookup(store: TTLStore, key: str) -> Optional[Any]:
        value = store.get(key)
        log.debug("Cache %s for %s", "hit" if value is not None else "miss", key)
        return value


def _serials(device_serials: Sequence[str]) -> str:
    return ",".join(sorted(set(device_serials)))


def latest_key(device_serials: Sequence[str]) -> str:
    return f"{LATEST_NAMESPACE}:{_serials(device_serials)}"


def history_key(
    device_serials: Sequence[str],
    start: datetime,
    end: datetime,
    resolution: str,
) -> str:
    return ":".join(
        [
            HISTORY_NAMESPACE,
            _serials(device_serials),
            format_timestamp(start),
            format_timestamp(end),
            resolution,
        ]
    )
