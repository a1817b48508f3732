"""In-memory TTL cache used by the API client."""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

DEFAULT_TTL = 5 * 60
METRICS_TTL = 2 * 60


class TTLCache:
    """Key/value cache whose entries expire ``ttl`` seconds after they were set.

    The TTL is chosen by the reader, so the same entry can be fresh for one
    caller and stale for another. Expired entries are dropped when read.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.RLock()

    def get(self, key: str, ttl: float = DEFAULT_TTL) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            data, stored_at = entry
            if self._clock() - stored_at > ttl:
                del self._entries[key]
                return None
            return data

    def get_metrics(self, key: str) -> Optional[Any]:
        return self.get(key, METRICS_TTL)

    def set(self, key: str, data: Any) -> None:
        with self._lock:
            self._entries[key] = (data, self._clock())

    def invalidate(self, prefix: str) -> int:
        with self._lock:
            stale = [key for key in self._entries if key.startswith(prefix)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class cache_keys:
    """Cache key builders shared by readers and invalidators."""

    @staticmethod
    def containers() -> str:
        return 'containers'

    @staticmethod
    def container(name: str) -> str:
        return f'container:{name}'

    @staticmethod
    def instances(name: str) -> str:
        return f'instances:{name}'

    @staticmethod
    def config(name: str) -> str:
        return f'config:{name}'

    @staticmethod
    def metrics(name: str, range_: str) -> str:
        return f'metrics:{name}:{range_}'

    @staticmethod
    def dashboard_metrics(range_: str) -> str:
        return f'dashboard-metrics:{range_}'

    @staticmethod
    def logs(name: str) -> str:
        return f'logs:{name}'

    @staticmethod
    def snapshots(name: str = '') -> str:
        return f'snapshots:{name}'

    @staticmethod
    def topology() -> str:
        return 'topology'

    @staticmethod
    def jobs() -> str:
        return 'jobs'

    @staticmethod
    def webhooks() -> str:
        return 'webhooks'

    @staticmethod
    def schedules() -> str:
        return 'schedules'
