"""Caller-owned TTL cache for computed profit reports."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from services.schemas import ProfitReport


class ReportCache(ABC):
    @abstractmethod
    def get(self, key: str, ttl: float) -> ProfitReport | None:
        """Return the cached report if it was stored less than *ttl* seconds ago."""

    @abstractmethod
    def put(self, key: str, report: ProfitReport) -> None: ...

    @abstractmethod
    def invalidate(self, prefix: str = "") -> None: ...


def cache_key(shop: str, date: str) -> str:
    return f"{shop}:{date}"


class InMemoryReportCache(ReportCache):
    """Thread-safe dict cache; entries expire by the TTL each reader passes in."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float, ProfitReport]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, ttl: float) -> ProfitReport | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, report = entry
            if self._clock() - stored_at >= ttl:
                del self._entries[key]
                return None
            return report

    def put(self, key: str, report: ProfitReport) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), report)

    def invalidate(self, prefix: str = "") -> None:
        with self._lock:
            for key in [k for k in self._entries if k.startswith(prefix)]:
                del self._entries[key]
