"""In-memory report cache with TTL, keyed by normalized repository reference."""

from __future__ import annotations

import time
from collections.abc import Callable

from doc_quality.models import QualityReport


class ReportCache:
    def __init__(
        self,
        ttl_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, QualityReport]] = {}

    def get(self, key: str) -> QualityReport | None:
        if key in self._entries:
            ts, report = self._entries[key]
            if self._clock() - ts < self._ttl:
                return report
            del self._entries[key]
        return None

    def set(self, key: str, report: QualityReport) -> None:
        if self._ttl <= 0:
            return
        self._entries[key] = (self._clock(), report)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
