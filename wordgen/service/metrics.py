from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Mapping, Protocol

logger = logging.getLogger(__name__)


class MetricsSink(Protocol):
    def increment(self, name: str, value: int = 1, tags: Mapping[str, str] | None = None) -> None: ...

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None: ...


class NullMetrics:
    def increment(self, name: str, value: int = 1, tags: Mapping[str, str] | None = None) -> None:
        return None

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        return None


class LoggingMetrics:
    """Emit every metric as a DEBUG log line."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    @staticmethod
    def _fmt(tags: Mapping[str, str] | None) -> str:
        return " ".join(f"{k}={v}" for k, v in sorted((tags or {}).items()))

    def increment(self, name: str, value: int = 1, tags: Mapping[str, str] | None = None) -> None:
        self.log.debug("metric counter name=%s value=%s %s", name, value, self._fmt(tags))

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        self.log.debug("metric observation name=%s value=%.3f %s", name, value, self._fmt(tags))


class RecordingMetrics:
    """In-memory sink for tests and the health endpoint."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.counters: dict[str, int] = defaultdict(int)
        self.observations: dict[str, list[float]] = defaultdict(list)

    def increment(self, name: str, value: int = 1, tags: Mapping[str, str] | None = None) -> None:
        with self._lock:
            self.counters[name] += value

    def observe(self, name: str, value: float, tags: Mapping[str, str] | None = None) -> None:
        with self._lock:
            self.observations[name].append(value)
