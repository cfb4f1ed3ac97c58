from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Protocol

from wordgen.common.db import get_conn

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_s: float) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store with per-key TTL and LRU eviction beyond ``max_entries``."""

    def __init__(self, *, max_entries: int = 256, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, tuple[float, str]] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> str | None:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: str, value: str, ttl_s: float) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + ttl_s, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("evicted cache key=%s", evicted)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)


class PostgresStore:
    GET_SQL = """
SELECT payload::text
FROM generation_cache
WHERE fingerprint = %s
  AND expires_at > now()
"""

    SET_SQL = """
INSERT INTO generation_cache(fingerprint, payload, created_at, expires_at)
VALUES (%s, %s::jsonb, now(), now() + make_interval(secs => %s))
ON CONFLICT (fingerprint) DO UPDATE
SET payload = EXCLUDED.payload,
    created_at = EXCLUDED.created_at,
    expires_at = EXCLUDED.expires_at
"""

    DELETE_SQL = "DELETE FROM generation_cache WHERE fingerprint = %s"

    def get(self, key: str) -> str | None:
        with get_conn() as conn:
            row = conn.execute(self.GET_SQL, (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str, ttl_s: float) -> None:
        with get_conn() as conn:
            conn.execute(self.SET_SQL, (key, value, float(ttl_s)))

    def delete(self, key: str) -> None:
        with get_conn() as conn:
            conn.execute(self.DELETE_SQL, (key,))
