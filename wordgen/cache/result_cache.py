from __future__ import annotations

import hashlib
import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from wordgen.cache.stores import KeyValueStore
from wordgen.errors import GenerationTimeout
from wordgen.models import CacheEntry, GenerationResult, WordInput

logger = logging.getLogger(__name__)

STORE = "store"
INFLIGHT = "inflight"
COMPUTED = "computed"


def fingerprint(word_input: WordInput, mode: str = "permutation") -> str:
    """Order-independent hash of the normalized request."""
    key_data = {
        "characters": "".join(sorted(word_input.characters.upper())),
        "language": word_input.language.lower(),
        "min_length": word_input.min_length,
        "max_length": word_input.max_length,
        "filters": word_input.filters.model_dump() if word_input.filters else None,
        "mode": mode,
    }
    return hashlib.sha256(json.dumps(key_data, sort_keys=True).encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheLookup:
    result: GenerationResult
    hit: bool
    source: str


class ResultCache:
    """Key-value store plus TTL plus a single-flight table.

    The lock only guards admission to ``_inflight``; computations run on the
    executor so a caller that stops waiting leaves the computation to finish
    and populate the store for later callers.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        ttl_s: float = 60.0,
        max_workers: int = 4,
        key_prefix: str = "words:",
        cacheable: Callable[[GenerationResult], bool] | None = None,
    ) -> None:
        self.store = store
        self.ttl_s = ttl_s
        self.key_prefix = key_prefix
        self.cacheable = cacheable or (lambda result: result.warning is None)
        self._lock = threading.Lock()
        self._inflight: dict[str, Future[GenerationResult]] = {}
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="generation")

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    def inflight_count(self) -> int:
        with self._lock:
            return len(self._inflight)

    def _key(self, fp: str) -> str:
        return f"{self.key_prefix}{fp}"

    def load(self, fp: str) -> GenerationResult | None:
        try:
            payload = self.store.get(self._key(fp))
        except Exception:
            logger.exception("cache read failed fingerprint=%s", fp)
            return None
        if payload is None:
            return None

        try:
            entry = CacheEntry.model_validate_json(payload)
        except ValueError:
            logger.warning("discarding unreadable cache entry fingerprint=%s", fp)
            self.discard(fp)
            return None

        age_s = (datetime.now(timezone.utc) - entry.created_at).total_seconds()
        if age_s >= entry.ttl_s:
            self.discard(fp)
            return None
        return entry.result

    def discard(self, fp: str) -> None:
        try:
            self.store.delete(self._key(fp))
        except Exception:
            logger.exception("cache delete failed fingerprint=%s", fp)

    def save(self, fp: str, result: GenerationResult) -> None:
        entry = CacheEntry(
            fingerprint=fp,
            result=result,
            created_at=datetime.now(timezone.utc),
            ttl_s=self.ttl_s,
        )
        try:
            self.store.set(self._key(fp), entry.model_dump_json(by_alias=True), self.ttl_s)
        except Exception:
            logger.exception("cache write failed fingerprint=%s", fp)

    def _compute(self, fp: str, compute_fn: Callable[[], GenerationResult]) -> GenerationResult:
        try:
            result = compute_fn()
            if self.cacheable(result):
                self.save(fp, result)
            else:
                logger.info("result not cached fingerprint=%s", fp)
            return result
        finally:
            with self._lock:
                self._inflight.pop(fp, None)

    def get_or_compute(
        self,
        fp: str,
        compute_fn: Callable[[], GenerationResult],
        *,
        timeout_s: float | None = None,
    ) -> CacheLookup:
        cached = self.load(fp)
        if cached is not None:
            logger.debug("cache hit fingerprint=%s", fp)
            return CacheLookup(result=cached, hit=True, source=STORE)

        with self._lock:
            future = self._inflight.get(fp)
            source = INFLIGHT
            if future is None:
                # A computation may have finished and saved between the first load and the lock.
                cached = self.load(fp)
                if cached is not None:
                    logger.debug("cache hit after admission fingerprint=%s", fp)
                    return CacheLookup(result=cached, hit=True, source=STORE)
                future = self._executor.submit(self._compute, fp, compute_fn)
                self._inflight[fp] = future
                source = COMPUTED

        logger.debug("cache miss fingerprint=%s source=%s", fp, source)
        try:
            result = future.result(timeout=timeout_s)
        except FutureTimeout as exc:
            raise GenerationTimeout(f"generation did not finish within {timeout_s}s") from exc
        return CacheLookup(result=result, hit=False, source=source)
