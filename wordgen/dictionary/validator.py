from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from wordgen.common.config import Settings
from wordgen.dictionary.breaker import CircuitBreaker
from wordgen.dictionary.sources import DictionarySource
from wordgen.engine.scorer import ComplexityScorer, complexity_scorer
from wordgen.errors import CircuitOpenError, DictionaryUnavailable
from wordgen.models import ErrorInfo, ValidationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchValidation:
    results: list[ValidationResult] = field(default_factory=list)
    warning: ErrorInfo | None = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None


def classification_accuracy(results: Sequence[ValidationResult], truth: Mapping[str, bool]) -> float:
    """Share of words in ``truth`` whose validity was classified correctly."""
    judged = {r.word.upper(): r.is_valid for r in results}
    labelled = [(word.upper(), expected) for word, expected in truth.items()]
    if not labelled:
        return 1.0
    correct = sum(1 for word, expected in labelled if judged.get(word) == expected)
    return correct / len(labelled)


class DictionaryValidator:
    """Batch validation against a dictionary source with degrade-on-failure.

    One attempt per batch. If the source raises, exceeds ``timeout_s`` or the
    breaker refuses the call, every word is returned with ``is_valid=False``
    and the batch carries a DICTIONARY_UNAVAILABLE warning. A failure in any
    chunk degrades the whole batch. After a timeout no further chunks are
    requested.
    """

    def __init__(
        self,
        source: DictionarySource,
        *,
        scorer: ComplexityScorer | None = None,
        breaker: CircuitBreaker | None = None,
        batch_size: int = 100,
        timeout_s: float = 2.0,
        max_workers: int = 4,
    ) -> None:
        self.source = source
        self.scorer = scorer or complexity_scorer
        self.breaker = breaker or CircuitBreaker()
        self.batch_size = max(1, batch_size)
        self.timeout_s = timeout_s
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="dictionary")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        source: DictionarySource,
        scorer: ComplexityScorer | None = None,
    ) -> DictionaryValidator:
        return cls(
            source,
            scorer=scorer,
            breaker=CircuitBreaker(
                max_failures=settings.breaker_max_failures,
                cooldown_s=settings.breaker_cooldown_s,
            ),
            batch_size=settings.validation_batch_size,
            timeout_s=settings.validation_timeout_s,
            max_workers=settings.worker_threads,
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _lookup_all(self, words: list[str], language: str, cancelled: threading.Event) -> dict[str, str | None]:
        found: dict[str, str | None] = {}
        for start in range(0, len(words), self.batch_size):
            if cancelled.is_set():
                logger.debug("dictionary lookup abandoned looked_up=%s remaining=%s", start, len(words) - start)
                break
            found.update(self.source.lookup(words[start : start + self.batch_size], language, cancelled=cancelled))
        return found

    def validate_batch(
        self,
        words: Sequence[str],
        language: str,
        *,
        complexities: Mapping[str, int] | None = None,
    ) -> BatchValidation:
        words = list(words)
        if not words:
            return BatchValidation()

        if not self.breaker.allow_request():
            logger.warning("dictionary circuit open; skipping lookup words=%s", len(words))
            return self._degraded(words, complexities, CircuitOpenError("dictionary circuit is open"))

        cancelled = threading.Event()
        future = self._executor.submit(self._lookup_all, words, language, cancelled)
        try:
            found = future.result(timeout=self.timeout_s)
        except FutureTimeout:
            cancelled.set()
            future.cancel()
            self.breaker.record_failure()
            logger.warning("dictionary lookup timed out words=%s timeout_s=%s", len(words), self.timeout_s)
            return self._degraded(
                words, complexities, DictionaryUnavailable(f"dictionary lookup timed out after {self.timeout_s}s")
            )
        except Exception as exc:
            self.breaker.record_failure()
            logger.warning("dictionary lookup failed words=%s error=%s", len(words), exc)
            if not isinstance(exc, DictionaryUnavailable):
                exc = DictionaryUnavailable(f"dictionary lookup failed: {exc}")
            return self._degraded(words, complexities, exc)

        self.breaker.record_success()
        results = [
            ValidationResult(
                word=word,
                is_valid=word.upper() in found,
                complexity=self._complexity(word, complexities),
                definition=found.get(word.upper()),
            )
            for word in words
        ]
        logger.info("validated words=%s valid=%s", len(words), sum(1 for r in results if r.is_valid))
        return BatchValidation(results=results)

    def _complexity(self, word: str, complexities: Mapping[str, int] | None) -> int:
        if complexities is not None and word in complexities:
            return complexities[word]
        return self.scorer.score(word)

    def _degraded(
        self,
        words: list[str],
        complexities: Mapping[str, int] | None,
        error: DictionaryUnavailable,
    ) -> BatchValidation:
        return BatchValidation(
            results=[
                ValidationResult(word=word, is_valid=False, complexity=self._complexity(word, complexities))
                for word in words
            ],
            warning=ErrorInfo(code=error.code, message=error.message),
        )
