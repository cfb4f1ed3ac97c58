"""Request orchestration for word generation.

A request moves through::

    Received -> Normalizing -> CacheLookup -> CacheHit -> Done
                                           -> Generating -> Validating -> Scoring -> CachePut -> Done

and ends in ``Failed`` when a ``WordGenError`` is raised on the way. The
generation half of the pipeline runs inside the result cache's single-flight
computation, so concurrent identical requests share one pass through it.
"""

from __future__ import annotations

import enum
import logging
import time
import uuid
from typing import Any, Mapping

from wordgen.cache.result_cache import CacheLookup, ResultCache, fingerprint
from wordgen.cache.stores import MemoryStore, PostgresStore
from wordgen.common.config import Settings, settings as default_settings
from wordgen.dictionary.sources import DictionarySource, HttpDictionary, PostgresDictionary, WordListDictionary
from wordgen.dictionary.validator import DictionaryValidator
from wordgen.engine.generator import CombinationGenerator, summarize
from wordgen.engine.normalizer import InputNormalizer
from wordgen.engine.scorer import ComplexityScorer
from wordgen.errors import InvalidInput, WordGenError
from wordgen.models import (
    CacheInfo,
    ErrorInfo,
    GenerationResult,
    PerformanceData,
    PerformanceMetrics,
    ResourceUtilization,
    ValidationResult,
    WordGenerationResponse,
    WordInput,
    WordRequest,
)
from wordgen.service.metrics import LoggingMetrics, MetricsSink, NullMetrics

logger = logging.getLogger(__name__)


class RequestState(str, enum.Enum):
    RECEIVED = "received"
    NORMALIZING = "normalizing"
    CACHE_LOOKUP = "cache_lookup"
    CACHE_HIT = "cache_hit"
    GENERATING = "generating"
    VALIDATING = "validating"
    SCORING = "scoring"
    CACHE_PUT = "cache_put"
    DONE = "done"
    FAILED = "failed"


def resource_utilization(result: GenerationResult) -> ResourceUtilization:
    cpu = result.performance_metrics.cpu_time_ms / max(result.processing_time_ms, 1)
    return ResourceUtilization(
        memory=result.performance_metrics.memory_usage_mb,
        cpu=round(min(cpu, 1.0), 3),
    )


class GenerationCoordinator:
    def __init__(
        self,
        *,
        normalizer: InputNormalizer,
        generator: CombinationGenerator,
        validator: DictionaryValidator,
        cache: ResultCache,
        request_timeout_s: float = 5.0,
        log: logging.Logger | None = None,
        metrics: MetricsSink | None = None,
    ) -> None:
        self.normalizer = normalizer
        self.generator = generator
        self.validator = validator
        self.cache = cache
        self.request_timeout_s = request_timeout_s
        self.log = log or logger
        self.metrics = metrics or NullMetrics()

    def close(self) -> None:
        self.cache.close()
        self.validator.close()

    def _transition(self, request_id: str, state: RequestState) -> None:
        self.log.debug("request=%s state=%s", request_id, state.value)
        self.metrics.increment("wordgen.request.state", tags={"state": state.value})

    def generate(self, raw: WordRequest | WordInput | Mapping[str, Any] | str) -> WordGenerationResponse:
        request_id = uuid.uuid4().hex[:12]
        started = time.perf_counter()
        deadline = time.monotonic() + self.request_timeout_s
        self._transition(request_id, RequestState.RECEIVED)

        try:
            self._transition(request_id, RequestState.NORMALIZING)
            cpu_started = time.thread_time()
            word_input = self.normalizer.normalize(raw)
            normalize_cpu_ms = (time.thread_time() - cpu_started) * 1000

            self._transition(request_id, RequestState.CACHE_LOOKUP)
            fp = fingerprint(word_input, self.generator.mode)
            lookup = self.cache.get_or_compute(
                fp,
                lambda: self._compute(request_id, word_input, started, normalize_cpu_ms),
                timeout_s=max(deadline - time.monotonic(), 0.0),
            )
        except WordGenError as exc:
            self._transition(request_id, RequestState.FAILED)
            self.metrics.increment("wordgen.request.failed", tags={"code": exc.code})
            self.log.info("request failed request=%s code=%s message=%s", request_id, exc.code, exc.message)
            return WordGenerationResponse(success=False, error=ErrorInfo(code=exc.code, message=exc.message))

        if lookup.hit:
            self._transition(request_id, RequestState.CACHE_HIT)
        self._transition(request_id, RequestState.DONE)
        return self._respond(request_id, lookup)

    def _respond(self, request_id: str, lookup: CacheLookup) -> WordGenerationResponse:
        result = lookup.result
        self.metrics.increment("wordgen.cache.hit" if lookup.hit else "wordgen.cache.miss")
        self.metrics.observe("wordgen.processing_time_ms", result.processing_time_ms)
        self.log.info(
            "request complete request=%s combinations=%s cache_hit=%s source=%s degraded=%s",
            request_id,
            len(result.combinations),
            lookup.hit,
            lookup.source,
            result.warning is not None,
        )
        return WordGenerationResponse(
            success=True,
            data=result,
            error=result.warning,
            cache_info=CacheInfo(hit=lookup.hit, source=lookup.source),
            performance_data=PerformanceData(resource_utilization=resource_utilization(result)),
        )

    def _compute(
        self, request_id: str, word_input: WordInput, started: float, normalize_cpu_ms: float = 0.0
    ) -> GenerationResult:
        """Generate, validate and score; timings run from ``started``, when the request arrived."""
        cpu_started = time.thread_time()

        self._transition(request_id, RequestState.GENERATING)
        generated = self.generator.generate(word_input)

        self._transition(request_id, RequestState.VALIDATING)
        batch = self.validator.validate_batch(
            [c.word for c in generated.combinations],
            word_input.language,
            complexities={c.word: c.complexity for c in generated.combinations},
        )
        if batch.degraded:
            self.metrics.increment("wordgen.dictionary.degraded")

        self._transition(request_id, RequestState.SCORING)
        verdicts = {r.word: r for r in batch.results}
        combinations = tuple(
            c.model_copy(update={"is_valid": verdicts[c.word].is_valid, "definition": verdicts[c.word].definition})
            if c.word in verdicts
            else c
            for c in generated.combinations
        )
        elapsed_ms = (time.perf_counter() - started) * 1000
        cpu_ms = normalize_cpu_ms + (time.thread_time() - cpu_started) * 1000

        self._transition(request_id, RequestState.CACHE_PUT)
        return generated.model_copy(
            update={
                "combinations": combinations,
                "statistics": summarize(combinations),
                "performance_metrics": PerformanceMetrics(
                    cpu_time_ms=round(cpu_ms, 3),
                    memory_usage_mb=generated.performance_metrics.memory_usage_mb,
                ),
                "processing_time_ms": int(elapsed_ms),
                "warning": batch.warning,
            }
        )

    def validate_word(self, word: str, language: str = "en") -> tuple[ValidationResult, ErrorInfo | None]:
        cleaned = self.normalizer.clean(word)
        if not cleaned:
            raise InvalidInput("word must contain at least one letter")
        if language.lower() not in self.normalizer.supported_languages:
            raise InvalidInput(f"unsupported language: {language!r}")
        batch = self.validator.validate_batch([cleaned], language.lower())
        return batch.results[0], batch.warning

    def health(self) -> dict[str, Any]:
        return {
            "status": "ok",
            "dictionary_circuit": self.validator.breaker.state.value,
            "inflight": self.cache.inflight_count(),
            "generation_mode": self.generator.mode,
        }


def build_dictionary(settings: Settings) -> DictionarySource:
    backend = settings.dictionary_backend.lower()
    if backend == "postgres":
        return PostgresDictionary()
    if backend == "http":
        return HttpDictionary(
            settings.dictionary_url,
            app_id=settings.dictionary_app_id,
            app_key=settings.dictionary_app_key,
            timeout_s=settings.dictionary_timeout_s,
        )
    if backend == "wordlist":
        if settings.dictionary_wordlist_path:
            return WordListDictionary.from_file(settings.dictionary_wordlist_path)
        return WordListDictionary()
    raise ValueError(f"unknown dictionary backend: {settings.dictionary_backend!r}")


def build_coordinator(
    settings: Settings | None = None,
    *,
    source: DictionarySource | None = None,
    metrics: MetricsSink | None = None,
) -> GenerationCoordinator:
    settings = settings or default_settings
    scorer = ComplexityScorer(settings.max_word_length)

    cache_backend = settings.cache_backend.lower()
    if cache_backend == "postgres":
        store = PostgresStore()
    elif cache_backend == "memory":
        store = MemoryStore()
    else:
        raise ValueError(f"unknown cache backend: {settings.cache_backend!r}")

    logger.info(
        "building coordinator mode=%s dictionary=%s cache=%s",
        settings.generation_mode,
        settings.dictionary_backend,
        cache_backend,
    )
    return GenerationCoordinator(
        normalizer=InputNormalizer.from_settings(settings),
        generator=CombinationGenerator.from_settings(settings, scorer),
        validator=DictionaryValidator.from_settings(settings, source or build_dictionary(settings), scorer),
        cache=ResultCache(store, ttl_s=settings.cache_ttl_s, max_workers=settings.worker_threads),
        request_timeout_s=settings.request_timeout_s,
        metrics=metrics or LoggingMetrics(),
    )
