from __future__ import annotations

import itertools
import logging
import math
import re
import time
from collections import Counter
from typing import Iterable, Iterator, Sequence

from wordgen.common.config import Settings
from wordgen.engine.scorer import ComplexityScorer, complexity_scorer
from wordgen.errors import InvalidInput, MemoryLimitExceeded
from wordgen.models import (
    GenerationResult,
    PerformanceMetrics,
    Statistics,
    Truncation,
    WordCombination,
    WordInput,
)

logger = logging.getLogger(__name__)

PERMUTATION = "permutation"
SUBSEQUENCE = "subsequence"
GENERATION_MODES = (PERMUTATION, SUBSEQUENCE)

MAX_COMBINATIONS_REACHED = "MAX_COMBINATIONS_REACHED"
SCAN_LIMIT_REACHED = "SCAN_LIMIT_REACHED"

# Estimated bytes per dedupe-index entry and per retained combination, plus word length.
INDEX_ENTRY_BYTES = 64
COMBINATION_BYTES = 128
CHECK_INTERVAL = 1024
MIB = 1024 * 1024


class MemoryTracker:
    def __init__(self, limit_mb: float) -> None:
        self.limit_bytes = int(limit_mb * MIB)
        self.used_bytes = 0

    @property
    def used_mb(self) -> float:
        return self.used_bytes / MIB

    def charge(self, nbytes: int) -> None:
        self.used_bytes += nbytes

    def check(self) -> None:
        if self.used_bytes > self.limit_bytes:
            raise MemoryLimitExceeded(
                f"generation used ~{self.used_mb:.1f}MB, limit is {self.limit_bytes / MIB:.1f}MB"
            )


def distinct_permutations(counts: Iterable[int], length: int) -> int:
    """Number of distinct words of ``length`` drawn from a multiset of letter counts."""
    ways = [1] + [0] * length
    for multiplicity in counts:
        nxt = [0] * (length + 1)
        for used, count in enumerate(ways):
            if not count:
                continue
            for take in range(min(multiplicity, length - used) + 1):
                nxt[used + take] += count * math.comb(used + take, take)
        ways = nxt
    return ways[length]


def summarize(combinations: Sequence[WordCombination]) -> Statistics:
    if not combinations:
        return Statistics()
    valid = sum(1 for c in combinations if c.is_valid)
    return Statistics(
        valid_words=valid,
        invalid_words=len(combinations) - valid,
        average_complexity=round(sum(c.complexity for c in combinations) / len(combinations), 3),
        average_length=round(sum(len(c.word) for c in combinations) / len(combinations), 3),
    )


class CombinationGenerator:
    def __init__(
        self,
        *,
        scorer: ComplexityScorer | None = None,
        mode: str = PERMUTATION,
        max_combinations: int = 100_000,
        memory_limit_mb: float = 32.0,
        max_search_space: int = 10**13,
        alphabet: str = "A-Za-z",
    ) -> None:
        if mode not in GENERATION_MODES:
            raise ValueError(f"unknown generation mode: {mode!r}")
        self.scorer = scorer or complexity_scorer
        self.mode = mode
        self.max_combinations = max_combinations
        self.memory_limit_mb = memory_limit_mb
        self.max_search_space = max_search_space
        self._letters_re = re.compile(f"[{alphabet}]+")

    @classmethod
    def from_settings(cls, settings: Settings, scorer: ComplexityScorer | None = None) -> CombinationGenerator:
        return cls(
            scorer=scorer or ComplexityScorer(settings.max_word_length),
            mode=settings.generation_mode,
            max_combinations=settings.max_combinations,
            memory_limit_mb=settings.memory_limit_mb,
            max_search_space=settings.max_search_space,
            alphabet=settings.alphabet,
        )

    def validate(self, word_input: WordInput) -> None:
        characters = word_input.characters
        if not isinstance(characters, str) or not self._letters_re.fullmatch(characters):
            raise InvalidInput("characters must contain only letters")
        if not 1 <= word_input.min_length <= word_input.max_length <= len(characters):
            raise InvalidInput(
                f"length bounds must satisfy 1 <= minLength <= maxLength <= {len(characters)}"
            )

    def tier_size(self, characters: str, length: int) -> int:
        if self.mode == PERMUTATION:
            return distinct_permutations(Counter(characters).values(), length)
        return math.comb(len(characters), length)

    def tier_sizes(self, word_input: WordInput) -> dict[int, int]:
        return {
            length: self.tier_size(word_input.characters, length)
            for length in range(word_input.min_length, word_input.max_length + 1)
        }

    def projected_bytes(self, word_input: WordInput) -> int:
        """Worst-case tracker charge before the cap or the scan budget ends enumeration.

        Without filters every visited candidate is kept, so the whole request
        stops after ``max_combinations`` candidates. With filters each tier may
        scan up to ``max_combinations`` candidates while keeping few of them.
        """
        total = 0
        retained = 0
        for length, space in self.tier_sizes(word_input).items():
            room = self.max_combinations - retained
            if word_input.filters is None:
                scanned = kept = min(space, room)
            else:
                scanned = min(space, self.max_combinations)
                kept = min(scanned, room)
            retained += kept
            total += scanned * (INDEX_ENTRY_BYTES + length) + kept * (COMBINATION_BYTES + length)
            if word_input.filters is None and retained >= self.max_combinations:
                break
        return total

    def admit(self, word_input: WordInput) -> int:
        """Reject requests whose candidate space or projected footprint is over budget."""
        space = sum(self.tier_sizes(word_input).values())
        if space > self.max_search_space:
            logger.warning(
                "generation rejected characters=%s min=%s max=%s search_space=%.3g limit=%.3g",
                len(word_input.characters),
                word_input.min_length,
                word_input.max_length,
                space,
                self.max_search_space,
            )
            raise MemoryLimitExceeded(
                f"candidate space of ~{space:.3g} words exceeds {self.max_search_space:.3g}; "
                "use fewer letters or narrow the length bounds"
            )

        projected = self.projected_bytes(word_input)
        if projected > self.memory_limit_mb * MIB:
            logger.warning(
                "generation rejected characters=%s min=%s max=%s projected_mb=%.1f limit_mb=%.1f",
                len(word_input.characters),
                word_input.min_length,
                word_input.max_length,
                projected / MIB,
                self.memory_limit_mb,
            )
            raise MemoryLimitExceeded(
                f"projected ~{projected / MIB:.1f}MB exceeds limit of {self.memory_limit_mb:.1f}MB; narrow the length bounds"
            )
        return projected

    def candidates(self, characters: str, length: int) -> Iterator[str]:
        if self.mode == SUBSEQUENCE:
            for picked in itertools.combinations(characters, length):
                yield "".join(picked)
            return

        pool = Counter(characters)
        letters = sorted(pool)
        prefix: list[str] = []

        def _walk() -> Iterator[str]:
            if len(prefix) == length:
                yield "".join(prefix)
                return
            for letter in letters:
                if not pool[letter]:
                    continue
                pool[letter] -= 1
                prefix.append(letter)
                yield from _walk()
                prefix.pop()
                pool[letter] += 1

        yield from _walk()

    def generate(self, word_input: WordInput) -> GenerationResult:
        self.validate(word_input)

        started = time.perf_counter()
        cpu_started = time.thread_time()
        tracker = MemoryTracker(self.memory_limit_mb)
        self.admit(word_input)

        filters = word_input.filters
        combinations: list[WordCombination] = []
        seen: set[str] = set()
        visited = 0
        truncated_reason: str | None = None

        for length in range(word_input.min_length, word_input.max_length + 1):
            scanned = 0
            for word in self.candidates(word_input.characters, length):
                if word in seen:
                    continue
                if len(combinations) >= self.max_combinations:
                    truncated_reason = MAX_COMBINATIONS_REACHED
                    break
                if scanned >= self.max_combinations:
                    truncated_reason = SCAN_LIMIT_REACHED
                    break

                seen.add(word)
                scanned += 1
                visited += 1
                tracker.charge(INDEX_ENTRY_BYTES + length)

                complexity = self.scorer.score(word)
                if filters is None or filters.accepts(complexity):
                    combinations.append(WordCombination(word=word, complexity=complexity))
                    tracker.charge(COMBINATION_BYTES + length)

                if visited % CHECK_INTERVAL == 0:
                    tracker.check()

            if truncated_reason == MAX_COMBINATIONS_REACHED:
                break

        tracker.check()
        elapsed_ms = (time.perf_counter() - started) * 1000
        cpu_ms = (time.thread_time() - cpu_started) * 1000

        logger.info(
            "generated mode=%s visited=%s kept=%s truncated=%s elapsed_ms=%.1f",
            self.mode,
            visited,
            len(combinations),
            truncated_reason,
            elapsed_ms,
        )

        return GenerationResult(
            combinations=tuple(combinations),
            total_generated=visited,
            truncated=Truncation(status=truncated_reason is not None, reason=truncated_reason),
            statistics=summarize(combinations),
            performance_metrics=PerformanceMetrics(
                cpu_time_ms=round(cpu_ms, 3),
                memory_usage_mb=round(tracker.used_mb, 3),
            ),
            processing_time_ms=int(elapsed_ms),
        )
