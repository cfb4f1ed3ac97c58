import math

from wordgen.models import MAX_COMPLEXITY, MIN_COMPLEXITY

VOWELS = frozenset("AEIOU")
DEFAULT_MAX_WORD_LENGTH = 15


class ComplexityScorer:
    def __init__(self, max_word_length: int = DEFAULT_MAX_WORD_LENGTH) -> None:
        self.max_word_length = max(2, max_word_length)
        self._length_scale = math.log1p(self.max_word_length)

    def length_base(self, length: int) -> float:
        # Saturates at 7.0 once length reaches max_word_length.
        capped = min(length, self.max_word_length)
        return 1.0 + 6.0 * math.log1p(capped) / self._length_scale

    def diversity_bonus(self, word: str) -> float:
        if len(word) < 2:
            return 0.0
        return 1.5 * (len(set(word)) - 1) / (len(word) - 1)

    def alternation_bonus(self, word: str) -> float:
        if len(word) < 2:
            return 0.0
        flags = [ch in VOWELS for ch in word.upper()]
        switches = sum(1 for prev, cur in zip(flags, flags[1:]) if prev != cur)
        return 1.5 * switches / (len(word) - 1)

    def repetition_count(self, word: str) -> int:
        """Count adjacent repeated blocks (``AA``, ``ABAB``, ``ABCABC``) of every width."""
        hits = 0
        n = len(word)
        for width in range(1, n // 2 + 1):
            for start in range(n - 2 * width + 1):
                if word[start : start + width] == word[start + width : start + 2 * width]:
                    hits += 1
        return hits

    def score(self, word: str) -> int:
        if not word:
            return MIN_COMPLEXITY
        raw = (
            self.length_base(len(word))
            + self.diversity_bonus(word)
            + self.alternation_bonus(word)
            - self.repetition_count(word)
        )
        # Half-up rounding keeps x.5 stable across platforms.
        rounded = math.floor(raw + 0.5)
        return max(MIN_COMPLEXITY, min(MAX_COMPLEXITY, rounded))


complexity_scorer = ComplexityScorer()


def score(word: str) -> int:
    return complexity_scorer.score(word)
