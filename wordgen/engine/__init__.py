from .generator import (
    MAX_COMBINATIONS_REACHED,
    PERMUTATION,
    SCAN_LIMIT_REACHED,
    SUBSEQUENCE,
    CombinationGenerator,
    MemoryTracker,
    distinct_permutations,
    summarize,
)
from .normalizer import InputNormalizer
from .scorer import ComplexityScorer, complexity_scorer, score

__all__ = [
    "MAX_COMBINATIONS_REACHED",
    "PERMUTATION",
    "SCAN_LIMIT_REACHED",
    "SUBSEQUENCE",
    "CombinationGenerator",
    "ComplexityScorer",
    "InputNormalizer",
    "MemoryTracker",
    "complexity_scorer",
    "distinct_permutations",
    "score",
    "summarize",
]
