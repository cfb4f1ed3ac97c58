"""Error taxonomy shared by the engine and the request boundary.

Each error carries the ``code`` surfaced to callers in
``WordGenerationResponse.error.code``.
"""

from __future__ import annotations


class WordGenError(Exception):
    code = "INTERNAL_ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidInput(WordGenError):
    """Caller mistake; rejected before any generation work."""

    code = "INVALID_INPUT"


class MemoryLimitExceeded(WordGenError):
    """Generation would exceed the configured memory ceiling."""

    code = "MEMORY_LIMIT_EXCEEDED"


class GenerationTimeout(WordGenError):
    """The caller stopped waiting; any shared computation keeps running."""

    code = "GENERATION_TIMEOUT"


class DictionaryUnavailable(WordGenError):
    """The dictionary collaborator failed. Recovered locally as a warning."""

    code = "DICTIONARY_UNAVAILABLE"


class CircuitOpenError(DictionaryUnavailable):
    pass
