from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

MIN_COMPLEXITY = 1
MAX_COMPLEXITY = 10


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ComplexityFilter(_Model):
    min_complexity: int = Field(default=MIN_COMPLEXITY, ge=MIN_COMPLEXITY, le=MAX_COMPLEXITY)
    max_complexity: int = Field(default=MAX_COMPLEXITY, ge=MIN_COMPLEXITY, le=MAX_COMPLEXITY)

    @model_validator(mode="after")
    def _ordered(self) -> ComplexityFilter:
        if self.min_complexity > self.max_complexity:
            raise ValueError("min_complexity must not exceed max_complexity")
        return self

    def accepts(self, complexity: int) -> bool:
        return self.min_complexity <= complexity <= self.max_complexity


class WordRequest(_Model):
    """Raw request as received from a caller, before normalization."""

    characters: Any
    language: str = "en"
    min_length: int | None = None
    max_length: int | None = None
    filters: ComplexityFilter | None = None


class WordInput(_Model):
    """Normalized request: uppercase letters and resolved length bounds."""

    characters: str
    language: str = "en"
    min_length: int
    max_length: int
    filters: ComplexityFilter | None = None


class WordCombination(_Model):
    word: str
    complexity: int = Field(ge=MIN_COMPLEXITY, le=MAX_COMPLEXITY)
    is_valid: bool = False
    definition: str | None = None


class ValidationResult(_Model):
    word: str
    is_valid: bool
    complexity: int
    definition: str | None = None


class ErrorInfo(_Model):
    code: str
    message: str


class Truncation(_Model):
    status: bool = False
    reason: str | None = None


class Statistics(_Model):
    valid_words: int = 0
    invalid_words: int = 0
    average_complexity: float = 0.0
    average_length: float = 0.0


class PerformanceMetrics(_Model):
    cpu_time_ms: float = 0.0
    memory_usage_mb: float = 0.0


class GenerationResult(_Model):
    combinations: tuple[WordCombination, ...] = ()
    total_generated: int = 0
    truncated: Truncation = Truncation()
    statistics: Statistics = Statistics()
    performance_metrics: PerformanceMetrics = PerformanceMetrics()
    processing_time_ms: int = 0
    warning: ErrorInfo | None = None


class CacheEntry(_Model):
    fingerprint: str
    result: GenerationResult
    created_at: datetime
    ttl_s: float


class CacheInfo(_Model):
    hit: bool = False
    source: str = "computed"


class ResourceUtilization(_Model):
    memory: float = 0.0
    cpu: float = 0.0


class PerformanceData(_Model):
    resource_utilization: ResourceUtilization = ResourceUtilization()


class WordGenerationResponse(_Model):
    success: bool
    data: GenerationResult | None = None
    error: ErrorInfo | None = None
    cache_info: CacheInfo = CacheInfo()
    performance_data: PerformanceData = PerformanceData()
