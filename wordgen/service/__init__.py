from .coordinator import GenerationCoordinator, RequestState, build_coordinator, build_dictionary
from .metrics import LoggingMetrics, MetricsSink, NullMetrics, RecordingMetrics

__all__ = [
    "GenerationCoordinator",
    "LoggingMetrics",
    "MetricsSink",
    "NullMetrics",
    "RecordingMetrics",
    "RequestState",
    "build_coordinator",
    "build_dictionary",
]
