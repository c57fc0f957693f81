"""Build observability — events, event log, profiling and console output.

All events are frozen dataclasses with nanosecond timestamps.

Quick Start:
    >>> from vellum.observability import BuildCollector, EventLog
    >>> log = EventLog()
    >>> collector = BuildCollector(log)
    >>> # run_generation(config, baseline, collector=collector)

"""

from vellum.observability.collector import BuildCollector
from vellum.observability.events import (
    BuildEventType,
    GenerationFinished,
    GenerationProfile,
    GraphBuilt,
    GraphDiffed,
    NodeRendered,
    OutputWritten,
    now_ns,
)
from vellum.observability.log import EventLog
from vellum.observability.profiler import GenerationProfiler, compute_aggregate_stats
from vellum.observability.reporter import Reporter

__all__ = [
    "BuildCollector",
    "BuildEventType",
    "EventLog",
    "GenerationFinished",
    "GenerationProfile",
    "GenerationProfiler",
    "GraphBuilt",
    "GraphDiffed",
    "NodeRendered",
    "OutputWritten",
    "Reporter",
    "compute_aggregate_stats",
    "now_ns",
]
