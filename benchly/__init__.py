"""Benchly - statistically rigorous micro-benchmarking."""

from benchly.benchmarks import Benchmark, Suite, filter_benchmarks, invoke, invoke_async
from benchly.errors import (
    BenchlyError,
    DeferredStateError,
    NoUsableClockError,
    UnmeasurableOperationError,
)
from benchly.events import Event, EventEmitter
from benchly.models import BenchmarkOptions, EventType, Stats, SuiteOptions, Times
from benchly.stats import MannWhitneyResult, compare_samples, compute_stats, mann_whitney
from benchly.timing import Calibrator, ClockSource, CycleController, Deferred
from benchly.version.benchly_version import BENCHLY_VERSION, Version

__version__ = str(BENCHLY_VERSION)
__version_info__ = BENCHLY_VERSION

__all__ = [
    "BENCHLY_VERSION",
    "BenchlyError",
    "Benchmark",
    "BenchmarkOptions",
    "Calibrator",
    "ClockSource",
    "CycleController",
    "Deferred",
    "DeferredStateError",
    "Event",
    "EventEmitter",
    "EventType",
    "MannWhitneyResult",
    "NoUsableClockError",
    "Stats",
    "Suite",
    "SuiteOptions",
    "Times",
    "UnmeasurableOperationError",
    "Version",
    "__version__",
    "__version_info__",
    "compare_samples",
    "compute_stats",
    "filter_benchmarks",
    "invoke",
    "invoke_async",
    "mann_whitney",
]
