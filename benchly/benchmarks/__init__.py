"""Benchmark subsystem for benchly.

Provides the Benchmark and Suite types and the scheduler that runs them,
synchronously or on an asyncio event loop.
"""

from benchly.benchmarks.base import Benchmark
from benchly.benchmarks.scheduler import invoke, invoke_async
from benchly.benchmarks.suite import Suite, filter_benchmarks

__all__ = [
    "Benchmark",
    "Suite",
    "filter_benchmarks",
    "invoke",
    "invoke_async",
]
