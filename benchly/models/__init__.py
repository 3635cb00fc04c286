"""Pydantic models and constants for benchmark configuration and results."""

from benchly.models.constants import CycleState, EventType
from benchly.models.options import BenchmarkOptions, SuiteOptions
from benchly.models.stats_models import Stats, Times

__all__ = [
    "BenchmarkOptions",
    "CycleState",
    "EventType",
    "Stats",
    "SuiteOptions",
    "Times",
]
