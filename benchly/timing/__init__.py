"""Timing subsystem: clock calibration, timed regions and cycle growth."""

from benchly.timing.clock import Calibrator, ClockSource, default_candidates
from benchly.timing.cycle import CycleController, CycleOutcome
from benchly.timing.deferred import Deferred
from benchly.timing.timers import cancel_delay, delay

__all__ = [
    "Calibrator",
    "ClockSource",
    "CycleController",
    "CycleOutcome",
    "Deferred",
    "cancel_delay",
    "default_candidates",
    "delay",
]
