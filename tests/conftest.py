"""Shared fixtures: a deterministic clock and a calibrator built on it."""

import pytest

from benchly.timing.clock import Calibrator, ClockSource


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    """A fresh fake clock starting at zero."""
    return FakeClock()


@pytest.fixture
def calibrator(clock):
    """Calibrator over the fake clock with a declared 1 ms resolution."""
    return Calibrator(ClockSource("fake", clock, resolution=0.001))


@pytest.fixture
def unit_op(clock):
    """An operation that costs exactly 1 ms of fake time."""

    def op():
        clock.advance(0.001)

    return op
