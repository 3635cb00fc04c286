"""Tests for clock selection and calibration."""

import math

import pytest

from benchly.errors import NoUsableClockError
from benchly.timing.clock import Calibrator, ClockSource, default_candidates, measure_resolution


class SteppingClock:
    """Clock advancing by a fixed step on every read."""

    def __init__(self, step: float) -> None:
        self.step = step
        self.value = 0.0

    def __call__(self) -> float:
        self.value += self.step
        return self.value


def test_measure_resolution_of_stepping_clock():
    """Test the resolution equals the step of a clock that always advances."""
    assert measure_resolution(SteppingClock(0.5), samples=10) == pytest.approx(0.5)


def test_measure_resolution_of_frozen_clock_is_infinite():
    """Test a clock that never advances yields an infinite resolution."""
    assert math.isinf(measure_resolution(lambda: 1.0, samples=5, max_spins=100))


def test_declared_resolution_is_not_measured():
    """Test a source with a known resolution is trusted as is."""
    calls = []

    def now():
        calls.append(1)
        return 0.0

    calibrator = Calibrator(ClockSource("declared", now, resolution=0.002))

    assert calibrator.resolution() == 0.002
    assert calls == []


def test_resolution_is_cached():
    """Test the clock is sampled only once per calibrator."""
    clock = SteppingClock(0.001)
    calibrator = Calibrator(ClockSource("stepping", clock), samples=3)

    first = calibrator.resolution()
    reads = clock.value
    assert calibrator.resolution() == first
    assert clock.value == reads


def test_frozen_clock_raises():
    """Test a clock that never advances cannot be used."""
    calibrator = Calibrator(ClockSource("frozen", lambda: 0.0), samples=2, max_spins=50)

    with pytest.raises(NoUsableClockError) as exc_info:
        calibrator.minimum_run_duration()
    assert exc_info.value.candidates == ["frozen"]


def test_minimum_run_duration():
    """Test the duration keeps one tick under 1% and never drops below 50 ms."""
    fine = Calibrator(ClockSource("fine", lambda: 0.0, resolution=1e-7))
    coarse = Calibrator(ClockSource("coarse", lambda: 0.0, resolution=0.01))

    assert fine.minimum_run_duration() == 0.05
    assert coarse.minimum_run_duration() == pytest.approx(0.5)
    assert coarse.minimum_run_duration(target_uncertainty=0.05) == pytest.approx(0.1)


def test_select_prefers_finest_clock():
    """Test select() keeps the candidate with the smallest resolution."""
    candidates = [
        ClockSource("coarse", lambda: 0.0, resolution=0.01),
        ClockSource("fine", lambda: 0.0, resolution=0.0001),
        ClockSource("broken", lambda: 0.0, resolution=math.inf),
    ]

    calibrator = Calibrator.select(candidates)

    assert calibrator.source.name == "fine"
    assert "fine" in repr(calibrator)


def test_select_without_usable_clock():
    """Test select() raises when every candidate is broken."""
    candidates = [
        ClockSource("a", lambda: 0.0, resolution=math.inf),
        ClockSource("b", lambda: 0.0, resolution=math.inf),
    ]

    with pytest.raises(NoUsableClockError) as exc_info:
        Calibrator.select(candidates)
    assert exc_info.value.candidates == ["a", "b"]
    assert "a, b" in str(exc_info.value)


def test_default_candidates_are_usable():
    """Test the built-in clocks calibrate on this machine."""
    names = [source.name for source in default_candidates()]
    assert names == ["perf_counter", "monotonic", "time"]

    calibrator = Calibrator.select(samples=3)
    assert 0 < calibrator.resolution() < 1
