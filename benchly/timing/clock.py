"""Clock selection and calibration.

The calibrator answers two questions for the cycle controller: how fine is
the clock, and how long must a timed region last so that one clock tick
stays below 1% of the measured interval (propagation of uncertainty: the
absolute error of a difference of two readings is half a tick each side).

Usage:
    from benchly.timing.clock import Calibrator

    calibrator = Calibrator.select()        # finest of the default clocks
    calibrator.resolution()                 # e.g. 1e-07
    calibrator.minimum_run_duration()       # >= 0.05
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from benchly.errors import NoUsableClockError
from benchly.models.constants import (
    MAX_CLOCK_SPINS,
    MIN_RUN_DURATION_FLOOR,
    RESOLUTION_SAMPLES,
    TARGET_UNCERTAINTY,
)
from benchly.utils.logger import Logger

logger = Logger.for_module(__name__)


@dataclass(frozen=True)
class ClockSource:
    """A monotonically increasing clock reporting seconds.

    Attributes:
        name: Display name of the clock.
        now: Zero-argument callable returning the current reading.
        resolution: Known resolution in seconds; measured when None.
    """

    name: str
    now: Callable[[], float]
    resolution: float | None = None


def default_candidates() -> list[ClockSource]:
    """Return the clocks considered by Calibrator.select() by default."""
    return [
        ClockSource("perf_counter", time.perf_counter),
        ClockSource("monotonic", time.monotonic),
        ClockSource("time", time.time),
    ]


def measure_resolution(
    now: Callable[[], float],
    samples: int = RESOLUTION_SAMPLES,
    max_spins: int = MAX_CLOCK_SPINS,
) -> float:
    """Estimate the smallest measurable interval of a clock.

    Spins on the clock until it reports a nonzero delta, ``samples`` times,
    and averages the deltas. A clock that does not advance within
    ``max_spins`` reads, or that goes backwards, is broken and yields
    infinity.
    """
    deltas: list[float] = []
    for _ in range(samples):
        begin = now()
        measured = 0.0
        spins = 0
        while not measured:
            measured = now() - begin
            spins += 1
            if spins >= max_spins:
                break
        if measured > 0:
            deltas.append(measured)
        else:
            deltas.append(math.inf)
            break
    return sum(deltas) / len(deltas)


class Calibrator:
    """Owns one clock and its calibration results.

    Measurements are taken once, on first use, and cached for the life of
    the calibrator. Share one instance between all benchmarks that should
    use the same clock.

    Example:
        >>> calibrator = Calibrator()
        >>> bench = Benchmark("noop", lambda: None, calibrator=calibrator)
    """

    def __init__(
        self,
        source: ClockSource | None = None,
        *,
        samples: int = RESOLUTION_SAMPLES,
        max_spins: int = MAX_CLOCK_SPINS,
    ) -> None:
        """Initialize the calibrator.

        Args:
            source: Clock to use; ``time.perf_counter`` when None.
            samples: Number of nonzero deltas averaged for the resolution.
            max_spins: Clock reads allowed per delta before giving up.
        """
        self.source = source or ClockSource("perf_counter", time.perf_counter)
        self.samples = samples
        self.max_spins = max_spins
        self._resolution: float | None = None
        self._min_durations: dict[float, float] = {}

    @classmethod
    def select(
        cls,
        candidates: list[ClockSource] | None = None,
        *,
        samples: int = RESOLUTION_SAMPLES,
        max_spins: int = MAX_CLOCK_SPINS,
    ) -> Calibrator:
        """Pick the candidate clock with the finest resolution.

        Raises:
            NoUsableClockError: If every candidate has an infinite resolution.
        """
        candidates = candidates if candidates is not None else default_candidates()
        best: Calibrator | None = None
        for source in candidates:
            calibrator = cls(source, samples=samples, max_spins=max_spins)
            resolution = calibrator._measure()
            logger.debug(f"Clock '{source.name}' resolution: {resolution:.3e}s")
            if not math.isfinite(resolution):
                continue
            if best is None or resolution < best._measure():
                best = calibrator
        if best is None:
            raise NoUsableClockError([source.name for source in candidates])
        logger.debug(f"Selected clock '{best.source.name}'")
        return best

    def now(self) -> float:
        """Read the clock."""
        return self.source.now()

    def _measure(self) -> float:
        if self._resolution is None:
            if self.source.resolution is not None:
                self._resolution = self.source.resolution
            else:
                self._resolution = measure_resolution(
                    self.source.now, self.samples, self.max_spins
                )
        return self._resolution

    def resolution(self) -> float:
        """Return the clock resolution in seconds.

        Raises:
            NoUsableClockError: If the clock never advances.
        """
        resolution = self._measure()
        if not math.isfinite(resolution) or resolution <= 0:
            raise NoUsableClockError([self.source.name])
        return resolution

    def minimum_run_duration(self, target_uncertainty: float = TARGET_UNCERTAINTY) -> float:
        """Return the shortest timed region keeping relative error under the target.

        ``max(resolution / 2 / target_uncertainty, 0.05)``.

        Raises:
            NoUsableClockError: If the clock never advances.
        """
        if target_uncertainty not in self._min_durations:
            duration = max(
                self.resolution() / 2 / target_uncertainty, MIN_RUN_DURATION_FLOOR
            )
            self._min_durations[target_uncertainty] = duration
            logger.debug(
                f"Minimum run duration for {target_uncertainty:.2%} "
                f"uncertainty: {duration:.4f}s"
            )
        return self._min_durations[target_uncertainty]

    def __repr__(self) -> str:
        return f"Calibrator(source={self.source.name!r})"
