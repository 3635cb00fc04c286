"""Cycle controller: grow the iteration count until a timed region is long enough.

One *cycle* is one timed region executing the operation ``count`` times.
After each region the controller computes the period (seconds per
operation) and, while the region was shorter than the minimum run
duration, raises ``count`` so the next region reaches it:

    count += ceil((min_time - elapsed) / period)

Regions that clock exactly zero get a large fixed boost on early cycles
(the clock was too coarse to see anything). When the required count
becomes unbounded the operation is unmeasurable and the run stops.

Usage:
    controller = CycleController(calibrator)
    period = controller.run_cycle(bench)          # drive to settled

    for outcome in controller.cycles(clone):      # one outcome per region
        apply(outcome)
"""

from __future__ import annotations

import math
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from benchly.errors import UnmeasurableOperationError
from benchly.models.constants import (
    ZERO_ELAPSED_BASE,
    ZERO_ELAPSED_DIVISORS,
    CycleState,
)
from benchly.timing.clock import Calibrator
from benchly.timing.deferred import Deferred
from benchly.timing.timers import delay
from benchly.utils.logger import Logger

if TYPE_CHECKING:
    from benchly.benchmarks.base import Benchmark

logger = Logger.for_module(__name__)


@dataclass
class CycleOutcome:
    """Result of one timed region, handed to whoever owns the original benchmark.

    Attributes:
        state: SETTLED, GROWING, ERRORING or ABORTED.
        cycle: 1-based index of the region within its clone.
        count: Iterations executed in the region.
        elapsed: Duration of the region in seconds.
        period: Seconds per operation.
        next_count: Count for the next region (equal to ``count`` when done).
        error: Failure captured in the clone, if any.
    """

    state: CycleState
    cycle: int
    count: int
    elapsed: float
    period: float
    next_count: int
    error: BaseException | None = None

    @property
    def hz(self) -> float:
        """Operations per second for this region."""
        return 1 / self.period if self.period else math.inf


class CycleController:
    """Runs timed regions for one benchmark or clone at a time."""

    def __init__(self, calibrator: Calibrator) -> None:
        self.calibrator = calibrator

    def min_time(self, bench: Benchmark) -> float:
        """Minimum duration of a region: the option, or the calibrated floor."""
        return bench.min_time or self.calibrator.minimum_run_duration()

    # -------------------------------------------------------------------------
    # Timed regions
    # -------------------------------------------------------------------------

    def time_region(self, bench: Benchmark) -> float:
        """Execute the operation ``bench.count`` times inside one timed region.

        Setup and teardown run outside the timed window. A failure is stored
        in ``bench.error`` and the region reports 0.0; once a benchmark has
        failed its operation is not called again.
        """
        if bench.error is not None:
            return 0.0

        fn = bench.fn
        now = self.calibrator.now
        count = bench.count
        try:
            if bench.setup is not None:
                bench.setup()
            start = now()
            for _ in range(count):
                fn()
            elapsed = now() - start
            if bench.teardown is not None:
                bench.teardown()
        except Exception as exc:
            bench.error = exc
            logger.warning(f"Operation of '{bench.display_name}' failed: {exc!r}")
            return 0.0
        return elapsed

    async def time_region_deferred(self, bench: Benchmark) -> float:
        """Time one region of a deferred operation, waiting for its resolutions."""
        deferred = Deferred(bench)
        bench._deferred = deferred
        try:
            elapsed = await deferred.start()
        finally:
            bench._deferred = None
        if bench.error is not None and elapsed == 0.0:
            logger.warning(
                f"Deferred operation of '{bench.display_name}' failed: {bench.error!r}"
            )
        return elapsed

    # -------------------------------------------------------------------------
    # Growth
    # -------------------------------------------------------------------------

    def settle(self, bench: Benchmark, count: int, elapsed: float) -> CycleOutcome:
        """Record a finished region and decide the next count.

        Mutates ``bench.times``, ``bench.hz``, ``bench.count`` and
        ``bench.running``.
        """
        if not bench.running:
            return CycleOutcome(
                CycleState.ABORTED, bench.cycles, count, elapsed, 0.0, count, bench.error
            )

        period = elapsed / count
        bench.times.cycle = elapsed
        bench.times.period = period
        bench.hz = 1 / period if period else math.inf

        min_time = self.min_time(bench)
        next_count: float = count

        if elapsed >= min_time:
            bench.running = False
            state = CycleState.SETTLED
        else:
            state = CycleState.GROWING
            if not elapsed and bench.cycles in ZERO_ELAPSED_DIVISORS:
                divisor = ZERO_ELAPSED_DIVISORS[bench.cycles]
                next_count = math.floor(ZERO_ELAPSED_BASE / divisor) if divisor else math.inf
            if next_count <= count:
                if period:
                    next_count += math.ceil((min_time - elapsed) / period)
                else:
                    next_count = math.inf

            if math.isinf(next_count):
                bench.running = False
                if bench.error is None:
                    bench.error = UnmeasurableOperationError(bench.display_name, bench.cycles)
                    logger.warning(str(bench.error))
                next_count = count
            else:
                logger.debug(
                    f"'{bench.display_name}' cycle {bench.cycles}: {elapsed:.6f}s "
                    f"< {min_time:.6f}s, count {count} -> {int(next_count)}"
                )
                bench.count = int(next_count)

        if bench.error is not None:
            state = CycleState.ERRORING

        return CycleOutcome(
            state, bench.cycles, count, elapsed, period, int(next_count), bench.error
        )

    # -------------------------------------------------------------------------
    # Drivers
    # -------------------------------------------------------------------------

    def cycles(self, bench: Benchmark) -> Iterator[CycleOutcome]:
        """Yield one outcome per timed region until the benchmark stops running.

        The consumer may abort the benchmark between regions.
        """
        while bench.running:
            bench.cycles += 1
            count = bench.count
            elapsed = self.time_region(bench)
            yield self.settle(bench, count, elapsed)

    async def cycles_async(self, bench: Benchmark) -> AsyncIterator[CycleOutcome]:
        """Asynchronous variant of cycles().

        Deferred operations are awaited until resolved, and asynchronous or
        deferred benchmarks pause for ``bench.delay`` between regions.
        """
        while bench.running:
            bench.cycles += 1
            count = bench.count
            if bench.defer:
                elapsed = await self.time_region_deferred(bench)
            else:
                elapsed = self.time_region(bench)
            yield self.settle(bench, count, elapsed)
            if bench.running and (bench.asynchronous or bench.defer):
                await delay(bench, bench.delay)

    def run_cycle(self, bench: Benchmark) -> float:
        """Grow ``bench.count`` until one region lasts at least the minimum run duration.

        Returns:
            The period (seconds per operation) of the final region.
        """
        bench.running = True
        if not bench.count:
            bench.count = bench.init_count
        for _ in self.cycles(bench):
            pass
        return bench.times.period
