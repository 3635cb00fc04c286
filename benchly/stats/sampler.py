"""Statistical sampler: repeat timed clones until the estimate is tight enough.

Each sampling round runs a fresh clone of the benchmark through the cycle
controller; the clone's final period becomes one sample. Rounds continue
until at least ``min_samples`` were collected and the cumulative sampling
time exceeds ``max_time``.

Usage:
    sampler = Sampler(bench)
    sampler.sample()                 # synchronous
    await sampler.sample_async()     # on the running event loop
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TYPE_CHECKING

from benchly.events import Event
from benchly.models.constants import MAX_QUEUED_CLONES, CycleState, EventType
from benchly.models.stats_models import Stats
from benchly.stats.tables import t_critical
from benchly.utils.logger import Logger

if TYPE_CHECKING:
    from benchly.benchmarks.base import Benchmark
    from benchly.timing.cycle import CycleOutcome

logger = Logger.for_module(__name__)


def compute_stats(sample: Sequence[float]) -> Stats:
    """Compute the summary statistics of a sample of periods.

    Uses the sample variance (``n - 1``) and a two-tailed 95% Student's t
    critical value for the margin of error.

    Args:
        sample: Periods in seconds per operation.

    Returns:
        Stats holding a copy of the sample and its statistics.
    """
    size = len(sample)
    if not size:
        return Stats()

    mean = sum(sample) / size
    variance = sum((x - mean) ** 2 for x in sample) / (size - 1) if size > 1 else 0.0
    deviation = math.sqrt(variance)
    sem = deviation / math.sqrt(size)
    moe = sem * t_critical(size - 1)
    rme = moe / mean * 100 if mean else 0.0

    return Stats(
        sample=list(sample),
        mean=mean,
        variance=variance,
        deviation=deviation,
        sem=sem,
        moe=moe,
        rme=rme,
    )


class Sampler:
    """Runs sampling rounds for one original benchmark.

    At most MAX_QUEUED_CLONES clones are queued at a time: the one running
    and the next one. Clone outcomes are applied to the original through
    apply(); clones never touch the original themselves.

    Attributes:
        benchmark: The original benchmark being sampled.
        queue: Clones waiting to run (the front one is running).
        elapsed: Cumulative sampling time in seconds.
        count: Last established iteration count, used to start new clones.
    """

    def __init__(self, benchmark: Benchmark) -> None:
        self.benchmark = benchmark
        self.queue: list[Benchmark] = []
        self.elapsed = 0.0
        self.count = benchmark.init_count

    def sample(self) -> None:
        """Run sampling rounds on the caller's thread until done."""
        from benchly.benchmarks.scheduler import invoke

        self.enqueue()
        invoke(
            self.queue,
            "run",
            queued=True,
            on_cycle=self.evaluate,
            on_complete=self._complete,
        )

    async def sample_async(self) -> None:
        """Run sampling rounds on the running event loop until done."""
        from benchly.benchmarks.scheduler import invoke_async

        self.enqueue()
        await invoke_async(
            self.queue,
            "run",
            queued=True,
            on_cycle=self.evaluate,
            on_complete=self._complete,
        )

    def enqueue(self) -> Benchmark:
        """Queue a new clone starting at the last established count."""
        clone = self.benchmark.spawn_clone(self.count)
        self.queue.append(clone)
        logger.debug(
            f"Queued clone of '{self.benchmark.display_name}' at count {self.count}"
        )
        return clone

    # -------------------------------------------------------------------------
    # Clone outcomes
    # -------------------------------------------------------------------------

    def apply(self, clone: Benchmark, outcome: CycleOutcome) -> None:
        """Apply one timed region of ``clone`` to the original benchmark.

        Copies timing figures and errors, re-emits ``error`` and ``cycle``
        on the original, and aborts both when a listener asks for it or an
        operation failure is not cancelled.
        """
        bench = self.benchmark
        if not bench.running:
            if bench.aborted:
                clone.abort()
            return

        bench.cycles = max(bench.cycles, outcome.cycle)

        # A failed clone keeps reporting its error on every later region
        if outcome.error is not None and outcome.error is not bench.error:
            bench.error = outcome.error
            error_event = Event(EventType.ERROR, message=outcome.error)
            bench.emit(error_event)
            if not error_event.cancelled and clone.running:
                clone.abort()
                bench.abort()
                bench.emit(EventType.CYCLE)
                return

        if outcome.state in (CycleState.GROWING, CycleState.SETTLED):
            bench.times.cycle = outcome.elapsed
            bench.times.period = outcome.period
            bench.hz = outcome.hz
            bench.count = outcome.count
            self.count = outcome.count

        event = Event(EventType.CYCLE)
        bench.emit(event)
        if event.aborted:
            clone.abort()
            bench.abort()
            bench.emit(EventType.CYCLE)

    def evaluate(self, event: Event) -> None:
        """Record the finished clone and decide whether to queue another.

        Used as the scheduler's ``on_cycle`` callback; setting
        ``event.aborted`` ends the sampling.
        """
        bench = self.benchmark
        clone = event.target
        sample = bench.stats.sample
        done = bench.aborted
        now = bench.calibrator.now()

        sample.append(clone.times.period)
        self.elapsed += now - clone.times.timestamp
        maxed_out = len(sample) >= bench.min_samples and self.elapsed > bench.max_time

        # Aborted or unclockable: discard everything
        if done or math.isinf(clone.hz):
            maxed_out = True
            sample.clear()
            self.queue.clear()

        if not done:
            bench.stats = compute_stats(sample)
            # compute_stats copies; keep appending to the live list
            bench.stats.sample = sample
            if maxed_out:
                bench.running = False
                done = True
                bench.times.elapsed = now - bench.times.timestamp
            if not math.isinf(bench.hz):
                mean = bench.stats.mean
                bench.hz = 1 / mean if mean else math.inf
                bench.times.cycle = mean * bench.count
                bench.times.period = mean

        if len(self.queue) < MAX_QUEUED_CLONES and not maxed_out:
            self.enqueue()

        event.aborted = done

    def _complete(self, event: Event) -> None:
        bench = self.benchmark
        if bench.error is None and not bench.aborted:
            logger.info(
                f"'{bench.display_name}' x {bench.hz:,.2f} ops/sec "
                f"±{bench.stats.rme:.2f}% ({bench.stats.size} runs sampled)"
            )
        bench.emit(EventType.COMPLETE)
