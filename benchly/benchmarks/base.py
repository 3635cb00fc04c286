"""Benchmark: one measured operation and its results.

A benchmark owns a measured callable, its options and its results
(``hz``, ``stats``, ``times``). Running it samples the operation through
clones: every sampling round runs a fresh clone through the cycle
controller, and the clone's period becomes one sample.

Every lifecycle transition is an event (see benchly.events):

    start     run() began; return False from a listener to cancel
    cycle     a timed region (or, for a suite, a member) finished
    error     the operation raised; ``event.message`` holds the exception
    abort     abort() was requested; return False to cancel
    reset     reset() is about to restore defaults; return False to cancel
    complete  the run finished (successfully, with an error, or aborted)

Example:
    >>> bench = Benchmark("sorted", lambda: sorted(data), max_time=1)
    >>> bench.on("complete", lambda event: print(event.target))
    >>> bench.run()
"""

from __future__ import annotations

import asyncio
import itertools
import math
from collections.abc import Callable
from typing import Any

from benchly.events import Event, EventEmitter
from benchly.models.constants import EventType
from benchly.models.options import BenchmarkOptions
from benchly.models.stats_models import Stats, Times
from benchly.stats.compare import compare_samples
from benchly.stats.sampler import Sampler
from benchly.timing.clock import Calibrator
from benchly.timing.cycle import CycleController, CycleOutcome
from benchly.timing.deferred import Deferred
from benchly.timing.timers import cancel_delay
from benchly.utils.logger import Logger

logger = Logger.for_module(__name__)

_ids = itertools.count(1)


class Benchmark(EventEmitter):
    """A measured operation, its configuration and its results.

    Attributes:
        name: Display name (optional).
        id: Identifier, unique per process unless given explicitly.
        fn: The measured callable.
        options: Validated BenchmarkOptions.
        calibrator: Clock shared with clones.
        original: The benchmark this one was cloned from for sampling,
            None for benchmarks created by callers.
        count: Iteration count of the current or last timed region.
        cycles: Timed regions executed.
        hz: Operations per second.
        stats: Sample statistics.
        times: Timing figures.
        running: True while running.
        aborted: True once aborted (until the next reset/run).
        error: Exception captured from the operation, if any.
    """

    def __init__(
        self,
        name: str | None = None,
        fn: Callable[..., Any] | None = None,
        options: BenchmarkOptions | dict[str, Any] | None = None,
        *,
        calibrator: Calibrator | None = None,
        original: Benchmark | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the benchmark.

        Args:
            name: Display name.
            fn: Measured callable; takes a Deferred when ``defer=True``.
            options: BenchmarkOptions or a dict of option values.
            calibrator: Clock to time with; a default one is created if None.
            original: Set only for sampling clones.
            **kwargs: Option values overriding ``options``.

        Raises:
            TypeError: If ``fn`` is not callable.
            pydantic.ValidationError: If an option value is invalid.
        """
        super().__init__()
        if fn is None or not callable(fn):
            raise TypeError(f"Benchmark function must be callable, got {type(fn).__name__}")

        if isinstance(options, BenchmarkOptions):
            options = options.merged(**kwargs) if kwargs else options
        else:
            options = BenchmarkOptions.model_validate({**(options or {}), **kwargs})
        if name is not None and options.name != name:
            options = options.merged(name=name)

        self.options = options
        self.name = options.name
        self.id = options.id if options.id is not None else next(_ids)
        self.fn = fn
        self.calibrator = calibrator or Calibrator()
        self.original = original
        self.controller = CycleController(self.calibrator)

        self.count = 0
        self.cycles = 0
        self.hz = 0.0
        self.stats = Stats()
        self.times = Times()
        self.running = False
        self.aborted = False
        self.error: BaseException | None = None

        self._timer: Any = None
        self._deferred: Deferred | None = None
        self._sampler: Sampler | None = None
        self._aborting = False
        self._resetting = False

        # Sampling clones report to their original instead of notifying listeners
        if original is None:
            for event_type, listener in options.listener_items():
                self.on(event_type, listener)

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------

    @property
    def display_name(self) -> str:
        """Name, or ``<Test #id>`` for unnamed benchmarks."""
        return self.name if self.name else f"<Test #{self.id}>"

    @property
    def setup(self) -> Callable[[], Any] | None:
        return self.options.setup

    @property
    def teardown(self) -> Callable[[], Any] | None:
        return self.options.teardown

    @property
    def min_time(self) -> float:
        return self.options.min_time

    @property
    def max_time(self) -> float:
        return self.options.max_time

    @property
    def init_count(self) -> int:
        return self.options.init_count

    @property
    def min_samples(self) -> int:
        return self.options.min_samples

    @property
    def delay(self) -> float:
        return self.options.delay

    @property
    def defer(self) -> bool:
        return self.options.defer

    @property
    def asynchronous(self) -> bool:
        return self.options.asynchronous

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def run(self) -> Benchmark:
        """Run the benchmark to completion on the caller's thread.

        Deferred benchmarks need an event loop and are run through
        ``asyncio.run(run_async())``.

        Raises:
            RuntimeError: If a deferred benchmark is run synchronously from
                inside a running event loop.
        """
        if self.defer:
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                return asyncio.run(self.run_async())
            raise RuntimeError(
                f"Deferred benchmark '{self.display_name}' cannot run synchronously "
                f"inside a running event loop; use 'await run_async()'"
            )

        if not self._begin():
            return self
        if self.original is None:
            self._sampler = Sampler(self)
            self._sampler.sample()
        else:
            for outcome in self.controller.cycles(self):
                self._report(outcome)
            self.emit(EventType.COMPLETE)
        return self

    async def run_async(self) -> Benchmark:
        """Run the benchmark on the running event loop.

        Asynchronous and deferred benchmarks yield to the loop between
        cycles and between sampling rounds.
        """
        if not self._begin():
            return self
        if self.original is None:
            self._sampler = Sampler(self)
            await self._sampler.sample_async()
        else:
            async for outcome in self.controller.cycles_async(self):
                self._report(outcome)
            self.emit(EventType.COMPLETE)
        return self

    def _begin(self) -> bool:
        """Reset, mark running and emit ``start``; False when it was cancelled."""
        if self.original is not None and self.original.aborted:
            self.emit(EventType.COMPLETE)
            return False

        # Not running, so reset() restores defaults instead of aborting
        self.running = False
        self.reset()
        self.running = True
        self.count = self.init_count
        self.times.timestamp = self.calibrator.now()
        self.error = None

        event = Event(EventType.START)
        self.emit(event)
        if event.cancelled:
            self.running = False
            logger.debug(f"Start of '{self.display_name}' cancelled by a listener")
            return False
        if self.original is None:
            logger.info(f"Running '{self.display_name}'")
        return True

    def _report(self, outcome: CycleOutcome) -> None:
        sampler = self.original._sampler if self.original is not None else None
        if sampler is not None:
            sampler.apply(self, outcome)

    def spawn_clone(self, count: int) -> Benchmark:
        """Create a sampling clone that starts at ``count`` iterations."""
        return Benchmark(
            fn=self.fn,
            options=self.options.merged(id=self.id, init_count=count),
            calibrator=self.calibrator,
            original=self,
        )

    def _live_clones(self) -> list[Benchmark]:
        return list(self._sampler.queue) if self._sampler is not None else []

    # -------------------------------------------------------------------------
    # Abort / reset
    # -------------------------------------------------------------------------

    def abort(self) -> Benchmark:
        """Stop a running benchmark.

        Emits a cancellable ``abort`` event, resets the results, cancels a
        pending delay or deferred region and marks the benchmark aborted.
        Does nothing when the benchmark is not running.
        """
        if not self.running:
            return self

        event = Event(EventType.ABORT)
        self.emit(event)
        if event.cancelled and not self._resetting:
            return self

        self._aborting = True
        try:
            self.reset()
        finally:
            self._aborting = False

        cancel_delay(self)
        if self._deferred is not None:
            self._deferred.cancel()
        for clone in self._live_clones():
            cancel_delay(clone)
            clone.abort()

        if not self._resetting:
            self.aborted = True
            self.running = False
            logger.debug(f"Aborted '{self.display_name}'")
        return self

    def reset(self) -> Benchmark:
        """Restore counters, results and flags to their defaults.

        A running benchmark is aborted instead. Emits a cancellable ``reset``
        event, only when something actually changes. The captured ``error``
        is kept until the next run.
        """
        if self.running and not self._aborting:
            self._resetting = True
            try:
                self.abort()
            finally:
                self._resetting = False
            return self

        if not self._is_dirty():
            return self

        event = Event(EventType.RESET)
        self.emit(event)
        if event.cancelled:
            return self

        self.count = 0
        self.cycles = 0
        self.hz = 0.0
        self.stats = Stats()
        self.times = Times()
        self.running = False
        self.aborted = False
        return self

    def _is_dirty(self) -> bool:
        return bool(
            self.count
            or self.cycles
            or self.hz
            or self.running
            or self.aborted
            or self.stats != Stats()
            or self.times != Times()
        )

    # -------------------------------------------------------------------------
    # Copies and comparison
    # -------------------------------------------------------------------------

    def clone(self, **overrides: Any) -> Benchmark:
        """Create a new benchmark with the same operation, options and listeners.

        Args:
            **overrides: Option values to change in the copy.

        Returns:
            A benchmark that has not run yet.
        """
        options = self.options.merged(**{"id": self.id, **overrides})
        result = Benchmark(fn=self.fn, options=options, calibrator=self.calibrator)
        result.events = {name: list(listeners) for name, listeners in self.events.items()}
        return result

    def compare(self, other: Benchmark) -> int:
        """Compare sample distributions with a Mann-Whitney U test.

        Returns:
            1 if this benchmark is significantly faster, -1 if slower,
            0 if the difference is not significant.
        """
        if other is self:
            return 0
        return compare_samples(self.stats.sample, other.stats.sample)

    def __str__(self) -> str:
        if self.error is not None:
            return f"{self.display_name}: {self.error}"
        hz = f"{self.hz:,.0f}" if math.isfinite(self.hz) else "inf"
        size = self.stats.size
        return (
            f"{self.display_name} x {hz} ops/sec ±{self.stats.rme:.2f}% "
            f"({size} run{'' if size == 1 else 's'} sampled)"
        )

    def __repr__(self) -> str:
        return (
            f"Benchmark(name={self.name!r}, id={self.id!r}, hz={self.hz:.2f}, "
            f"running={self.running}, aborted={self.aborted})"
        )
