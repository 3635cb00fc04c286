"""Suite: an ordered group of benchmarks run one after another.

Usage:
    suite = Suite("sorting")
    suite.add("sorted", lambda: sorted(data))
    suite.add("heapq", lambda: heapq.nsmallest(len(data), data))
    suite.on("cycle", lambda event: print(event.target))
    suite.run()
    print(suite.filter("fastest")[0].name)
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from benchly.benchmarks.base import Benchmark
from benchly.benchmarks.scheduler import invoke, invoke_async
from benchly.events import Event, EventEmitter
from benchly.models.constants import EventType
from benchly.models.options import SuiteOptions
from benchly.timing.clock import Calibrator
from benchly.utils.logger import Logger

logger = Logger.for_module(__name__)

FILTERS = ("successful", "fastest", "slowest")


def filter_benchmarks(
    benchmarks: Iterable[Benchmark],
    callback: str | Callable[[Benchmark], Any],
) -> list[Benchmark]:
    """Select benchmarks by a predicate or a named filter.

    Named filters:
        successful: ran at least one cycle, finite ``hz`` and no error.
        fastest: successful benchmarks not significantly slower than the
            one with the lowest ``mean + moe``.
        slowest: the same, around the highest ``mean + moe``.

    Raises:
        ValueError: If ``callback`` is an unknown filter name.
    """
    benchmarks = list(benchmarks)
    if callable(callback):
        return [bench for bench in benchmarks if callback(bench)]

    if callback == "successful":
        return [
            bench
            for bench in benchmarks
            if bench.cycles and math.isfinite(bench.hz) and bench.error is None
        ]

    if callback in ("fastest", "slowest"):
        ranked = sorted(
            filter_benchmarks(benchmarks, "successful"),
            key=lambda bench: bench.stats.mean + bench.stats.moe,
            reverse=callback == "slowest",
        )
        if not ranked:
            return []
        leader = ranked[0]
        return [bench for bench in ranked if leader.compare(bench) == 0]

    raise ValueError(f"Unknown filter '{callback}', expected one of {FILTERS} or a callable")


class Suite(EventEmitter):
    """An ordered, list-like collection of benchmarks.

    Attributes:
        name: Display name (optional).
        options: Validated SuiteOptions.
        calibrator: Clock handed to benchmarks created by add().
        benchmarks: Members in insertion order.
        running: True while running.
        aborted: True once aborted (until the next reset/run).
    """

    def __init__(
        self,
        name: str | None = None,
        options: SuiteOptions | dict[str, Any] | None = None,
        *,
        calibrator: Calibrator | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the suite.

        Args:
            name: Display name.
            options: SuiteOptions or a dict of option values.
            calibrator: Clock shared by benchmarks created through add();
                a default one is created if None.
            **kwargs: Option values overriding ``options``.
        """
        super().__init__()
        if isinstance(options, SuiteOptions):
            data = {field: getattr(options, field) for field in SuiteOptions.model_fields}
        else:
            data = dict(options or {})
        data.update(kwargs)
        if name is not None:
            data["name"] = name

        self.options = SuiteOptions.model_validate(data)
        self.name = self.options.name
        self.calibrator = calibrator or Calibrator()
        self.benchmarks: list[Benchmark] = []
        self.running = False
        self.aborted = False
        self._aborting = False
        self._resetting = False

        for event_type, listener in self.options.listener_items():
            self.on(event_type, listener)

    # -------------------------------------------------------------------------
    # Sequence protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.benchmarks)

    def __iter__(self) -> Iterator[Benchmark]:
        return iter(self.benchmarks)

    def __getitem__(self, index: int) -> Benchmark:
        return self.benchmarks[index]

    def pop(self, index: int = -1) -> Benchmark:
        """Remove and return the benchmark at ``index``."""
        return self.benchmarks.pop(index)

    def index(self, bench: Benchmark) -> int:
        return self.benchmarks.index(bench)

    def __repr__(self) -> str:
        return (
            f"Suite(name={self.name!r}, benchmarks={len(self.benchmarks)}, "
            f"running={self.running}, aborted={self.aborted})"
        )

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def add(
        self,
        name: str | Benchmark | None = None,
        fn: Callable[..., Any] | None = None,
        options: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Suite:
        """Add a benchmark, emitting a cancellable ``add`` event first.

        Args:
            name: Benchmark name, or an existing Benchmark to add as is.
            fn: Measured callable (ignored when ``name`` is a Benchmark).
            options: Benchmark option values.
            **kwargs: Benchmark option values overriding ``options``.

        Returns:
            The suite, for chaining.
        """
        if isinstance(name, Benchmark):
            bench = name
        else:
            bench = Benchmark(name, fn, options, calibrator=self.calibrator, **kwargs)

        event = Event(EventType.ADD, target=bench)
        self.emit(event)
        if not event.cancelled:
            self.benchmarks.append(bench)
        else:
            logger.debug(f"Adding '{bench.display_name}' cancelled by a listener")
        return self

    def filter(self, callback: str | Callable[[Benchmark], Any]) -> Suite:
        """Return a new suite holding the members selected by filter_benchmarks()."""
        result = self._empty_copy()
        result.benchmarks = filter_benchmarks(self.benchmarks, callback)
        return result

    def clone(self, **overrides: Any) -> Suite:
        """Create a new suite with cloned members, the same options and listeners."""
        result = self._empty_copy(**overrides)
        result.benchmarks = [bench.clone() for bench in self.benchmarks]
        return result

    def _empty_copy(self, **overrides: Any) -> Suite:
        data = {field: getattr(self.options, field) for field in SuiteOptions.model_fields}
        data.update(overrides)
        result = Suite(options=data, calibrator=self.calibrator)
        result.events = {name: list(listeners) for name, listeners in self.events.items()}
        return result

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def run(self, queued: bool = False) -> Suite:
        """Run every member in order on the caller's thread.

        Args:
            queued: Remove members from the suite as they finish.
        """
        self._begin()
        invoke(
            self,
            "run",
            queued=queued,
            on_start=self._on_start,
            on_cycle=self._on_cycle,
            on_complete=self._on_complete,
        )
        return self

    async def run_async(self, queued: bool = False) -> Suite:
        """Run every member in order on the running event loop."""
        self._begin()
        await invoke_async(
            self,
            "run",
            queued=queued,
            on_start=self._on_start,
            on_cycle=self._on_cycle,
            on_complete=self._on_complete,
        )
        return self

    def _begin(self) -> None:
        self.running = False
        self.reset()
        self.running = True
        logger.info(f"Running suite '{self.name or ''}' ({len(self)} benchmarks)")

    def _on_start(self, event: Event) -> None:
        self.emit(event)

    def _on_cycle(self, event: Event) -> None:
        bench = event.target
        if bench.error is not None:
            self.emit(Event(EventType.ERROR, target=bench, message=bench.error))
        self.emit(event)
        event.aborted = self.aborted

    def _on_complete(self, event: Event) -> None:
        self.running = False
        self.emit(event)

    # -------------------------------------------------------------------------
    # Abort / reset
    # -------------------------------------------------------------------------

    def abort(self) -> Suite:
        """Abort a running suite and every member.

        Emits a cancellable ``abort`` event; does nothing when not running.
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

        if not self._resetting:
            self.aborted = True
            invoke(self, "abort")
            logger.debug(f"Aborted suite '{self.name or ''}'")
        return self

    def reset(self) -> Suite:
        """Reset the suite and every member; a running suite is aborted instead.

        Emits a cancellable ``reset`` event when the suite is running or aborted.
        """
        if self.running and not self._aborting:
            self._resetting = True
            try:
                self.abort()
            finally:
                self._resetting = False
            return self

        if self.aborted or self.running:
            event = Event(EventType.RESET)
            self.emit(event)
            if event.cancelled:
                return self
            self.aborted = False
            self.running = False
            if not self._aborting:
                invoke(self, "reset")
        return self
