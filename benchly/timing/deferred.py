"""Completion handle for operations that finish asynchronously.

A deferred operation receives the Deferred as its only argument and calls
``resolve()`` exactly once per invocation, either before returning or later
from the event loop. The timed region starts right before the first
invocation and stops at the ``count``-th resolve.

Example:
    >>> def fetch(deferred):
    ...     loop.call_later(0.01, deferred.resolve)
    >>> bench = Benchmark("fetch", fetch, defer=True)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from benchly.errors import DeferredStateError
from benchly.utils.logger import Logger

if TYPE_CHECKING:
    from benchly.benchmarks.base import Benchmark

logger = Logger.for_module(__name__)


class Deferred:
    """Drives one timed region of a deferred benchmark clone.

    Attributes:
        benchmark: The clone being timed.
        cycles: Invocations resolved so far in this region.
        elapsed: Duration of the region once finished (seconds).
        timestamp: Clock reading at the start of the region.
    """

    def __init__(self, benchmark: Benchmark) -> None:
        self.benchmark = benchmark
        self.cycles = 0
        self.elapsed = 0.0
        self.timestamp = 0.0
        self._future: asyncio.Future[float] | None = None
        self._in_call = False
        self._resolved_in_call = False
        self._finished = False
        self._cancelled = False

    @property
    def finished(self) -> bool:
        """True once the region ended (completed, failed or cancelled)."""
        return self._finished

    def start(self) -> asyncio.Future[float]:
        """Run setup, start the clock and make the first invocation.

        Returns:
            Future resolved with the elapsed time of the region.
        """
        clone = self.benchmark
        self._future = asyncio.get_running_loop().create_future()

        if clone.error is not None:
            self._finish(0.0, run_teardown=False)
            return self._future

        try:
            if clone.setup is not None:
                clone.setup()
        except Exception as exc:
            clone.error = exc
            self._finish(0.0, run_teardown=False)
            return self._future

        self.timestamp = clone.calibrator.now()
        self._drive()
        return self._future

    def resolve(self) -> None:
        """Signal that one invocation of the operation completed.

        Raises:
            DeferredStateError: If the region already finished normally.
        """
        clone = self.benchmark
        if self._finished:
            if self._cancelled:
                return
            raise DeferredStateError(clone.display_name)

        original = clone.original or clone
        if original.aborted:
            clone.running = False
            self._finish(0.0)
            return

        self.cycles += 1
        if self.cycles < clone.count:
            if self._in_call:
                self._resolved_in_call = True
            else:
                self._drive()
            return

        elapsed = clone.calibrator.now() - self.timestamp
        self._finish(elapsed)

    def cancel(self) -> bool:
        """End the region early; later resolve() calls are ignored.

        Returns:
            True if the region was still pending.
        """
        if self._finished:
            return False
        self._cancelled = True
        logger.debug(f"Cancelled pending deferred of '{self.benchmark.display_name}'")
        self._finish(0.0)
        return True

    def _drive(self) -> None:
        # Invocations that resolve synchronously are looped here instead of
        # recursing through resolve(), so large counts do not exhaust the stack.
        clone = self.benchmark
        while not self._finished:
            self._resolved_in_call = False
            self._in_call = True
            try:
                clone.fn(self)
            except Exception as exc:
                clone.error = exc
                self._finish(0.0)
                return
            finally:
                self._in_call = False
            if not self._resolved_in_call:
                return

    def _finish(self, elapsed: float, run_teardown: bool = True) -> None:
        clone = self.benchmark
        self._finished = True
        self.elapsed = elapsed
        if run_teardown and clone.teardown is not None:
            try:
                clone.teardown()
            except Exception as exc:
                if clone.error is None:
                    clone.error = exc
        if self._future is not None and not self._future.done():
            self._future.set_result(elapsed)
