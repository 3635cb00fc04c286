"""Exception taxonomy for benchly.

Operation failures are not represented here: whatever the measured callable
raises is captured into ``Benchmark.error`` and reported through an
``error`` event rather than propagated.
"""


class BenchlyError(Exception):
    """Base exception for benchly errors."""

    pass


class NoUsableClockError(BenchlyError):
    """Raised when no clock source with a finite resolution is available."""

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        names = ", ".join(candidates) if candidates else "(none)"
        super().__init__(f"Unable to find a working clock; tried: {names}")


class UnmeasurableOperationError(BenchlyError):
    """Stored in ``Benchmark.error`` when no bounded iteration count exists.

    Happens when an operation keeps clocking zero elapsed time, so the
    count needed to reach the minimum run duration grows without bound.
    """

    def __init__(self, name: str, cycles: int) -> None:
        self.name = name
        self.cycles = cycles
        super().__init__(
            f"Benchmark '{name}' cannot be measured: iteration count became "
            f"unbounded after {cycles} cycle(s)"
        )


class DeferredStateError(BenchlyError):
    """Raised when a Deferred is resolved more often than it was invoked."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Deferred for benchmark '{name}' resolved while not pending")
