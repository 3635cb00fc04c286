"""Constants for benchly models, timing and scheduling."""

from enum import StrEnum, auto


class EventType(StrEnum):
    """Lifecycle event types emitted by benchmarks and suites."""

    ABORT = auto()
    ADD = auto()
    COMPLETE = auto()
    CYCLE = auto()
    ERROR = auto()
    RESET = auto()
    START = auto()


class CycleState(StrEnum):
    """States of the cycle controller for one timed region."""

    IDLE = auto()
    TIMING = auto()
    GROWING = auto()
    SETTLED = auto()
    ERRORING = auto()
    ABORTED = auto()


# Option defaults (seconds where applicable)
DEFAULT_MAX_TIME = 5.0
DEFAULT_MIN_TIME = 0.0  # 0 means "derive from the clock resolution"
DEFAULT_MIN_SAMPLES = 5
DEFAULT_INIT_COUNT = 1
DEFAULT_DELAY = 0.005

# Clock calibration
RESOLUTION_SAMPLES = 30
TARGET_UNCERTAINTY = 0.01  # 1% relative timing error
MIN_RUN_DURATION_FLOOR = 0.05
MAX_CLOCK_SPINS = 10_000_000

# Count boost for cycles that clocked zero, keyed by cycle index.
# A divisor of 0 yields an unbounded count.
ZERO_ELAPSED_DIVISORS = {1: 4096, 2: 512, 3: 64, 4: 8, 5: 0}
ZERO_ELAPSED_BASE = 4e6

# Clones kept in flight by the sampler
MAX_QUEUED_CLONES = 2

# Environment variables
ENV_MAX_TIME = "BENCHLY_MAX_TIME"
ENV_MIN_TIME = "BENCHLY_MIN_TIME"
ENV_MIN_SAMPLES = "BENCHLY_MIN_SAMPLES"
ENV_INIT_COUNT = "BENCHLY_INIT_COUNT"
ENV_DELAY = "BENCHLY_DELAY"
ENV_LOG_LEVEL = "BENCHLY_LOG_LEVEL"
ENV_LOG_FILE = "BENCHLY_LOG_FILE"
