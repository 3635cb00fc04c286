"""Pydantic models for benchmark and suite configuration."""

from collections.abc import Callable
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from benchly.models.constants import (
    DEFAULT_DELAY,
    DEFAULT_INIT_COUNT,
    DEFAULT_MAX_TIME,
    DEFAULT_MIN_SAMPLES,
    DEFAULT_MIN_TIME,
    ENV_DELAY,
    ENV_INIT_COUNT,
    ENV_MAX_TIME,
    ENV_MIN_SAMPLES,
    ENV_MIN_TIME,
    EventType,
)
from benchly.utils.env import get_env

Listener = Callable[..., Any]


def _env_default(name: str, default: Any, as_type: type) -> Callable[[], Any]:
    """Build a default factory that reads ``name`` from the environment."""

    def factory() -> Any:
        return get_env(name, default=default, as_type=as_type)

    return factory


class _ListenerOptions(BaseModel):
    """Lifecycle listeners shared by benchmarks and suites."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    on_start: Listener | None = Field(None, description="Called when running starts")
    on_cycle: Listener | None = Field(None, description="Called after each cycle")
    on_abort: Listener | None = Field(None, description="Called when aborted")
    on_error: Listener | None = Field(None, description="Called when an operation fails")
    on_reset: Listener | None = Field(None, description="Called when reset")
    on_complete: Listener | None = Field(None, description="Called when running completes")

    _LISTENER_FIELDS: ClassVar[dict[str, EventType]] = {
        "on_start": EventType.START,
        "on_cycle": EventType.CYCLE,
        "on_abort": EventType.ABORT,
        "on_error": EventType.ERROR,
        "on_reset": EventType.RESET,
        "on_complete": EventType.COMPLETE,
    }

    def listener_items(self) -> list[tuple[EventType, Listener]]:
        """Return (event type, listener) pairs for every listener that is set."""
        return [
            (event_type, getattr(self, field))
            for field, event_type in self._LISTENER_FIELDS.items()
            if getattr(self, field) is not None
        ]


class BenchmarkOptions(_ListenerOptions):
    """Configuration for a single benchmark.

    Numeric defaults can be overridden process-wide through the
    BENCHLY_MAX_TIME, BENCHLY_MIN_TIME, BENCHLY_MIN_SAMPLES,
    BENCHLY_INIT_COUNT and BENCHLY_DELAY environment variables.
    """

    name: str | None = Field(None, description="Name used to identify the benchmark")
    id: int | str | None = Field(
        None, description="Identifier; a unique integer is assigned when omitted"
    )
    setup: Callable[[], Any] | None = Field(
        None, description="Run before each timed region, outside the timing"
    )
    teardown: Callable[[], Any] | None = Field(
        None, description="Run after each timed region, outside the timing"
    )
    min_time: float = Field(
        default_factory=_env_default(ENV_MIN_TIME, DEFAULT_MIN_TIME, float),
        ge=0,
        description="Minimum duration of one timed region in seconds (0 = calibrated)",
    )
    max_time: float = Field(
        default_factory=_env_default(ENV_MAX_TIME, DEFAULT_MAX_TIME, float),
        ge=0,
        description="Maximum total sampling time in seconds (advisory)",
    )
    init_count: int = Field(
        default_factory=_env_default(ENV_INIT_COUNT, DEFAULT_INIT_COUNT, int),
        ge=1,
        description="Iteration count of the first cycle",
    )
    min_samples: int = Field(
        default_factory=_env_default(ENV_MIN_SAMPLES, DEFAULT_MIN_SAMPLES, int),
        ge=1,
        description="Samples required before sampling may stop",
    )
    delay: float = Field(
        default_factory=_env_default(ENV_DELAY, DEFAULT_DELAY, float),
        ge=0,
        description="Pause between cycles/benchmarks in seconds when asynchronous",
    )
    defer: bool = Field(
        False, description="The operation signals completion through a Deferred"
    )
    asynchronous: bool = Field(
        False, description="Yield to the event loop between cycles and benchmarks"
    )

    def merged(self, **overrides: Any) -> "BenchmarkOptions":
        """Return a validated copy with ``overrides`` applied."""
        data = {name: getattr(self, name) for name in type(self).model_fields}
        data.update(overrides)
        return type(self).model_validate(data)


class SuiteOptions(_ListenerOptions):
    """Configuration for a suite of benchmarks."""

    name: str | None = Field(None, description="Name used to identify the suite")
    on_add: Listener | None = Field(
        None, description="Called before a benchmark is added; may cancel"
    )

    def listener_items(self) -> list[tuple[EventType, Listener]]:
        """Return (event type, listener) pairs, including ``on_add``."""
        items = super().listener_items()
        if self.on_add is not None:
            items.append((EventType.ADD, self.on_add))
        return items
