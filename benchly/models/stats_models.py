"""Pydantic models for benchmark statistics and timings."""

from pydantic import BaseModel, Field


class Stats(BaseModel):
    """Sample statistics of a benchmark (all times in seconds per operation)."""

    sample: list[float] = Field(
        default_factory=list, description="Period of every completed sampling round"
    )
    mean: float = Field(0.0, ge=0, description="Sample arithmetic mean")
    variance: float = Field(0.0, ge=0, description="Sample variance (n - 1)")
    deviation: float = Field(0.0, ge=0, description="Sample standard deviation")
    sem: float = Field(0.0, ge=0, description="Standard error of the mean")
    moe: float = Field(0.0, ge=0, description="Margin of error at 95% confidence")
    rme: float = Field(
        0.0, ge=0, description="Relative margin of error, percent of the mean"
    )

    @property
    def size(self) -> int:
        """Number of samples collected."""
        return len(self.sample)


class Times(BaseModel):
    """Timing figures of a benchmark (seconds)."""

    cycle: float = Field(0.0, description="Duration of the last cycle")
    period: float = Field(0.0, description="Time per operation")
    elapsed: float = Field(0.0, description="Total wall time of the run")
    timestamp: float = Field(0.0, description="Clock reading when the run started")
