"""Tests for sample statistics and the sampling loop."""

import math

import pytest

from benchly.benchmarks.base import Benchmark
from benchly.stats.sampler import Sampler, compute_stats
from benchly.stats.tables import T_INFINITY, T_TABLE, t_critical


def test_compute_stats_known_sample():
    """Test the statistics of a small known sample."""
    stats = compute_stats([1.0, 2.0, 3.0, 4.0, 5.0])

    assert stats.mean == 3.0
    assert stats.variance == pytest.approx(2.5)
    assert stats.deviation == pytest.approx(math.sqrt(2.5))
    assert stats.sem == pytest.approx(math.sqrt(2.5) / math.sqrt(5))
    assert stats.moe == pytest.approx(stats.sem * 2.776)
    assert stats.rme == pytest.approx(stats.moe / 3.0 * 100)
    assert stats.size == 5


def test_compute_stats_degenerate_samples():
    """Test empty and single-value samples."""
    empty = compute_stats([])
    assert empty.mean == 0.0
    assert empty.rme == 0.0

    single = compute_stats([0.25])
    assert single.mean == 0.25
    assert single.variance == 0.0
    assert single.rme == 0.0


def test_t_critical_lookup():
    """Test the t table lookup, including df 0 and df beyond the table."""
    assert t_critical(0) == T_TABLE[1]
    assert t_critical(9) == 2.262
    assert t_critical(30) == 2.042
    assert t_critical(31) == T_INFINITY
    assert t_critical(500) == 1.96


def test_rme_shrinks_with_sample_size():
    """Test rme is non-negative and smaller for a larger stationary sample."""

    def noisy(size):
        return [1.0 + 0.1 * ((i % 5) - 2) for i in range(size)]

    small = compute_stats(noisy(5))
    large = compute_stats(noisy(100))

    assert small.rme >= 0
    assert large.rme >= 0
    assert large.rme < small.rme


def test_sampling_collects_min_samples(calibrator, unit_op):
    """Test a full sampling run on a deterministic 1 ms operation."""
    bench = Benchmark(
        "unit",
        unit_op,
        calibrator=calibrator,
        min_time=0.01,
        max_time=0.2,
        min_samples=5,
    )
    cycles = []
    bench.on("cycle", lambda event: cycles.append(event.target.count))

    bench.run()

    assert not bench.running
    assert not bench.aborted
    assert bench.error is None
    assert bench.stats.size >= 5
    assert bench.stats.mean == pytest.approx(0.001)
    assert bench.hz == pytest.approx(1000)
    assert bench.times.period == pytest.approx(0.001)
    assert bench.times.elapsed > 0.2
    assert bench.stats.rme >= 0
    assert cycles
    # Later rounds start at the established count instead of growing again
    assert bench.cycles <= 3


def test_sampling_stops_when_max_time_exceeded(calibrator, unit_op):
    """Test max_time is honored between sampling rounds."""
    bench = Benchmark(
        "unit", unit_op, calibrator=calibrator, min_time=0.05, max_time=0.0, min_samples=1
    )

    bench.run()

    assert bench.stats.size == 1


def test_unmeasurable_operation(calibrator):
    """Test an operation that clocks zero ends with an error but is not aborted."""
    bench = Benchmark("noop", lambda: None, calibrator=calibrator, min_time=0.01)
    events = []
    bench.on("error complete", lambda event: events.append(event.type))

    bench.run()

    assert events == ["error", "complete"]
    assert bench.error is not None
    assert not bench.aborted
    assert not bench.running
    assert bench.stats.size == 0
    assert math.isinf(bench.hz)


def test_enqueue_uses_established_count(calibrator, unit_op):
    """Test new clones start from the sampler's learned count."""
    bench = Benchmark("unit", unit_op, calibrator=calibrator, init_count=3)
    sampler = Sampler(bench)

    first = sampler.enqueue()
    sampler.count = 250
    second = sampler.enqueue()

    assert first.init_count == 3
    assert second.init_count == 250
    assert second.original is bench
    assert second.id == bench.id
    assert sampler.queue == [first, second]
