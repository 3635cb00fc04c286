"""Tests for the Mann-Whitney significance comparator."""

import pytest

from benchly.benchmarks.base import Benchmark
from benchly.models.stats_models import Stats
from benchly.stats.compare import compare_samples, mann_whitney
from benchly.stats.tables import U_TABLE, u_critical


def _sample(base, size):
    return [base * (1 + 0.01 * i) for i in range(size)]


def test_ten_times_faster_is_significant():
    """Test samples of 10 differing by 10x are told apart with the U table."""
    fast = _sample(0.001, 10)
    slow = _sample(0.01, 10)

    result = mann_whitney(fast, slow)

    assert result.u1 == 0
    assert result.u2 == 100
    assert result.z is None
    assert result.critical == U_TABLE[10][7]
    assert result.significant
    assert result.verdict == 1
    assert compare_samples(slow, fast) == -1


def test_normal_approximation_for_large_samples():
    """Test more than 30 values in total use the z statistic."""
    fast = _sample(0.001, 20)
    slow = _sample(0.01, 20)

    result = mann_whitney(fast, slow)

    assert result.critical is None
    assert result.z == pytest.approx(-200 / (400 * 41 / 12) ** 0.5)
    assert abs(result.z) > 1.96
    assert result.verdict == 1


def test_identical_samples_are_indeterminate():
    """Test ties score one half and never reach significance."""
    sample = _sample(0.001, 10)

    result = mann_whitney(sample, list(sample))

    assert result.u1 == result.u2 == 50
    assert not result.significant
    assert result.verdict == 0


def test_small_samples_are_never_significant():
    """Test sizes below the U table's range give no verdict."""
    assert compare_samples([1.0, 2.0], [10.0, 20.0]) == 0
    assert compare_samples([1.0, 2.0, 3.0], [10.0, 20.0, 30.0, 40.0]) == 0
    assert compare_samples([], []) == 0
    assert u_critical(4, 3) == 0
    assert u_critical(2, 10) == 0
    assert u_critical(5, 3) == 0
    assert u_critical(12, 7) == U_TABLE[12][4]


def test_compare_is_antisymmetric():
    """Test compare(a, b) == -compare(b, a) for overlapping and disjoint samples."""
    pairs = [
        (_sample(0.001, 8), _sample(0.002, 8)),
        (_sample(0.001, 6), _sample(0.00105, 9)),
        (_sample(0.003, 25), _sample(0.001, 12)),
    ]
    for first, second in pairs:
        assert compare_samples(first, second) == -compare_samples(second, first)


def test_benchmark_compare(unit_op):
    """Test Benchmark.compare uses the sample and is 0 against itself."""
    fast = Benchmark("fast", unit_op)
    slow = Benchmark("slow", unit_op)
    fast.stats = Stats(sample=_sample(0.001, 10))
    slow.stats = Stats(sample=_sample(0.01, 10))

    assert fast.compare(fast) == 0
    assert fast.compare(slow) == 1
    assert slow.compare(fast) == -1
