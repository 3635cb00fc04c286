"""Mann-Whitney U significance test between two benchmark samples.

Samples hold periods (seconds per operation), so the sample with the
smaller U statistic is the faster one.

Usage:
    result = mann_whitney(bench_a.stats.sample, bench_b.stats.sample)
    if result.significant:
        print("a is faster" if result.verdict == 1 else "b is faster")
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from benchly.stats.tables import u_critical

# Combined sample size above which the normal approximation is used
NORMAL_APPROXIMATION_SIZE = 30
Z_CRITICAL = 1.96

# Sample sizes covered by the U table; smaller samples never differ
MIN_TABLE_SIZE = 3
MIN_TABLE_MAX_SIZE = 5


@dataclass
class MannWhitneyResult:
    """Outcome of a Mann-Whitney U test.

    Attributes:
        u1: U statistic of the first sample.
        u2: U statistic of the second sample.
        u: min(u1, u2).
        z: Normal approximation z-score (None when the U table was used).
        critical: Critical U from the table (None when z was used).
        significant: Whether the samples differ at 95% confidence.
        verdict: 1 if the first sample is faster, -1 if slower, 0 if
            indeterminate.
    """

    u1: float
    u2: float
    u: float
    z: float | None
    critical: int | None
    significant: bool
    verdict: int


def _score(x: float, other: Sequence[float]) -> float:
    return sum(1 if y < x else 0.5 if y == x else 0 for y in other)


def _u_statistic(sample: Sequence[float], other: Sequence[float]) -> float:
    return sum(_score(x, other) for x in sample)


def mann_whitney(sample1: Sequence[float], sample2: Sequence[float]) -> MannWhitneyResult:
    """Run a two-sided Mann-Whitney U test on two samples of periods.

    With more than 30 values in total the normal approximation is used and
    the difference is significant when ``|z| > 1.96``. Otherwise the U
    statistic is checked against the critical value table; samples too
    small for the table are never significant.

    Args:
        sample1: Periods of the first benchmark.
        sample2: Periods of the second benchmark.

    Returns:
        MannWhitneyResult with the statistics and the verdict.
    """
    size1 = len(sample1)
    size2 = len(sample2)
    u1 = _u_statistic(sample1, sample2)
    u2 = _u_statistic(sample2, sample1)
    u = min(u1, u2)

    z: float | None = None
    critical: int | None = None
    if size1 + size2 > NORMAL_APPROXIMATION_SIZE:
        z = (u - size1 * size2 / 2) / math.sqrt(size1 * size2 * (size1 + size2 + 1) / 12)
        significant = abs(z) > Z_CRITICAL
    else:
        critical = u_critical(size1, size2)
        in_table = min(size1, size2) >= MIN_TABLE_SIZE and max(size1, size2) >= MIN_TABLE_MAX_SIZE
        significant = in_table and u <= critical

    verdict = (1 if u == u1 else -1) if significant else 0
    return MannWhitneyResult(u1, u2, u, z, critical, significant, verdict)


def compare_samples(sample1: Sequence[float], sample2: Sequence[float]) -> int:
    """Return 1 if ``sample1`` is significantly faster, -1 if slower, else 0."""
    return mann_whitney(sample1, sample2).verdict
