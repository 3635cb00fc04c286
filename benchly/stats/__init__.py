"""Sample statistics and significance testing."""

from benchly.stats.compare import MannWhitneyResult, compare_samples, mann_whitney
from benchly.stats.sampler import Sampler, compute_stats
from benchly.stats.tables import T_INFINITY, T_TABLE, U_TABLE, t_critical, u_critical

__all__ = [
    "MannWhitneyResult",
    "Sampler",
    "T_INFINITY",
    "T_TABLE",
    "U_TABLE",
    "compare_samples",
    "compute_stats",
    "mann_whitney",
    "t_critical",
    "u_critical",
]
