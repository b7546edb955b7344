from ._f_cumulative_distribution import f_cumulative_distribution
from ._f_quantile import f_quantile

__all__ = [
    "f_cumulative_distribution",
    "f_quantile",
]
