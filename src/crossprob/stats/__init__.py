"""Statistics built on the non-crossing engine: Berk-Jones M_n^+ and Kolmogorov-Smirnov."""

from .berk_jones import (
    OrderStatsBound,
    berk_jones_bound,
    inverse_mn_plus,
    mn_minus_bounds,
    mn_plus_bounds,
    mn_plus_cdf,
    mn_plus_pvalue,
    mn_plus_statistic,
    mn_plus_thresholds,
    order_statistic_cdf,
)
from .ks import ks_cdf, ks_minus_bounds, ks_plus_bounds, ks_plus_cdf, ks_two_sided_bounds

__all__ = [
    "OrderStatsBound",
    "berk_jones_bound",
    "inverse_mn_plus",
    "ks_cdf",
    "ks_minus_bounds",
    "ks_plus_bounds",
    "ks_plus_cdf",
    "ks_two_sided_bounds",
    "mn_minus_bounds",
    "mn_plus_bounds",
    "mn_plus_cdf",
    "mn_plus_pvalue",
    "mn_plus_statistic",
    "mn_plus_thresholds",
    "order_statistic_cdf",
]
