# tests/unit/stats/test_ks.py
import numpy as np
import pytest
from scipy import stats

from crossprob.core.engine import one_sided_upper
from crossprob.stats.ks import ks_cdf, ks_minus_bounds, ks_plus_bounds, ks_plus_cdf, ks_two_sided_bounds


def test_bounds_shape_and_clipping():
    lower, upper = ks_two_sided_bounds(4, 0.3)
    np.testing.assert_allclose(lower, [0.0, 0.2, 0.45, 0.7])
    np.testing.assert_allclose(upper, [0.3, 0.55, 0.8, 1.0])


@pytest.mark.parametrize("n,d", [(5, 0.4), (30, 0.2), (80, 0.1)])
def test_ks_cdf_matches_scipy(n, d):
    assert ks_cdf(n, d) == pytest.approx(stats.kstwo.cdf(d, n), rel=1e-8, abs=1e-12)
    assert ks_cdf(n, d, use_fft=False) == pytest.approx(ks_cdf(n, d), rel=1e-10)


@pytest.mark.parametrize("variant", ["new", "reference"])
def test_ks_plus_cdf_matches_scipy(variant):
    assert ks_plus_cdf(30, 0.15, variant) == pytest.approx(stats.ksone.cdf(0.15, 30), rel=1e-8)


def test_plus_and_minus_have_the_same_distribution():
    n, d = 40, 0.12
    assert one_sided_upper(ks_minus_bounds(n, d)) == pytest.approx(ks_plus_cdf(n, d), rel=1e-10)


def test_zero_distance_and_bad_input():
    # X_(3) >= 1 has probability zero
    assert ks_plus_cdf(3, 0.0) == 0.0
    assert ks_cdf(3, 1.0 / 6.0) == 0.0
    with pytest.raises(ValueError):
        ks_plus_bounds(3, -0.1)
    with pytest.raises(ValueError):
        ks_minus_bounds(0, 0.1)
