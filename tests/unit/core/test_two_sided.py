# tests/unit/core/test_two_sided.py
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from scipy import stats

from crossprob.core.engine import one_sided_lower, two_sided
from crossprob.stats.berk_jones import mn_plus_bounds
from crossprob.stats.ks import ks_two_sided_bounds

hypothesis = pytest.importorskip("hypothesis")
given = hypothesis.given
settings = hypothesis.settings
seed = hypothesis.seed
st = hypothesis.strategies


@pytest.mark.parametrize("use_fft", [True, False])
def test_single_sample_is_interval_length(use_fft):
    assert two_sided([0.2], [0.7], use_fft) == pytest.approx(0.5, rel=1e-12)
    assert two_sided([0.0], [0.25], use_fft) == pytest.approx(0.25, rel=1e-12)


@pytest.mark.parametrize("use_fft", [True, False])
def test_two_samples_closed_forms(use_fft):
    # Pr[X_(1) <= 0.5]
    assert two_sided([0.0, 0.0], [0.5, 1.0], use_fft) == pytest.approx(0.75, rel=1e-12)
    # Pr[X_(1) <= 0.7, X_(2) >= 0.15] = 1 - 0.3**2 - 0.15**2
    assert two_sided([0.0, 0.15], [0.7, 1.0], use_fft) == pytest.approx(0.8875, rel=1e-12)
    # 2 * area{0.1<=x1<=0.6, max(0.3,x1)<=x2<=0.9}
    assert two_sided([0.1, 0.3], [0.6, 0.9], use_fft) == pytest.approx(0.51, rel=1e-12)


@pytest.mark.parametrize("use_fft", [True, False])
def test_trivial_bounds_give_exactly_one(use_fft):
    assert two_sided(np.zeros(7), np.ones(7), use_fft) == 1.0


@pytest.mark.parametrize("use_fft", [True, False])
def test_crossing_bounds_give_exactly_zero(use_fft):
    assert two_sided([0.5, 0.5], [0.4, 1.0], use_fft) == 0.0
    assert two_sided([0.6, 0.0], [1.0, 0.5], use_fft) == 0.0


@pytest.mark.parametrize("use_fft", [True, False])
def test_pinned_bounds_give_exactly_zero(use_fft):
    # upper[0] == 0 forces X_(1) <= 0
    assert two_sided(np.zeros(150), np.linspace(0.0, 1.0, 150), use_fft) == 0.0
    assert two_sided([0.2, 0.5], [0.5, 0.5], use_fft) == 0.0
    assert two_sided([0.0, 1.0], [1.0, 1.0], use_fft) == 0.0


def test_non_monotone_input_equals_its_envelope():
    assert two_sided([0.3, 0.1], [0.6, 0.9]) == two_sided([0.3, 0.3], [0.6, 0.9])
    assert two_sided([0.1, 0.2], [0.95, 0.6]) == two_sided([0.1, 0.2], [0.6, 0.6])


def test_fft_matches_direct_on_wide_windows():
    # windows grow to ~n counts, well above the FFT threshold
    n = 300
    lower = mn_plus_bounds(n, 0.01)
    upper = np.ones(n)
    p_fft = two_sided(lower, upper, use_fft=True)
    p_direct = two_sided(lower, upper, use_fft=False)
    assert p_fft == pytest.approx(p_direct, rel=1e-9)
    assert p_fft == pytest.approx(one_sided_lower(lower), rel=1e-9)


def test_fft_matches_direct_two_sided_ks():
    lower, upper = ks_two_sided_bounds(250, 0.25)
    assert two_sided(lower, upper, True) == pytest.approx(two_sided(lower, upper, False), rel=1e-9)


@pytest.mark.parametrize("n,d", [(10, 0.3), (50, 0.15), (120, 0.08)])
def test_agrees_with_scipy_kstwo(n, d):
    lower, upper = ks_two_sided_bounds(n, d)
    assert two_sided(lower, upper) == pytest.approx(stats.kstwo.cdf(d, n), rel=1e-8, abs=1e-12)


def test_daniels_identity_with_implicit_upper():
    n, alpha = 50, 0.3
    lower = alpha * np.arange(1, n + 1) / n
    assert two_sided(lower, np.ones(n)) == pytest.approx(1.0 - alpha, rel=1e-10)


def test_reflection_symmetry():
    lower, upper = ks_two_sided_bounds(40, 0.2)
    lower = lower.copy()
    lower[5] = 0.2
    p = two_sided(lower, upper)
    q = two_sided(1.0 - upper[::-1], 1.0 - lower[::-1])
    assert p == pytest.approx(q, rel=1e-10)


def test_concurrent_calls_are_bit_identical():
    lower, upper = ks_two_sided_bounds(200, 0.12)
    expected = two_sided(lower, upper)
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: two_sided(lower, upper), range(8)))
    assert results == [expected] * 8


_bounds = st.lists(st.floats(min_value=0.0, max_value=1.0, allow_nan=False), min_size=1, max_size=8)


@seed(0)
@settings(max_examples=50, deadline=None)
@given(_bounds, st.data())
def test_tightening_never_increases_probability(lower, data):
    n = len(lower)
    upper = data.draw(st.lists(st.floats(min_value=0.0, max_value=1.0), min_size=n, max_size=n))
    extra = data.draw(st.lists(st.floats(min_value=0.0, max_value=1.0), min_size=n, max_size=n))
    p = two_sided(lower, upper)
    tighter_lower = np.maximum(lower, extra)
    tighter_upper = np.minimum(upper, extra) if data.draw(st.booleans()) else np.asarray(upper)
    q = two_sided(tighter_lower, tighter_upper)
    assert 0.0 <= p <= 1.0
    assert q <= p + 1e-12


@seed(0)
@settings(max_examples=50, deadline=None)
@given(_bounds, st.data())
def test_normalized_input_is_a_fixed_point(lower, data):
    n = len(lower)
    upper = data.draw(st.lists(st.floats(min_value=0.0, max_value=1.0), min_size=n, max_size=n))
    norm_lower = np.maximum.accumulate(lower)
    norm_upper = np.minimum.accumulate(np.asarray(upper)[::-1])[::-1]
    assert two_sided(lower, upper) == two_sided(norm_lower, norm_upper)
