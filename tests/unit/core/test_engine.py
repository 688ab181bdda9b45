# tests/unit/core/test_engine.py
import logging

import numpy as np
import pytest

import crossprob
from crossprob.core.boundaries import BoundaryError
from crossprob.core.engine import ALGORITHMS, crossing_probability, noncrossing_probability
from crossprob.stats.ks import ks_plus_bounds


def test_registry_names():
    assert set(ALGORITHMS) == {"two-sided-direct", "two-sided-fft", "one-sided-reference", "one-sided-new"}


@pytest.mark.parametrize("method", sorted(ALGORITHMS))
def test_all_methods_agree_on_lower_bounds(method):
    lower = ks_plus_bounds(60, 0.12)
    expected = noncrossing_probability(lower=lower, method="two-sided-direct")
    assert noncrossing_probability(lower=lower, method=method) == pytest.approx(expected, rel=1e-9)


@pytest.mark.parametrize("method", sorted(ALGORITHMS))
def test_upper_only_and_crossing_complement(method):
    # Pr[X_(1) <= 0.5] for n = 2
    assert noncrossing_probability(upper=[0.5, 1.0], method=method) == pytest.approx(0.75, rel=1e-12)
    assert crossing_probability(upper=[0.5, 1.0], method=method) == pytest.approx(0.25, rel=1e-11)


def test_one_sided_methods_accept_an_implicit_side():
    # a non-binding side (all 0 lower / all 1 upper) may be passed explicitly
    p = noncrossing_probability(np.zeros(2), [0.5, 1.0], method="one-sided-new")
    assert p == pytest.approx(0.75, rel=1e-12)


def test_one_sided_methods_reject_two_binding_sides():
    with pytest.raises(BoundaryError):
        noncrossing_probability([0.1, 0.2], [0.5, 1.0], method="one-sided-reference")


def test_input_errors():
    with pytest.raises(ValueError, match="Unknown method"):
        noncrossing_probability(lower=[0.1], method="ecdf3")
    with pytest.raises(BoundaryError):
        noncrossing_probability()
    with pytest.raises(BoundaryError):
        crossprob.two_sided([0.1, 0.2], [0.5])
    with pytest.raises(BoundaryError):
        crossprob.two_sided([], [])
    with pytest.raises(BoundaryError):
        crossprob.one_sided_upper([0.5, float("nan")])


def test_degenerate_paths_are_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="crossprob.core.engine"):
        assert crossprob.two_sided([0.5], [0.4]) == 0.0
        assert crossprob.two_sided([0.0], [1.0]) == 1.0
        assert crossprob.one_sided_upper([0.0, 0.5]) == 0.0
        assert crossprob.poisson_noncrossing_probability([0.6], [0.4], 2.0) == 0.0
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "cross" in messages and "admit every sample" in messages
    assert "one_sided_upper: bounds cross or pin a sample" in messages
    assert "poisson: bounds cross or pin a point" in messages


def test_package_exports_version():
    assert isinstance(crossprob.__version__, str)
