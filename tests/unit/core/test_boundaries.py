# tests/unit/core/test_boundaries.py
import numpy as np
import pytest

from crossprob.core.boundaries import (
    BoundaryError,
    BoundaryPair,
    as_bound_array,
    lower_envelope,
    reflect,
    upper_envelope,
)


@pytest.mark.parametrize(
    "values",
    [[], [0.1, 1.2], [-0.1], [float("nan")], [float("inf")], [[0.1, 0.2]], ["a"]],
)
def test_invalid_bounds_rejected(values):
    with pytest.raises(BoundaryError):
        as_bound_array("lower", values)


def test_boundary_error_is_value_error():
    assert issubclass(BoundaryError, ValueError)


def test_length_mismatch():
    with pytest.raises(BoundaryError, match="Expecting 2"):
        BoundaryPair.from_arrays([0.1, 0.2], [0.5])


def test_arrays_are_read_only_copies():
    src = [0.1, 0.2]
    arr = as_bound_array("lower", src)
    with pytest.raises(ValueError):
        arr[0] = 0.5


def test_envelopes():
    np.testing.assert_array_equal(lower_envelope(np.array([0.3, 0.1, 0.5, 0.2])), [0.3, 0.3, 0.5, 0.5])
    np.testing.assert_array_equal(upper_envelope(np.array([0.9, 0.4, 0.8, 0.6])), [0.4, 0.4, 0.6, 0.6])


def test_reflect_is_an_involution():
    lo = np.array([0.0, 0.2, 0.4])
    hi = np.array([0.5, 0.7, 1.0])
    rlo, rhi = reflect(lo, hi)
    np.testing.assert_allclose(rlo, [0.0, 0.3, 0.5])
    np.testing.assert_allclose(rhi, [0.6, 0.8, 1.0])
    back = BoundaryPair(rlo, rhi).reflected()
    np.testing.assert_allclose(back.lower, lo)
    np.testing.assert_allclose(back.upper, hi)


def test_trivial_and_infeasible():
    assert BoundaryPair.from_lower([0.0, 0.0]).is_trivial()
    assert BoundaryPair.from_upper([1.0, 1.0]).is_trivial()
    assert not BoundaryPair.from_arrays([0.0, 0.1], [1.0, 1.0]).is_trivial()
    assert BoundaryPair.from_arrays([0.5, 0.5], [0.4, 1.0]).is_infeasible()
    # crossing only after normalization
    assert BoundaryPair.from_arrays([0.6, 0.0], [1.0, 0.5]).is_infeasible()
    assert not BoundaryPair.from_arrays([0.1, 0.2], [0.5, 0.9]).is_infeasible()


def test_touching_bounds_are_infeasible():
    # X_(2) pinned to 0.5
    assert BoundaryPair.from_arrays([0.1, 0.5], [0.6, 0.5]).is_infeasible()
    assert BoundaryPair.from_arrays([0.3], [0.3]).is_infeasible()
    # an upper bound of 0 or a lower bound of 1 touches the implicit side
    assert BoundaryPair.from_upper([0.0, 0.4, 0.9]).is_infeasible()
    assert BoundaryPair.from_lower([0.1, 0.4, 1.0]).is_infeasible()
    assert BoundaryPair.from_arrays(np.zeros(5), np.linspace(0.0, 1.0, 5)).is_infeasible()
    assert not BoundaryPair.from_arrays([0.0, 0.5], [0.5, 1.0]).is_infeasible()
