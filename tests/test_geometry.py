from __future__ import annotations

import math

import numpy as np
import pytest

from galaxygen import NumpyRandomSource, distance, rotate_about


def test_distance_pythagorean():
    assert distance((0, 0), (3, 4)) == pytest.approx(5.0)
    assert distance((1, 1), (1, 1)) == 0.0


def test_distance_missing_operand_is_zero():
    assert distance(None, (3, 4)) == 0.0
    assert distance((3, 4), None) == 0.0


def test_distance_vectorised():
    pts = np.array([[3.0, 4.0], [0.0, 0.0], [-6.0, 8.0]])
    d = distance(pts, np.array([0.0, 0.0]))
    np.testing.assert_allclose(d, [5.0, 0.0, 10.0])


def test_rotate_by_zero_is_identity():
    assert rotate_about((12.5, -3.0), (4.0, 7.0), 0.0) == pytest.approx((12.5, -3.0))


def test_rotate_quarter_turn_about_origin():
    assert rotate_about((1.0, 0.0), (0.0, 0.0), math.pi / 2) == pytest.approx(
        (0.0, 1.0), abs=1e-12
    )


def test_rotate_about_offset_origin():
    assert rotate_about((2.0, 1.0), (1.0, 1.0), math.pi) == pytest.approx(
        (0.0, 1.0), abs=1e-12
    )


@pytest.mark.parametrize("theta", [0.3, -1.2, math.pi, 5.0])
def test_rotate_there_and_back(theta):
    p = (37.0, -11.5)
    origin = (-3.0, 8.0)
    back = rotate_about(rotate_about(p, origin, theta), origin, -theta)
    assert back == pytest.approx(p)


def test_rotate_preserves_distance_to_origin():
    p, origin = (5.0, 9.0), (1.0, -2.0)
    q = rotate_about(p, origin, 0.77)
    assert distance(origin, q) == pytest.approx(distance(origin, p))


def test_rotate_array_with_per_point_angles():
    pts = np.array([[1.0, 0.0], [0.0, 2.0]])
    out = rotate_about(pts, (0.0, 0.0), np.array([math.pi / 2, math.pi]))
    np.testing.assert_allclose(out, [[0.0, 1.0], [0.0, -2.0]], atol=1e-12)


def test_numpy_source_respects_bounds():
    src = NumpyRandomSource(seed=3)
    draws = [src.next_in_range(-2.5, 4.0) for _ in range(500)]
    assert min(draws) >= -2.5
    assert max(draws) <= 4.0


def test_numpy_source_integral_draws_whole_numbers_inclusive():
    src = NumpyRandomSource(seed=3, integral=True)
    draws = {src.next_in_range(-2, 2) for _ in range(500)}
    assert draws == {-2.0, -1.0, 0.0, 1.0, 2.0}


def test_numpy_source_seeded_is_repeatable():
    a = NumpyRandomSource(seed=42)
    b = NumpyRandomSource(seed=42)
    assert [a.next_in_range(0, 1) for _ in range(20)] == [
        b.next_in_range(0, 1) for _ in range(20)
    ]
