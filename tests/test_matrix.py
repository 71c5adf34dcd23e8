import math
import sys

import pytest

from mmpde.matrix import Matrix2d

A = Matrix2d(2.0, 1.0, 0.5, 3.0)
B = Matrix2d(-1.0, 4.0, 2.0, 0.25)


def _entries(m):
    return (m.a00, m.a01, m.a10, m.a11)


def test_identity_is_neutral():
    assert A * Matrix2d.identity() == A
    assert Matrix2d.identity() * A == A


def test_inverse_times_matrix_is_identity():
    right = A * A.inverse()
    left = B.inverse() * B
    assert _entries(right) == pytest.approx((1.0, 0.0, 0.0, 1.0), abs=1e-12)
    assert _entries(left) == pytest.approx((1.0, 0.0, 0.0, 1.0), abs=1e-12)


def test_transpose_swaps_off_diagonal():
    assert A.transpose() == Matrix2d(2.0, 0.5, 1.0, 3.0)
    assert A.transpose().transpose() == A


def test_det_is_multiplicative():
    assert math.isclose((A * B).det(), A.det() * B.det())


def test_trace_is_additive():
    assert math.isclose((A + B).trace(), A.trace() + B.trace())


def test_singular_inverse_is_all_max():
    big = sys.float_info.max
    assert Matrix2d(1.0, 2.0, 2.0, 4.0).inverse() == Matrix2d(big, big, big, big)


def test_scalar_multiply_and_divide_round_trip():
    assert _entries((A * 2.5) / 2.5) == pytest.approx(_entries(A))
    assert 2.5 * A == A * 2.5


def test_divide_by_zero_raises():
    assert A / 2 == Matrix2d(1.0, 0.5, 0.25, 1.5)
    with pytest.raises(ZeroDivisionError):
        A / 0


def test_multiply_by_unsupported_type_raises():
    assert A * 2 == Matrix2d(4.0, 2.0, 1.0, 6.0)
    with pytest.raises(TypeError):
        A * "x"


def test_default_matrix_is_zero():
    assert Matrix2d().det() == 0
    assert Matrix2d() + A == A


def test_sqrt_of_spd_matrix_is_cholesky_factor():
    s = Matrix2d(4.0, 2.0, 2.0, 3.0)
    low = s.sqrt()
    assert low.a01 == 0
    assert low.a00 > 0 and low.a11 > 0
    assert _entries(low * low.transpose()) == pytest.approx(_entries(s))


def test_sqrt_stops_at_first_non_positive_pivot():
    assert Matrix2d(-1.0, 0.5, 0.5, 2.0).sqrt() == Matrix2d(-1.0, 0.0, 0.5, 2.0)


def test_sqrt_stops_at_second_non_positive_pivot():
    assert Matrix2d(1.0, 2.0, 2.0, 1.0).sqrt() == Matrix2d(1.0, 0.0, 2.0, 1.0)


def test_str_format():
    assert str(Matrix2d(1, 2, 3, 4)) == "[1, 2]\n[3, 4]"