"""Mesh adaptation functionals and their derivatives."""

from __future__ import annotations

import math
from enum import Enum, auto

from .matrix import Matrix2d

_DIM = 2
_THETA = 1.0 / 3.0
_P = 1.5


class Functional(Enum):
    """The adaptation functional driving mesh movement."""

    HUANG = auto()
    WINSLOW = auto()


def _pow(base: float, exponent: float) -> float:
    """Real power that yields inf or nan where the math module would raise."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        if base == 0:
            return math.inf
        return math.nan


def functional_huang(j, det_j, m):
    """Evaluate Huang's functional.

    Returns ``(g, g_j, g_det_j)``: the functional value, its derivative with
    respect to the Jacobian ``j`` (transposed layout) and with respect to
    ``det_j``.
    """
    dp = _P * _DIM
    det_m = m.det()
    m_inv = m.inverse()
    jt = j.transpose()
    tr_jmj = (j * m_inv * jt).trace()
    dim_term = _pow(_DIM, dp / 2)

    g = _THETA * det_m * _pow(tr_jmj, dp / 2) + (1 - 2 * _THETA) * dim_term * _pow(
        det_m, 1 - _P
    ) * _pow(det_j, _P)
    g_j = m_inv * jt * (dp * _THETA * det_m * _pow(tr_jmj, dp / 2 - 1))
    g_det_j = _P * (1 - 2 * _THETA) * dim_term * _pow(det_m, 1 - _P) * _pow(det_j, _P - 1)
    return g, g_j, g_det_j


def functional_winslow(j, m):
    """Evaluate Winslow's functional; returns ``(g, g_j, g_det_j)``."""
    m_inv = m.inverse()
    jt = j.transpose()
    g = 0.5 * (j * m_inv * jt).trace()
    return g, m_inv * jt, 0.0