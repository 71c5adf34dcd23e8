"""Small dense 2x2 matrices used throughout the mesh mover."""

from __future__ import annotations

import math
import sys
from dataclasses import astuple, dataclass
from numbers import Real

_REAL_MAX = sys.float_info.max


@dataclass(frozen=True)
class Matrix2d:
    """An immutable 2x2 matrix ``[[a00, a01], [a10, a11]]``."""

    a00: float = 0.0
    a01: float = 0.0
    a10: float = 0.0
    a11: float = 0.0

    @classmethod
    def identity(cls) -> Matrix2d:
        """Return the 2x2 identity matrix."""
        return cls(1.0, 0.0, 0.0, 1.0)

    def __mul__(self, other):
        if isinstance(other, Matrix2d):
            return Matrix2d(
                self.a00 * other.a00 + self.a01 * other.a10,
                self.a00 * other.a01 + self.a01 * other.a11,
                self.a10 * other.a00 + self.a11 * other.a10,
                self.a10 * other.a01 + self.a11 * other.a11,
            )
        if isinstance(other, Real):
            return Matrix2d(
                self.a00 * other, self.a01 * other, self.a10 * other, self.a11 * other
            )
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, Real):
            return self * other
        return NotImplemented

    def __add__(self, other):
        if not isinstance(other, Matrix2d):
            return NotImplemented
        return Matrix2d(
            self.a00 + other.a00,
            self.a01 + other.a01,
            self.a10 + other.a10,
            self.a11 + other.a11,
        )

    def __truediv__(self, scalar):
        if not isinstance(scalar, Real):
            return NotImplemented
        if scalar == 0:
            raise ZeroDivisionError("matrix divided by zero")
        return Matrix2d(
            self.a00 / scalar, self.a01 / scalar, self.a10 / scalar, self.a11 / scalar
        )

    def transpose(self) -> Matrix2d:
        return Matrix2d(self.a00, self.a10, self.a01, self.a11)

    def trace(self) -> float:
        return self.a00 + self.a11

    def det(self) -> float:
        return self.a00 * self.a11 - self.a01 * self.a10

    def inverse(self) -> Matrix2d:
        """Return the inverse; a singular matrix yields every entry at the largest float."""
        d = self.det()
        if d == 0:
            return Matrix2d(_REAL_MAX, _REAL_MAX, _REAL_MAX, _REAL_MAX)
        return Matrix2d(self.a11 / d, -self.a01 / d, -self.a10 / d, self.a00 / d)

    def sqrt(self) -> Matrix2d:
        """Return the lower Cholesky factor L with L * L^T equal to the matrix.

        Only the lower triangle is read. When a pivot is not positive the
        factorisation stops there and the partly factored lower triangle is
        returned as it stands.
        """
        a00, a10, a11 = self.a00, self.a10, self.a11
        if a00 <= 0:
            return Matrix2d(a00, 0.0, a10, a11)
        l00 = math.sqrt(a00)
        l10 = a10 / l00
        pivot = a11 - l10 * l10
        if pivot <= 0:
            return Matrix2d(l00, 0.0, l10, a11)
        return Matrix2d(l00, 0.0, l10, math.sqrt(pivot))

    def __str__(self) -> str:
        return f"[{self.a00:g}, {self.a01:g}]\n[{self.a10:g}, {self.a11:g}]"

    def __iter__(self):
        return iter(astuple(self))