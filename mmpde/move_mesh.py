"""Moving-mesh PDE: the mesh velocity field and one mesh-movement step."""

from __future__ import annotations

import math
from functools import reduce
from typing import Iterable, Sequence

from scipy.integrate import solve_ivp

from .functional import Functional, functional_huang, functional_winslow
from .interpolate import Interpolator
from .matrix import Matrix2d
from .trimesh import Point2d, Trimesh2d

_ABS_TOLERANCE = 1e-8
_REL_TOLERANCE = 1e-6
_HUANG_P = 1.5


def _power(base: float, exponent: float) -> float:
    try:
        return math.pow(base, exponent)
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


def flatten_points(points: Iterable[Sequence[float]]) -> list[float]:
    """Turn points into the coordinate list ``[x0, y0, x1, y1, ...]``."""
    return [float(c) for x, y in points for c in (x, y)]


def unflatten_points(values: Iterable[float]) -> list[Point2d]:
    """Turn ``[x0, y0, x1, y1, ...]`` back into points."""
    values = [float(v) for v in values]
    if len(values) % 2:
        raise ValueError("a coordinate list must have an even length")
    coords = iter(values)
    return [Point2d(x, y) for x, y in zip(coords, coords)]


class MoveMeshRHS:
    """Right-hand side of the mesh equation for the reference coordinates.

    Called as ``rhs(t, xi)`` with the flattened reference coordinates, it
    returns their time derivative; boundary vertices stay fixed.
    """

    def __init__(
        self,
        mesh: Trimesh2d,
        metrics: Sequence[Matrix2d],
        tau: float,
        functional: Functional,
    ) -> None:
        metrics = list(metrics)
        if len(metrics) != mesh.n_vertices:
            raise ValueError(f"expected {mesh.n_vertices} metrics, got {len(metrics)}")
        if tau == 0:
            raise ValueError("tau must be non-zero")
        self.tau = float(tau)
        self.functional = Functional(functional)
        self._tris = mesh.faces
        self._boundary_ids = mesh.boundary_ids()
        self._n_vertices = mesh.n_vertices

        self._mk = [
            reduce(lambda a, b: a + b, (metrics[v] for v in tri), Matrix2d()) / 3.0
            for tri in self._tris
        ]

        edges = mesh.face_edge_matrices()
        self._e_inv = [e.inverse() for e in edges]
        self._det_e = [abs(e.det()) for e in edges]
        self._vol_k = [0.5 * d for d in self._det_e]
        self._sigma = sum(vol * mk.det() for vol, mk in zip(self._vol_k, self._mk))

        exponent = 0.5 * (_HUANG_P - 1) if self.functional is Functional.HUANG else 0.5
        self._b_factor = [_power(m.det(), exponent) for m in metrics]

    @property
    def sigma(self) -> float:
        """Total metric-weighted area of the physical mesh."""
        return self._sigma

    def _gradients(self, j: Matrix2d, det_j: float, mk: Matrix2d) -> tuple[Matrix2d, float]:
        if self.functional is Functional.HUANG:
            _, g_j, g_det_j = functional_huang(j, det_j, mk)
        else:
            _, g_j, g_det_j = functional_winslow(j, mk)
        return g_j, g_det_j * det_j

    def __call__(self, t: float, xi: Sequence[float]) -> list[float]:
        xi = list(xi)
        if len(xi) != 2 * self._n_vertices:
            raise ValueError(f"expected {2 * self._n_vertices} coordinates, got {len(xi)}")
        current = Trimesh2d.from_triangles(unflatten_points(xi), self._tris)
        dxidt = [0.0] * len(xi)

        for tri, ec, e_inv, det_e, vol, mk in zip(
            self._tris,
            current.face_edge_matrices(),
            self._e_inv,
            self._det_e,
            self._vol_k,
            self._mk,
        ):
            det_ec = abs(ec.det())
            j = ec * e_inv
            g_j, g_det_j = self._gradients(j, det_ec / det_e, mk)
            local = ((e_inv * g_j + ec.inverse() * g_det_j) * vol).transpose()
            v0, v1, v2 = tri
            dxidt[2 * v1] += local.a00
            dxidt[2 * v2] += local.a01
            dxidt[2 * v0] -= local.a00 + local.a01
            dxidt[2 * v1 + 1] += local.a10
            dxidt[2 * v2 + 1] += local.a11
            dxidt[2 * v0 + 1] -= local.a10 + local.a11

        for vertex, factor in enumerate(self._b_factor):
            scale = -1 / self.tau * factor
            dxidt[2 * vertex] *= scale
            dxidt[2 * vertex + 1] *= scale

        for vertex in self._boundary_ids:
            dxidt[2 * vertex] = 0.0
            dxidt[2 * vertex + 1] = 0.0
        return dxidt


def move_mesh(
    tspan: tuple[float, float],
    xi_ref: Trimesh2d,
    mesh: Trimesh2d,
    metrics: Sequence[Matrix2d],
    tau: float,
    functional: Functional,
) -> Trimesh2d:
    """Advance the physical ``mesh`` over ``tspan`` and return the moved mesh.

    The reference coordinates are integrated with an adaptive Dormand-Prince
    scheme; the new physical positions are read off by interpolating the
    physical mesh over the evolved reference mesh.
    """
    if mesh.n_faces != xi_ref.n_faces:
        raise ValueError("reference and physical meshes must have the same faces")
    rhs = MoveMeshRHS(mesh, metrics, tau, functional)

    old_xi = xi_ref.points
    xi = flatten_points(old_xi)
    t0, t1 = float(tspan[0]), float(tspan[1])
    if t1 != t0:
        solution = solve_ivp(
            rhs,
            (t0, t1),
            xi,
            method="RK45",
            atol=_ABS_TOLERANCE,
            rtol=_REL_TOLERANCE,
            first_step=abs(t1 - t0) / 10.0,
        )
        if not solution.success:
            raise RuntimeError(f"mesh movement failed: {solution.message}")
        xi = solution.y[:, -1].tolist()

    interpolate = Interpolator(unflatten_points(xi), xi_ref.faces)
    new_points = interpolate(mesh.points, old_xi)

    new_mesh = mesh.copy()
    new_mesh.set_points(new_points)
    return new_mesh


def move_mesh_x(tspan: tuple[float, float], mesh: Trimesh2d, tau: float) -> Trimesh2d:
    """Physical-coordinate mesh movement; currently leaves the mesh as it is."""
    return mesh.copy()