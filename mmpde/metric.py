"""Per-vertex values and metric tensors for mesh adaptation."""

from __future__ import annotations

import math
from enum import Enum, auto
from functools import reduce
from typing import Callable, Sequence, Union

from .matrix import Matrix2d
from .trimesh import Point2d, Trimesh2d

MetricSource = Union["MetricType", Callable[[Point2d], Matrix2d], Sequence[float]]


class MetricType(Enum):
    """Built-in choices of metric tensor."""

    IDENTITY = auto()
    CURVATURE = auto()


def calc_vertex_value(mesh: Trimesh2d, func: Callable[[Point2d], float]) -> list[float]:
    """Evaluate ``func`` at every vertex, in vertex order."""
    return [func(p) for p in mesh.points]


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def grad_recovery(mesh: Trimesh2d, values: Sequence[float]) -> list[tuple[float, float]]:
    """Recover a per-vertex gradient by area-weighted averaging of face gradients.

    A vertex that belongs to no face gets NaN components.
    """
    values = [float(v) for v in values]
    if len(values) != mesh.n_vertices:
        raise ValueError(f"expected {mesh.n_vertices} values, got {len(values)}")

    grad_x = [0.0] * mesh.n_vertices
    grad_y = [0.0] * mesh.n_vertices
    volumes = [0.0] * mesh.n_vertices
    for (a, b, c), edges in zip(mesh.faces, mesh.face_edge_matrices()):
        inv = edges.inverse()
        area = abs(edges.det()) / 2.0
        face_x = (
            -(inv.a00 + inv.a01) * values[a] + inv.a00 * values[b] + inv.a01 * values[c]
        ) * area
        face_y = (
            -(inv.a10 + inv.a11) * values[a] + inv.a10 * values[b] + inv.a11 * values[c]
        ) * area
        for v in (a, b, c):
            grad_x[v] += face_x
            grad_y[v] += face_y
            volumes[v] += area

    return [
        (_ratio(gx, vol), _ratio(gy, vol))
        for gx, gy, vol in zip(grad_x, grad_y, volumes)
    ]


def _hessian_metric(mesh: Trimesh2d, values: Sequence[float]) -> list[Matrix2d]:
    grads = grad_recovery(mesh, values)
    hessian_x = grad_recovery(mesh, [g[0] for g in grads])
    hessian_y = grad_recovery(mesh, [g[1] for g in grads])

    identity = Matrix2d.identity()
    metrics = []
    for vertex, ((hxx, hxy), (hyx, hyy)) in enumerate(zip(hessian_x, hessian_y)):
        if mesh.is_boundary(vertex):
            hessian = Matrix2d()
        else:
            h = Matrix2d(hxx, hxy, hyx, hyy)
            hessian = (h + h.transpose()) * 0.5
        metrics.append((identity + hessian).sqrt())
    return metrics


def calc_vertex_metric(mesh: Trimesh2d, source: MetricSource) -> list[Matrix2d]:
    """Compute one metric tensor per vertex.

    ``source`` may be a :class:`MetricType`, a function of a point returning a
    matrix, or a sequence of per-vertex values whose recovered Hessian defines
    the metric. ``MetricType.CURVATURE`` yields an empty list.
    """
    if isinstance(source, MetricType):
        if source is MetricType.IDENTITY:
            return [Matrix2d.identity() for _ in range(mesh.n_vertices)]
        return []
    if callable(source):
        return [source(p) for p in mesh.points]
    values = list(source)
    if len(values) != mesh.n_vertices:
        raise ValueError(f"expected {mesh.n_vertices} values, got {len(values)}")
    return _hessian_metric(mesh, values)


def _sum_matrices(matrices) -> Matrix2d:
    return reduce(lambda a, b: a + b, matrices, Matrix2d())