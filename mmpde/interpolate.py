"""Piecewise-linear interpolation of vertex data on a triangle mesh."""

from __future__ import annotations

from numbers import Real
from typing import Any, Iterable, Sequence

from .rtree import RTree
from .trimesh import Point2d, Trimesh2d


def _orient(a: Point2d, b: Point2d, c: Point2d) -> float:
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def _in_triangle(t0: Point2d, t1: Point2d, t2: Point2d, q: Point2d) -> bool:
    d0, d1, d2 = _orient(t0, t1, q), _orient(t1, t2, q), _orient(t2, t0, q)
    has_neg = d0 < 0 or d1 < 0 or d2 < 0
    has_pos = d0 > 0 or d1 > 0 or d2 > 0
    return not (has_neg and has_pos)


def _zero_like(value: Any) -> Any:
    if isinstance(value, Real):
        return 0.0
    if isinstance(value, Point2d):
        return Point2d(0.0, 0.0)
    return tuple(0.0 for _ in value)


def _blend(values: Sequence[Any], weights: Sequence[float]) -> Any:
    first = values[0]
    if isinstance(first, Real):
        return sum(v * w for v, w in zip(values, weights))
    parts = tuple(
        sum(c * w for c, w in zip(components, weights)) for components in zip(*values)
    )
    return Point2d(*parts) if isinstance(first, Point2d) else parts


class Interpolator:
    """Interpolates per-vertex values at arbitrary points of a triangulation.

    Query points that coincide with a node take that node's value exactly;
    others take the barycentric blend over a triangle containing them.
    """

    def __init__(
        self, nodes: Iterable[Sequence[float]], faces: Iterable[Sequence[int]]
    ) -> None:
        self._nodes = [Point2d(float(x), float(y)) for x, y in nodes]
        self._faces = [(int(a), int(b), int(c)) for a, b, c in faces]
        self._node_index: dict[Point2d, int] = {}
        for index, node in enumerate(self._nodes):
            self._node_index.setdefault(node, index)
        self._tree = RTree(dims=2, max_nodes=8, min_nodes=4)
        for index, face in enumerate(self._faces):
            pts = [self._nodes[v] for v in face]
            xs = [p.x for p in pts]
            ys = [p.y for p in pts]
            self._tree.insert((min(xs), min(ys)), (max(xs), max(ys)), index)

    @classmethod
    def from_mesh(cls, mesh: Trimesh2d) -> Interpolator:
        return cls(mesh.points, mesh.faces)

    def __call__(
        self, values: Sequence[Any], query_points: Iterable[Sequence[float]]
    ) -> list[Any]:
        """Return the interpolated value at each query point.

        ``values`` holds one number or point per node. A query point outside
        every triangle's bounding box raises ValueError; one inside a box but
        in no triangle gets a zero value.
        """
        if len(values) != len(self._nodes):
            raise ValueError(f"expected {len(self._nodes)} values, got {len(values)}")
        results = []
        for x, y in query_points:
            q = Point2d(float(x), float(y))
            exact = self._node_index.get(q)
            if exact is not None:
                results.append(values[exact])
                continue
            candidates = self._tree.find(q, q)
            if not candidates:
                raise ValueError(f"point {tuple(q)} lies outside the mesh")
            results.append(self._value_at(values, q, candidates))
        return results

    def _value_at(self, values: Sequence[Any], q: Point2d, candidates: list[int]) -> Any:
        for face_index in candidates:
            i0, i1, i2 = self._faces[face_index]
            t0, t1, t2 = self._nodes[i0], self._nodes[i1], self._nodes[i2]
            x10, y10 = t1.x - t0.x, t1.y - t0.y
            x20, y20 = t2.x - t0.x, t2.y - t0.y
            det = x10 * y20 - x20 * y10
            if det == 0 or not _in_triangle(t0, t1, t2, q):
                continue
            xq0, yq0 = q.x - t0.x, q.y - t0.y
            w1 = (xq0 * y20 - x20 * yq0) / det
            w2 = (x10 * yq0 - xq0 * y10) / det
            w0 = 1 - w1 - w2
            return _blend((values[i0], values[i1], values[i2]), (w0, w1, w2))
        return _zero_like(values[0])