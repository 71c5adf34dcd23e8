"""Two-dimensional triangle meshes and their basic geometric queries."""

from __future__ import annotations

import os
from collections import Counter
from typing import Iterable, NamedTuple, Sequence

from .matrix import Matrix2d


class Point2d(NamedTuple):
    """A point in the plane."""

    x: float
    y: float


Face = tuple[int, int, int]


class Trimesh2d:
    """A triangle mesh given by vertex positions and vertex-index triples."""

    def __init__(self) -> None:
        self._points: list[Point2d] = []
        self._faces: list[Face] = []
        self._boundary: frozenset[int] | None = None

    @classmethod
    def from_grid(cls, rows: Iterable[float], cols: Iterable[float]) -> Trimesh2d:
        """Triangulate the tensor grid with x values ``rows`` and y values ``cols``."""
        rows = [float(r) for r in rows]
        cols = [float(c) for c in cols]
        if len(rows) < 2 or len(cols) < 2:
            raise ValueError("a grid needs at least two rows and two columns")
        mesh = cls()
        for y in cols:
            for x in rows:
                mesh.add_vertex(Point2d(x, y))
        stride = len(rows)
        corners = [i * stride + j for i in range(len(rows) - 1) for j in range(len(cols) - 1)]
        for v0 in corners:
            mesh.add_face(v0, v0 + 1, v0 + stride + 1)
        for v0 in corners:
            mesh.add_face(v0, v0 + stride + 1, v0 + stride)
        return mesh

    @classmethod
    def from_triangles(
        cls, points: Iterable[Sequence[float]], triangles: Iterable[Sequence[int]]
    ) -> Trimesh2d:
        """Build a mesh from vertex positions and vertex-index triples."""
        mesh = cls()
        for point in points:
            mesh.add_vertex(point)
        for v0, v1, v2 in triangles:
            mesh.add_face(v0, v1, v2)
        return mesh

    @property
    def points(self) -> list[Point2d]:
        return list(self._points)

    @property
    def faces(self) -> list[Face]:
        return list(self._faces)

    @property
    def n_vertices(self) -> int:
        return len(self._points)

    @property
    def n_faces(self) -> int:
        return len(self._faces)

    def point(self, vertex: int) -> Point2d:
        return self._points[vertex]

    def add_vertex(self, point: Sequence[float]) -> int:
        """Append a vertex and return its index."""
        x, y = point
        self._points.append(Point2d(float(x), float(y)))
        self._boundary = None
        return len(self._points) - 1

    def add_face(self, v0: int, v1: int, v2: int) -> int:
        """Append a triangle over existing vertices and return its index."""
        face = (int(v0), int(v1), int(v2))
        for v in face:
            if not 0 <= v < len(self._points):
                raise ValueError(f"vertex {v} does not exist")
        if len(set(face)) != 3:
            raise ValueError(f"degenerate face {face}")
        self._faces.append(face)
        self._boundary = None
        return len(self._faces) - 1

    def copy(self) -> Trimesh2d:
        other = type(self)()
        other._points = list(self._points)
        other._faces = list(self._faces)
        other._boundary = self._boundary
        return other

    def set_points(self, new_points: Sequence[Sequence[float]]) -> None:
        """Move every vertex to a new position, keeping the connectivity."""
        if len(new_points) != len(self._points):
            raise ValueError(
                f"expected {len(self._points)} points, got {len(new_points)}"
            )
        self._points = [Point2d(float(x), float(y)) for x, y in new_points]

    def _boundary_vertices(self) -> frozenset[int]:
        if self._boundary is None:
            edges = Counter(
                frozenset(edge)
                for a, b, c in self._faces
                for edge in ((a, b), (b, c), (c, a))
            )
            on_boundary = {v for edge, n in edges.items() if n == 1 for v in edge}
            used = {v for face in self._faces for v in face}
            isolated = set(range(len(self._points))) - used
            self._boundary = frozenset(on_boundary | isolated)
        return self._boundary

    def is_boundary(self, vertex: int) -> bool:
        if not 0 <= vertex < len(self._points):
            raise IndexError(f"vertex {vertex} does not exist")
        return vertex in self._boundary_vertices()

    def boundary_ids(self) -> list[int]:
        """Indices of boundary vertices in increasing order."""
        return sorted(self._boundary_vertices())

    def face_barycenters(self) -> list[Point2d]:
        result = []
        for face in self._faces:
            p = [self._points[v] for v in face]
            result.append(Point2d(sum(q.x for q in p) / 3.0, sum(q.y for q in p) / 3.0))
        return result

    def face_edge_matrices(self) -> list[Matrix2d]:
        """Per face, the matrix whose columns are the edges p1 - p0 and p2 - p0."""
        result = []
        for a, b, c in self._faces:
            p0, p1, p2 = self._points[a], self._points[b], self._points[c]
            result.append(
                Matrix2d(p1.x - p0.x, p2.x - p0.x, p1.y - p0.y, p2.y - p0.y)
            )
        return result


def perturb(mesh: Trimesh2d, degree: float) -> None:
    """Shift every interior vertex by ``degree`` in both coordinates."""
    mesh.set_points(
        [
            p if mesh.is_boundary(i) else Point2d(p.x + degree, p.y + degree)
            for i, p in enumerate(mesh.points)
        ]
    )


def export_vtk(
    mesh: Trimesh2d,
    path: str | os.PathLike,
    values: Sequence[float] | None = None,
) -> None:
    """Write the mesh as a legacy ASCII VTK unstructured grid.

    Per-vertex ``values`` are written as point data when there is one per vertex.
    """
    n_vertices, n_faces = mesh.n_vertices, mesh.n_faces
    lines = [
        "# vtk DataFile Version 3.0",
        "Date calculated by OctreeMesh",
        "ASCII",
        "DATASET UNSTRUCTURED_GRID",
        "",
        f"POINTS {n_vertices} double",
    ]
    lines += [f"{p.x:g} {p.y:g} 0" for p in mesh.points]
    lines += ["", f"CELLS {n_faces} {n_faces * 4}"]
    lines += ["3 " + "".join(f"{v} " for v in face) for face in mesh.faces]
    lines += ["", f"CELL_TYPES {n_faces}"]
    lines += ["5"] * n_faces
    lines.append("")
    if values is not None and len(values) == n_vertices:
        lines += [
            f"POINT_DATA {n_vertices}",
            "SCALARS value double",
            "LOOKUP_TABLE default",
        ]
        lines += [f"{v:g}" for v in values]
        lines.append("")
    with open(path, "w", encoding="ascii", newline="\n") as out:
        out.write("\n".join(lines) + "\n")