# mmpde

Adaptive moving meshes for two-dimensional triangular meshes, using the
moving mesh PDE (MMPDE) method. Mesh points move so that they follow a
metric tensor field. You can give that field directly, or the package can
recover it from the Hessian of a function sampled at the vertices.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install .[test]
```

The only runtime dependency is SciPy. `move_mesh` uses it to integrate the
mesh equation.

## Modules

- `mmpde.matrix`
  - `Matrix2d` is an immutable 2×2 matrix. It supports `*` with a matrix or a scalar, `+`, and `/` by a scalar.
  - Its methods are `transpose`, `trace`, `det`, `inverse` and `sqrt`. `inverse` fills every entry with the largest float when the matrix is singular. `sqrt` returns the lower Cholesky factor.
- `mmpde.trimesh`
  - `Point2d` is a plane point.
  - `Trimesh2d` is a triangle mesh. Build one with `Trimesh2d.from_grid(rows, cols)` or `Trimesh2d.from_triangles(points, triangles)`.
  - A mesh provides `add_vertex`, `add_face`, `copy`, `set_points`, `is_boundary`, `boundary_ids`, `face_barycenters` and `face_edge_matrices`.
  - `perturb(mesh, degree)` shifts every interior vertex by `degree` in both coordinates.
  - `export_vtk(mesh, path, values=None)` writes a legacy ASCII VTK unstructured grid. Per-vertex values are added as point data.
- `mmpde.functional`
  - The `Functional` enum has the members `HUANG` and `WINSLOW`.
  - `functional_huang(j, det_j, m)` and `functional_winslow(j, m)` each return the value of the functional and its derivatives.
- `mmpde.rtree_split`
  - `Rect` is an axis-aligned box with `combine`, `overlaps`, `volume` and `spherical_volume`.
  - `Branch` holds a rectangle and an item.
  - `split_branches` performs the quadratic node split.
- `mmpde.rtree`
  - `RTree` is an R-tree of boxes mapped to data items. Its methods are `insert`, `remove`, `search` (with an optional callback that can stop the search), `find`, `remove_all`, `count`, `len()`, iteration and `items()`.
- `mmpde.rtree_io`
  - `write_tree`/`read_tree` work on binary streams. `save_tree`/`load_tree` work on files.
  - These functions only store trees whose data items are 64-bit integers.
- `mmpde.interpolate`
  - `Interpolator(nodes, faces)` or `Interpolator.from_mesh(mesh)` builds a piecewise-linear interpolator.
  - Call it with per-node numbers or points, plus the query points. A query point that coincides with a node takes that node's value. Other points get the barycentric blend over a triangle that contains them. A point outside every triangle's bounding box raises `ValueError`.
- `mmpde.metric`
  - `calc_vertex_value(mesh, func)` samples `func` at every vertex.
  - `grad_recovery(mesh, values)` recovers per-vertex gradients by area-weighted averaging.
  - `calc_vertex_metric(mesh, source)` returns one metric tensor per vertex. `source` can be a `MetricType`, a callable returning a `Matrix2d`, or per-vertex values, which are used through their recovered Hessian. `MetricType.IDENTITY` gives identity tensors. `MetricType.CURVATURE` gives an empty list.
- `mmpde.move_mesh`
  - `MoveMeshRHS` is the right-hand side of the mesh equation, called as `rhs(t, xi)`.
  - `move_mesh(tspan, xi_ref, mesh, metrics, tau, functional)` integrates the reference coordinates with SciPy's adaptive RK45 (absolute tolerance 1e-8, relative 1e-6). It then interpolates to get the moved physical mesh.
  - `flatten_points` and `unflatten_points` convert between points and `[x0, y0, x1, y1, ...]`.
  - `move_mesh_x` currently returns an unchanged copy of the mesh.

## Example

The example adapts a 10×10 grid on the unit square to a steep front:

```python
import math

from mmpde.functional import Functional
from mmpde.metric import calc_vertex_metric, calc_vertex_value
from mmpde.move_mesh import move_mesh
from mmpde.trimesh import Trimesh2d, export_vtk


def front(p):
    return math.tanh(-30 * (p.y - 0.5 - 0.25 * math.sin(2 * math.pi * p.x)))


n = 10
grid = [i / n for i in range(n + 1)]
ref_mesh = Trimesh2d.from_grid(grid, grid)
mesh = ref_mesh.copy()

for step in range(10):
    values = calc_vertex_value(mesh, front)
    metrics = calc_vertex_metric(mesh, values)
    export_vtk(mesh, f"new_mesh_{step}.vtk", values)
    mesh = move_mesh((0.0, 1.0), ref_mesh, mesh, metrics, 0.01, Functional.HUANG)
```

## What the package does not do

The package is a library only. It has no command-line program and no
ready-made example runner, so drive the movement loop from your own code as
shown above. Output is limited to legacy ASCII VTK files written by
`export_vtk`. The package cannot read meshes from files.

## Tests

```
pytest
```