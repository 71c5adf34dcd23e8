import pytest

from mmpde.interpolate import Interpolator
from mmpde.trimesh import Point2d, Trimesh2d


def _linear(p):
    return 2.0 * p[0] + 3.0 * p[1] + 1.0


@pytest.fixture
def grid_mesh():
    steps = [i / 4 for i in range(5)]
    return Trimesh2d.from_grid(steps, steps)


def test_exact_node_returns_its_value(grid_mesh):
    values = [float(i) for i in range(grid_mesh.n_vertices)]
    intp = Interpolator.from_mesh(grid_mesh)
    queries = [grid_mesh.point(7), grid_mesh.point(0), grid_mesh.point(24)]
    assert intp(values, queries) == [7.0, 0.0, 24.0]


def test_linear_function_reproduced(grid_mesh):
    values = [_linear(p) for p in grid_mesh.points]
    intp = Interpolator.from_mesh(grid_mesh)
    queries = [(0.1, 0.2), (0.33, 0.71), (0.9, 0.05), (0.5, 0.5001), (0.62, 0.38)]
    results = intp(values, queries)
    for q, r in zip(queries, results):
        assert r == pytest.approx(_linear(q))


def test_point_values_interpolate_to_points(grid_mesh):
    values = grid_mesh.points
    intp = Interpolator.from_mesh(grid_mesh)
    queries = [(0.3, 0.45), (0.77, 0.12)]
    results = intp(values, queries)
    for q, r in zip(queries, results):
        assert isinstance(r, Point2d)
        assert r.x == pytest.approx(q[0])
        assert r.y == pytest.approx(q[1])


def test_centroid_blends_evenly():
    intp = Interpolator([(0, 0), (3, 0), (0, 3)], [(0, 1, 2)])
    (result,) = intp([3.0, 6.0, 9.0], [(1.0, 1.0)])
    assert result == pytest.approx(6.0)


def test_point_on_edge_interpolated():
    intp = Interpolator([(0, 0), (2, 0), (0, 2)], [(0, 1, 2)])
    (result,) = intp([0.0, 4.0, 8.0], [(1.0, 0.0)])
    assert result == pytest.approx(2.0)


def test_point_in_box_but_outside_triangle_gives_zero():
    intp = Interpolator([(0, 0), (1, 0), (0, 1)], [(0, 1, 2)])
    assert intp([1.0, 2.0, 3.0], [(0.9, 0.9)]) == [0.0]
    assert intp([Point2d(1, 1)] * 3, [(0.9, 0.9)]) == [Point2d(0.0, 0.0)]


def test_point_outside_mesh_raises(grid_mesh):
    intp = Interpolator.from_mesh(grid_mesh)
    values = [0.0] * grid_mesh.n_vertices
    with pytest.raises(ValueError):
        intp(values, [(2.0, 2.0)])


def test_wrong_number_of_values_raises(grid_mesh):
    intp = Interpolator.from_mesh(grid_mesh)
    with pytest.raises(ValueError):
        intp([1.0, 2.0], [(0.5, 0.5)])


def test_duplicate_nodes_keep_first_index():
    nodes = [(0, 0), (1, 0), (0, 1), (0, 0)]
    intp = Interpolator(nodes, [(0, 1, 2)])
    assert intp([5.0, 1.0, 1.0, 9.0], [(0, 0)]) == [5.0]


def test_empty_query_list(grid_mesh):
    intp = Interpolator.from_mesh(grid_mesh)
    assert intp([0.0] * grid_mesh.n_vertices, []) == []


def test_interpolation_moved_back_to_reference(grid_mesh):
    moved = [Point2d(p.x, p.y) for p in grid_mesh.points]
    moved[6] = Point2d(moved[6].x + 0.05, moved[6].y - 0.03)
    intp = Interpolator(moved, grid_mesh.faces)
    values = grid_mesh.points
    results = intp(values, moved)
    assert results == values