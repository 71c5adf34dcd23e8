import random

import pytest

from mmpde.rtree import Node, RTree
from mmpde.rtree_split import Rect


def _boxes(n, seed=7):
    rng = random.Random(seed)
    boxes = []
    for i in range(n):
        x, y = rng.uniform(0, 100), rng.uniform(0, 100)
        w, h = rng.uniform(0, 5), rng.uniform(0, 5)
        boxes.append(((x, y), (x + w, y + h), i))
    return boxes


def _build(boxes, **kwargs):
    tree = RTree(**kwargs)
    for low, high, data in boxes:
        tree.insert(low, high, data)
    return tree


def _overlap(low_a, high_a, low_b, high_b):
    return all(la <= hb and lb <= ha for la, ha, lb, hb in zip(low_a, high_a, low_b, high_b))


def _check_structure(tree):
    def walk(node, is_root):
        assert len(node.branches) <= tree.max_nodes
        if not is_root and node.is_internal:
            assert len(node.branches) >= 1
        for branch in node.branches:
            if node.is_internal:
                child = branch.item
                assert child.level == node.level - 1
                cover = child.cover()
                assert cover is not None
                assert cover.combine(branch.rect) == branch.rect
                walk(child, False)

    walk(tree.root, True)


def test_constructor_validation():
    with pytest.raises(ValueError):
        RTree(max_nodes=4, min_nodes=4)
    with pytest.raises(ValueError):
        RTree(max_nodes=4, min_nodes=0)
    with pytest.raises(ValueError):
        RTree(dims=0)


def test_default_fill_limits():
    tree = RTree()
    assert (tree.max_nodes, tree.min_nodes) == (8, 4)


def test_empty_tree():
    tree = RTree()
    assert len(tree) == 0
    assert list(tree) == []
    assert tree.find((0, 0), (1, 1)) == []
    assert tree.root.is_leaf


def test_wrong_dimension_rejected():
    tree = RTree(dims=2)
    with pytest.raises(ValueError):
        tree.insert((0, 0, 0), (1, 1, 1), 1)


def test_inverted_box_rejected():
    tree = RTree()
    with pytest.raises(ValueError):
        tree.insert((1, 1), (0, 0), 1)


def test_insert_counts_and_grows():
    boxes = _boxes(200)
    tree = _build(boxes, max_nodes=4, min_nodes=2)
    assert tree.count() == len(boxes)
    assert len(tree) == len(boxes)
    assert tree.root.level >= 2
    _check_structure(tree)


def test_iteration_yields_all_data():
    boxes = _boxes(120)
    tree = _build(boxes)
    assert sorted(tree) == list(range(120))
    expected = {data: Rect(low, high) for low, high, data in boxes}
    assert {data: rect for rect, data in tree.items()} == expected


@pytest.mark.parametrize("query", [((10, 10), (30, 30)), ((0, 0), (100, 100)), ((50, 50), (50, 50))])
def test_find_matches_brute_force(query):
    boxes = _boxes(300, seed=3)
    tree = _build(boxes, max_nodes=5, min_nodes=2)
    low, high = query
    expected = sorted(d for lo, hi, d in boxes if _overlap(lo, hi, low, high))
    assert sorted(tree.find(low, high)) == expected
    assert tree.search(low, high) == len(expected)


def test_touching_boxes_overlap():
    tree = RTree()
    tree.insert((0, 0), (1, 1), "a")
    assert tree.find((1, 1), (2, 2)) == ["a"]
    assert tree.find((1.5, 1.5), (2, 2)) == []


def test_search_callback_can_stop():
    tree = _build(_boxes(50))
    seen = []

    def take_three(data):
        seen.append(data)
        return len(seen) < 3

    found = tree.search((0, 0), (200, 200), take_three)
    assert found == 3
    assert len(seen) == 3


def test_search_callback_sees_every_hit():
    tree = _build(_boxes(50))
    seen = []
    found = tree.search((0, 0), (200, 200), lambda d: seen.append(d) or True)
    assert found == 50
    assert sorted(seen) == list(range(50))


def test_remove_entries_one_by_one():
    boxes = _boxes(150, seed=11)
    tree = _build(boxes, max_nodes=4, min_nodes=2)
    remaining = set(range(150))
    for low, high, data in boxes:
        assert tree.remove(low, high, data)
        remaining.discard(data)
        assert len(tree) == len(remaining)
        assert data not in tree.find(low, high)
        _check_structure(tree)
    assert sorted(tree) == []


def test_remove_keeps_other_entries_searchable():
    boxes = _boxes(100, seed=5)
    tree = _build(boxes, max_nodes=4, min_nodes=2)
    for low, high, data in boxes[::2]:
        tree.remove(low, high, data)
    kept = boxes[1::2]
    assert sorted(tree) == sorted(d for _, _, d in kept)
    for low, high, data in kept:
        assert data in tree.find(low, high)


def test_remove_missing_returns_false():
    tree = _build(_boxes(20))
    assert not tree.remove((0, 0), (100, 100), "absent")
    assert len(tree) == 20


def test_remove_needs_overlapping_box():
    tree = RTree()
    tree.insert((0, 0), (1, 1), "a")
    tree.insert((50, 50), (51, 51), "b")
    for i in range(20):
        tree.insert((10 + i, 10), (10 + i, 10), i)
    assert not tree.remove((80, 80), (90, 90), "a")
    assert tree.remove((0, 0), (0.5, 0.5), "a")
    assert "a" not in list(tree)


def test_remove_all_empties_tree():
    tree = _build(_boxes(60))
    tree.remove_all()
    assert len(tree) == 0
    assert tree.root.level == 0
    tree.insert((1, 1), (2, 2), "x")
    assert list(tree) == ["x"]


def test_node_cover():
    node = Node(level=0)
    assert node.cover() is None
    tree = RTree()
    tree.insert((0, 0), (1, 2), "a")
    tree.insert((3, -1), (4, 0), "b")
    assert tree.root.cover() == Rect((0, -1), (4, 2))


def test_three_dimensional_tree():
    rng = random.Random(2)
    tree = RTree(dims=3, max_nodes=6, min_nodes=3)
    points = [(rng.random(), rng.random(), rng.random()) for _ in range(80)]
    for i, p in enumerate(points):
        tree.insert(p, p, i)
    low, high = (0.2, 0.2, 0.2), (0.7, 0.7, 0.7)
    expected = sorted(i for i, p in enumerate(points) if _overlap(p, p, low, high))
    assert sorted(tree.find(low, high)) == expected
    _check_structure(tree)