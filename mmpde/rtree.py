"""A multidimensional bounding-rectangle tree (R-tree)."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Callable, Iterator, Sequence

from .rtree_split import MAX_DIMS, Branch, Rect, split_branches


@dataclass(eq=False)
class Node:
    """A tree node; leaves have level 0 and hold data, others hold child nodes."""

    level: int = 0
    branches: list[Branch] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return self.level == 0

    @property
    def is_internal(self) -> bool:
        return self.level > 0

    def cover(self) -> Rect | None:
        """The smallest rectangle holding every branch, or None when empty."""
        if not self.branches:
            return None
        return reduce(Rect.combine, (b.rect for b in self.branches))


class RTree:
    """An R-tree mapping axis-aligned boxes to data items.

    Nodes hold at most ``max_nodes`` branches and, apart from the root, at
    least ``min_nodes`` after a removal.
    """

    def __init__(self, dims: int = 2, max_nodes: int = 8, min_nodes: int | None = None) -> None:
        if min_nodes is None:
            min_nodes = max_nodes // 2
        if not 1 <= dims <= MAX_DIMS:
            raise ValueError(f"dims must be between 1 and {MAX_DIMS}")
        if min_nodes < 1:
            raise ValueError("min_nodes must be at least 1")
        if max_nodes <= min_nodes:
            raise ValueError("max_nodes must exceed min_nodes")
        self.dims = dims
        self.max_nodes = max_nodes
        self.min_nodes = min_nodes
        self.root = Node(level=0)

    def _rect(self, low: Sequence[float], high: Sequence[float]) -> Rect:
        if len(low) != self.dims or len(high) != self.dims:
            raise ValueError(f"corners must have {self.dims} coordinates")
        return Rect(tuple(low), tuple(high))

    def _empty_rect(self) -> Rect:
        zeros = (0.0,) * self.dims
        return Rect(zeros, zeros)

    def _node_cover(self, node: Node) -> Rect:
        return node.cover() or self._empty_rect()

    # insertion

    def insert(self, low: Sequence[float], high: Sequence[float], data: Any) -> None:
        """Add ``data`` under the box from ``low`` to ``high``."""
        self._insert_rect(self._rect(low, high), data, 0)

    def _insert_rect(self, rect: Rect, item: Any, level: int) -> bool:
        root = self.root
        new_node = self._insert_rec(rect, item, root, level)
        if new_node is None:
            return False
        self.root = Node(
            level=root.level + 1,
            branches=[
                Branch(self._node_cover(root), root),
                Branch(self._node_cover(new_node), new_node),
            ],
        )
        return True

    def _insert_rec(self, rect: Rect, item: Any, node: Node, level: int) -> Node | None:
        if node.level > level:
            index = self._pick_branch(rect, node)
            branch = node.branches[index]
            other = self._insert_rec(rect, item, branch.item, level)
            if other is None:
                branch.rect = rect.combine(branch.rect)
                return None
            branch.rect = self._node_cover(branch.item)
            return self._add_branch(Branch(self._node_cover(other), other), node)
        if node.level == level:
            return self._add_branch(Branch(rect, item), node)
        raise RuntimeError("insertion level lies below the node")

    @staticmethod
    def _pick_branch(rect: Rect, node: Node) -> int:
        best = 0
        best_incr = best_area = None
        for index, branch in enumerate(node.branches):
            area = branch.rect.spherical_volume()
            increase = rect.combine(branch.rect).spherical_volume() - area
            if best_incr is None or increase < best_incr or (
                increase == best_incr and area < best_area
            ):
                best, best_area, best_incr = index, area, increase
        return best

    def _add_branch(self, branch: Branch, node: Node) -> Node | None:
        if len(node.branches) < self.max_nodes:
            node.branches.append(branch)
            return None
        first, second = split_branches(node.branches + [branch], self.min_nodes)
        node.branches = first
        return Node(level=node.level, branches=second)

    # removal

    def remove(self, low: Sequence[float], high: Sequence[float], data: Any) -> bool:
        """Remove ``data`` found under boxes overlapping ``low``..``high``.

        Returns whether an entry was removed.
        """
        rect = self._rect(low, high)
        reinsert: list[Node] = []
        if not self._remove_rec(rect, data, self.root, reinsert):
            return False
        for node in reversed(reinsert):
            for branch in node.branches:
                self._insert_rect(branch.rect, branch.item, node.level)
        root = self.root
        if len(root.branches) == 1 and root.is_internal:
            self.root = root.branches[0].item
        return True

    def _remove_rec(self, rect: Rect, data: Any, node: Node, reinsert: list[Node]) -> bool:
        if node.is_internal:
            for index, branch in enumerate(node.branches):
                if rect.overlaps(branch.rect) and self._remove_rec(
                    rect, data, branch.item, reinsert
                ):
                    child = branch.item
                    if len(child.branches) >= self.min_nodes:
                        branch.rect = self._node_cover(child)
                    else:
                        reinsert.append(child)
                        self._disconnect(node, index)
                    return True
            return False
        for index, branch in enumerate(node.branches):
            if branch.item == data:
                self._disconnect(node, index)
                return True
        return False

    @staticmethod
    def _disconnect(node: Node, index: int) -> None:
        node.branches[index] = node.branches[-1]
        node.branches.pop()

    def remove_all(self) -> None:
        """Empty the tree."""
        self.root = Node(level=0)

    # queries

    def _overlapping(self, rect: Rect) -> Iterator[Branch]:
        stack = [self.root]
        while stack:
            node = stack.pop()
            hits = [b for b in node.branches if rect.overlaps(b.rect)]
            if node.is_leaf:
                yield from hits
            else:
                stack.extend(b.item for b in reversed(hits))

    def search(
        self,
        low: Sequence[float],
        high: Sequence[float],
        callback: Callable[[Any], bool] | None = None,
    ) -> int:
        """Visit data whose boxes overlap the query box and return how many.

        ``callback`` receives each item and returns a false value to stop.
        """
        found = 0
        for branch in self._overlapping(self._rect(low, high)):
            found += 1
            if callback is not None and not callback(branch.item):
                break
        return found

    def find(self, low: Sequence[float], high: Sequence[float]) -> list[Any]:
        """Return all data whose boxes overlap the query box."""
        return [b.item for b in self._overlapping(self._rect(low, high))]

    def count(self) -> int:
        """Number of data entries in the tree."""

        def count_rec(node: Node) -> int:
            if node.is_internal:
                return sum(count_rec(b.item) for b in node.branches)
            return len(node.branches)

        return count_rec(self.root)

    def __len__(self) -> int:
        return self.count()

    def items(self) -> Iterator[tuple[Rect, Any]]:
        """Yield ``(rect, data)`` for every entry, depth first."""

        def walk(node: Node) -> Iterator[tuple[Rect, Any]]:
            for branch in node.branches:
                if node.is_leaf:
                    yield branch.rect, branch.item
                else:
                    yield from walk(branch.item)

        return walk(self.root)

    def __iter__(self) -> Iterator[Any]:
        return (data for _, data in self.items())