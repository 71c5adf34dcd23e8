"""Binary persistence for R-trees holding integer data."""

from __future__ import annotations

import os
import struct
from typing import BinaryIO

from .rtree import Node, RTree
from .rtree_split import Branch, Rect

FILE_ID = ord("R") | (ord("T") << 8) | (ord("R") << 16) | (ord("E") << 24)

_HEADER = struct.Struct("<7i")
_INT = struct.Struct("<i")
_DATA = struct.Struct("<q")
_ELEM_SIZE = struct.calcsize("<d")


def _header(tree: RTree) -> tuple[int, ...]:
    return (
        FILE_ID,
        _DATA.size,
        tree.dims,
        _ELEM_SIZE,
        _ELEM_SIZE,
        tree.max_nodes,
        tree.min_nodes,
    )


def _read(stream: BinaryIO, fmt: struct.Struct) -> tuple:
    chunk = stream.read(fmt.size)
    if len(chunk) != fmt.size:
        raise ValueError("unexpected end of tree data")
    return fmt.unpack(chunk)


def write_tree(tree: RTree, stream: BinaryIO) -> None:
    """Write the header and every node of ``tree`` to a binary stream.

    Data items must be integers that fit in 64 bits.
    """
    for _, item in tree.items():
        if isinstance(item, bool) or not isinstance(item, int):
            raise TypeError(f"only integer data can be stored, got {item!r}")
        if not -(2**63) <= item < 2**63:
            raise OverflowError(f"data item {item} does not fit in 64 bits")

    corner = struct.Struct(f"<{tree.dims}d")
    stream.write(_HEADER.pack(*_header(tree)))

    def write_node(node: Node) -> None:
        stream.write(_INT.pack(node.level))
        stream.write(_INT.pack(len(node.branches)))
        for branch in node.branches:
            stream.write(corner.pack(*branch.rect.low))
            stream.write(corner.pack(*branch.rect.high))
            if node.is_internal:
                write_node(branch.item)
            else:
                stream.write(_DATA.pack(branch.item))

    write_node(tree.root)


def read_tree(tree: RTree, stream: BinaryIO) -> None:
    """Replace the contents of ``tree`` with a tree read from a binary stream.

    Raises ValueError when the header does not match the tree's layout or
    the data is truncated or malformed.
    """
    header = _read(stream, _HEADER)
    if header != _header(tree):
        raise ValueError("tree data is incompatible with this tree")

    corner = struct.Struct(f"<{tree.dims}d")

    def read_node(expected_level: int | None) -> Node:
        (level,) = _read(stream, _INT)
        (count,) = _read(stream, _INT)
        if level < 0 or (expected_level is not None and level != expected_level):
            raise ValueError(f"invalid node level {level}")
        if not 0 <= count <= tree.max_nodes:
            raise ValueError(f"invalid branch count {count}")
        node = Node(level=level)
        for _ in range(count):
            rect = Rect(_read(stream, corner), _read(stream, corner))
            if node.is_internal:
                item = read_node(level - 1)
            else:
                (item,) = _read(stream, _DATA)
            node.branches.append(Branch(rect, item))
        return node

    tree.root = read_node(None)


def save_tree(tree: RTree, path: str | os.PathLike) -> None:
    """Write ``tree`` to the file at ``path``."""
    with open(path, "wb") as stream:
        write_tree(tree, stream)


def load_tree(tree: RTree, path: str | os.PathLike) -> None:
    """Empty ``tree`` and fill it from the file at ``path``."""
    tree.remove_all()
    with open(path, "rb") as stream:
        read_tree(tree, stream)