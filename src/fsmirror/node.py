"""Live tree nodes and the arena that owns them."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING

from .errors import ContentError, InvalidFileNodeError, NilNodeError
from .snapshot import NodeSnapshot, NodeType, render_json, render_yaml

if TYPE_CHECKING:
    from .builder import TreeBuildStats


@dataclass(eq=False)
class Node:
    """A filesystem entry in a built tree.

    Nodes are navigated through the owning ``Tree``: the parent link is an
    arena id, so a child never keeps its parent alive on its own. ``nodes``
    holds value snapshots of the children and is what gets serialized.
    """

    path: str
    dirname: str
    name: str
    type: NodeType
    checksum: str | None = None
    depth: int = 0
    nodes: tuple[NodeSnapshot, ...] = field(default=(), repr=False)

    _tree: Tree | None = field(default=None, init=False, repr=False)
    _id: int = field(default=0, init=False, repr=False)
    _parent_id: int | None = field(default=None, init=False, repr=False)
    _table: dict[str, Node] = field(default_factory=dict, init=False, repr=False)
    _content: bytes | None = field(default=None, init=False, repr=False)
    _content_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._table_view: Mapping[str, Node] = MappingProxyType(self._table)

    def __str__(self) -> str:
        return self.to_json()

    @property
    def tree(self) -> Tree | None:
        """The arena this node belongs to."""
        return self._tree

    # Navigation

    def root(self) -> Node:
        """Walk parent links up to the node without a parent."""
        node = self
        while (parent := node.parent()) is not None:
            node = parent
        return node

    def parent(self) -> Node | None:
        if self._parent_id is None or self._tree is None:
            return None
        return self._tree.nodes[self._parent_id]

    # Queries over the local index

    def table(self) -> Mapping[str, Node]:
        """Direct children keyed by path."""
        return self._table_view

    def map(self) -> Mapping[str, Node]:
        """Every node inserted anywhere in the tree, keyed by path."""
        if self._tree is None:
            return MappingProxyType({})
        return self._tree.index

    def local_children(self, predicate: Callable[[Node], bool]) -> list[Node]:
        return [node for node in self._table.values() if predicate(node)]

    def files(self) -> list[Node]:
        return self.local_children(lambda node: node.type is NodeType.FILE)

    def directories(self) -> list[Node]:
        return self.local_children(lambda node: node.type is NodeType.DIRECTORY)

    def symlinks(self) -> list[Node]:
        return self.local_children(lambda node: node.type is NodeType.SYMBOLIC)

    def search(self, descriptor: str) -> list[Node]:
        """Return direct children whose path contains ``descriptor``.

        Only this node's own table is searched, not the whole subtree.
        """
        return [node for path, node in self._table.items() if descriptor in path]

    # Filesystem access

    def uri(self) -> str:
        """Absolute path of the entry."""
        return os.path.abspath(self.path)

    def permissions(self) -> int:
        """Current permission bits of the entry, read from disk on every call."""
        return os.stat(self.path).st_mode & 0o777

    def contents(self) -> bytes:
        """Return the file's bytes, reading them from disk on first access."""
        if self.type is not NodeType.FILE:
            raise InvalidFileNodeError(self.path)

        with self._content_lock:
            if self._content is None:
                try:
                    self._content = Path(self.uri()).read_bytes()
                except OSError as e:
                    raise ContentError(self.path, e.strerror or str(e)) from e
        return self._content

    # Serialization

    def snapshot(self) -> NodeSnapshot:
        return NodeSnapshot(
            path=self.path,
            dirname=self.dirname,
            name=self.name,
            type=self.type,
            checksum=self.checksum,
            nodes=self.nodes,
        )

    def to_json(self, indent: int = 4) -> str:
        return render_json(self.snapshot(), indent=indent)

    def to_yaml(self) -> str:
        return render_yaml(self.snapshot())


class Tree:
    """Arena owning every node of one built subtree plus its global index."""

    def __init__(self, stats: TreeBuildStats | None = None):
        self.nodes: list[Node] = []
        self.stats = stats
        self._index: dict[str, Node] = {}
        self.index: Mapping[str, Node] = MappingProxyType(self._index)

    def add(self, node: Node, parent: Node | None = None) -> Node:
        """Place a node in the arena, linking it below ``parent``."""
        node._tree = self
        node._id = len(self.nodes)
        if parent is not None:
            node._parent_id = parent._id
            node.depth = parent.depth + 1
        self.nodes.append(node)
        return node

    def register(self, child: Node, parent: Node) -> None:
        """Index a fully built child globally and under its parent.

        The first node registered for a path wins; later ones are ignored.
        """
        self._index.setdefault(child.path, child)
        parent._table.setdefault(child.path, child)


def contents(node: Node | None) -> bytes:
    """Return a file node's bytes, loading them once."""
    if node is None:
        raise NilNodeError()
    return node.contents()
