"""Directory scanner that builds the live tree and its snapshots in one pass."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .checksum import compute_file_hash
from .errors import ChecksumError, InvalidDirectoryError
from .node import Node, Tree
from .snapshot import NodeType

logger = logging.getLogger(__name__)

Hasher = Callable[[str], str]


@dataclass
class ScanWarning:
    """A directory whose entries could not be listed."""

    path: str
    error: str


@dataclass
class TreeBuildStats:
    """Statistics from building a tree."""

    files_hashed: int = 0
    directories_scanned: int = 0  # Includes the root
    symlinks: int = 0
    warnings: list[ScanWarning] = field(default_factory=list)

    @property
    def total_entries(self) -> int:
        return self.files_hashed + self.symlinks + max(self.directories_scanned - 1, 0)


def build_tree(
    path: str | Path,
    *,
    sort_entries: bool = True,
    hasher: Hasher = compute_file_hash,
) -> Node:
    """
    Build a tree from the filesystem.

    Args:
        path: Root directory to scan; child paths are joined onto it as given
        sort_entries: Visit siblings by name instead of directory-listing order
        hasher: Checksum provider called once per file

    Returns:
        The root node. Its ``Tree`` arena is reachable through every node.

    Raises:
        InvalidDirectoryError: If ``path`` does not exist or is not a directory
        ChecksumError: If a file cannot be read for hashing
    """
    path = os.fspath(path)
    if not os.path.isdir(path):
        raise InvalidDirectoryError(path)

    normalized = os.path.normpath(path)
    root = Node(
        path=path,
        dirname=os.path.dirname(normalized) or ".",
        name=os.path.basename(normalized),
        type=NodeType.DIRECTORY,
    )

    tree = Tree(stats=TreeBuildStats())
    tree.add(root)
    _walk(root, tree, sort_entries, hasher)

    logger.debug(
        "Built tree for %s: %d files, %d directories, %d symlinks",
        path,
        tree.stats.files_hashed,
        tree.stats.directories_scanned,
        tree.stats.symlinks,
    )
    return root


def _walk(node: Node, tree: Tree, sort_entries: bool, hasher: Hasher) -> None:
    """Scan a directory node, completing each child's subtree before indexing it."""
    stats: TreeBuildStats = tree.stats
    stats.directories_scanned += 1

    try:
        with os.scandir(node.path) as it:
            entries = list(it)
    except OSError as e:
        stats.warnings.append(ScanWarning(path=node.path, error=e.strerror or str(e)))
        logger.warning("Unable to read directory %s: %s", node.path, e)
        return

    if sort_entries:
        entries.sort(key=lambda entry: entry.name)

    snapshots = []
    for entry in entries:
        child_path = os.path.normpath(os.path.join(node.path, entry.name))
        child = Node(
            path=child_path,
            dirname=os.path.dirname(child_path) or ".",
            name=entry.name,
            type=_classify(entry),
        )
        tree.add(child, parent=node)

        if child.type is NodeType.DIRECTORY:
            _walk(child, tree, sort_entries, hasher)
        elif child.type is NodeType.FILE:
            child.checksum = _checksum(child, hasher)
            stats.files_hashed += 1
        else:
            stats.symlinks += 1

        tree.register(child, node)
        snapshots.append(child.snapshot())

    node.nodes = tuple(snapshots)


def _classify(entry: os.DirEntry) -> NodeType:
    # Links are tagged, never followed
    if entry.is_symlink():
        return NodeType.SYMBOLIC
    if entry.is_dir(follow_symlinks=False):
        return NodeType.DIRECTORY
    return NodeType.FILE


def _checksum(node: Node, hasher: Hasher) -> str:
    try:
        return hasher(node.uri())
    except OSError as e:
        raise ChecksumError(node.path, e.strerror or str(e)) from e
