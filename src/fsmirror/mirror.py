"""Copy, Replicate and Replace a node's children into a destination."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import InvalidDirectoryNodeError, MirrorError, NilNodeError
from .node import Node
from .snapshot import NodeType

logger = logging.getLogger(__name__)


class MirrorMode(str, Enum):
    """How existing destination content is treated."""

    COPY = "copy"  # Keep existing files
    REPLICATE = "replicate"  # Overwrite existing file contents
    REPLACE = "replace"  # Delete the destination first


@dataclass
class MirrorStats:
    """Statistics from a mirror operation."""

    directories_created: int = 0
    files_written: int = 0
    files_skipped: int = 0  # Existing files left alone by Copy


def mirror(
    node: Node | None,
    destination: str | Path,
    mode: MirrorMode | str,
    recursive: bool = False,
) -> MirrorStats:
    """
    Mirror a directory node's direct children under ``destination``.

    Each child lands at ``destination/<child path>``, so the source path is
    reproduced below the destination. Directories are created with the
    source directory's current permission bits; new files get the source
    file's bits.

    Args:
        node: Directory node whose children are mirrored
        destination: Directory to mirror into
        mode: Copy, Replicate or Replace
        recursive: Repeat the shallow step for every directory in the subtree

    Returns:
        MirrorStats with counts of created directories and written/skipped files

    Raises:
        NilNodeError: If ``node`` is None
        InvalidDirectoryNodeError: If ``node`` is not a directory
        MirrorError: On the first filesystem failure; nothing is rolled back
    """
    if node is None:
        raise NilNodeError()
    if node.type is not NodeType.DIRECTORY:
        raise InvalidDirectoryNodeError(node.path)

    mode = MirrorMode(mode)
    destination = Path(destination)
    stats = MirrorStats()

    if mode is MirrorMode.REPLACE:
        _remove_destination(node, destination)

    # Directories stay owner-writable until every file below them is written
    created: list[tuple[Path, int]] = []
    sources = _walk_directories(node) if recursive else iter([node])
    for source in sources:
        _mirror_children(source, destination, mode, stats, created)

    for target, permissions in reversed(created):
        try:
            os.chmod(target, permissions)
        except OSError as e:
            raise MirrorError(str(target), e.strerror or str(e)) from e

    logger.info(
        "%s %s -> %s: %d directories created, %d files written, %d skipped",
        mode.value,
        node.path,
        destination,
        stats.directories_created,
        stats.files_written,
        stats.files_skipped,
    )
    return stats


def copy(node: Node | None, destination: str | Path, recursive: bool = False) -> MirrorStats:
    """Copy a node's children to the destination.

    - Copy will not overwrite existing files.
    - Copy will not overwrite existing directory or file permissions.
    """
    return mirror(node, destination, MirrorMode.COPY, recursive=recursive)


def replicate(node: Node | None, destination: str | Path, recursive: bool = False) -> MirrorStats:
    """Copy a node's children to the destination, overwriting file contents.

    - Replicate will overwrite existing files.
    - Replicate will not overwrite existing directory or file permissions.
    """
    return mirror(node, destination, MirrorMode.REPLICATE, recursive=recursive)


def replace(node: Node | None, destination: str | Path, recursive: bool = False) -> MirrorStats:
    """Delete the destination, then write a node's children into it.

    - Replace will overwrite existing files.
    - Replace will overwrite existing directory and file permissions.
    """
    return mirror(node, destination, MirrorMode.REPLACE, recursive=recursive)


def target_path(destination: Path, path: str) -> Path:
    """Join a node path onto the destination, keeping the result inside it.

    Absolute paths are treated as relative and leading ``..`` parts are
    dropped, so ``../source/a.txt`` lands at ``destination/source/a.txt``.
    """
    parts = list(Path(os.path.normpath(path.lstrip(os.sep))).parts)
    while parts and parts[0] == os.pardir:
        parts.pop(0)
    return Path(os.path.normpath(os.path.join(destination, *parts)))


def _walk_directories(node: Node) -> Iterator[Node]:
    yield node
    for directory in node.directories():
        yield from _walk_directories(directory)


def _mirror_children(
    source: Node,
    destination: Path,
    mode: MirrorMode,
    stats: MirrorStats,
    created: list[tuple[Path, int]],
) -> None:
    # Files below the source need their parent in place
    _ensure_directory(target_path(destination, source.path), source, stats, created)

    for directory in source.directories():
        _ensure_directory(target_path(destination, directory.path), directory, stats, created)

    for file in source.files():
        target = target_path(destination, file.path)
        if mode is MirrorMode.COPY and _exists(target):
            logger.debug("Keeping existing %s", target)
            stats.files_skipped += 1
            continue

        _write_file(target, file)
        stats.files_written += 1


def _exists(target: Path) -> bool:
    try:
        return target.exists()
    except OSError as e:
        raise MirrorError(str(target), e.strerror or str(e)) from e


def _ensure_directory(
    target: Path, source: Node, stats: MirrorStats, created: list[tuple[Path, int]]
) -> None:
    """Create a missing directory; its source bits are applied after all writes."""
    try:
        if target.is_dir():
            return
        permissions = source.permissions()
        target.mkdir(mode=permissions | 0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise MirrorError(str(target), e.strerror or str(e)) from e

    created.append((target, permissions))
    logger.debug("Created directory %s", target)
    stats.directories_created += 1


def _write_file(target: Path, source: Node) -> None:
    """Write the source's bytes; the mode only applies when the file is created."""
    try:
        data = source.contents()
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, source.permissions())
        with os.fdopen(fd, "wb") as f:
            f.write(data)
    except OSError as e:
        raise MirrorError(str(target), e.strerror or str(e)) from e

    logger.debug("Wrote %s", target)


def _remove_destination(node: Node, destination: Path) -> None:
    source = Path(node.uri()).resolve()
    resolved = destination.resolve()
    if source.is_relative_to(resolved):
        raise MirrorError(str(destination), "destination contains the source tree")
    if resolved.is_relative_to(source):
        raise MirrorError(str(destination), "destination is inside the source tree")

    try:
        if destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination)
        elif destination.exists() or destination.is_symlink():
            destination.unlink()
    except OSError as e:
        raise MirrorError(str(destination), e.strerror or str(e)) from e

    logger.debug("Removed %s", destination)
