"""Snapshot values of a built tree and their JSON/YAML renderings."""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

if TYPE_CHECKING:
    from .node import Node

YAML_SUFFIXES = (".yaml", ".yml")


class NodeType(str, Enum):
    """Type tag assigned to every node at discovery."""

    FILE = "FILE"
    DIRECTORY = "DIRECTORY"
    SYMBOLIC = "SYMBOLIC"


class NodeSnapshot(BaseModel):
    """Point-in-time value copy of a node and its children."""

    model_config = ConfigDict(frozen=True)

    path: str
    dirname: str
    name: str
    type: NodeType
    checksum: str | None = None
    nodes: tuple[NodeSnapshot, ...] = ()

    @model_serializer(mode="wrap")
    def omit_empty_fields(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if data.get("checksum") is None:
            data.pop("checksum", None)
        if not data.get("nodes"):
            data.pop("nodes", None)
        return data

    def walk(self) -> Iterator[NodeSnapshot]:
        """Yield this snapshot followed by every nested snapshot, depth-first."""
        yield self
        for child in self.nodes:
            yield from child.walk()


class SnapshotStats(BaseModel):
    """Entry counts of a snapshot tree, excluding its root."""

    files: int = 0
    directories: int = 0
    symlinks: int = 0

    @classmethod
    def from_snapshot(cls, tree: NodeSnapshot) -> SnapshotStats:
        stats = cls()
        for snapshot in tree.walk():
            if snapshot is tree:
                continue
            if snapshot.type is NodeType.FILE:
                stats.files += 1
            elif snapshot.type is NodeType.DIRECTORY:
                stats.directories += 1
            else:
                stats.symlinks += 1
        return stats


class SnapshotDocument(BaseModel):
    """A saved snapshot tree together with where and when it was taken."""

    version: int = 1
    created_at: datetime
    source: str
    tree: NodeSnapshot
    stats: SnapshotStats = Field(default_factory=SnapshotStats)


def render_json(snapshot: NodeSnapshot, indent: int = 4) -> str:
    """Render a snapshot tree as indented JSON."""
    return json.dumps(snapshot.model_dump(mode="json"), indent=indent)


def render_yaml(snapshot: NodeSnapshot) -> str:
    """Render a snapshot tree as block-style YAML, keeping field order."""
    return yaml.safe_dump(snapshot.model_dump(mode="json"), sort_keys=False, allow_unicode=True)


def parse_json(text: str) -> NodeSnapshot:
    return NodeSnapshot.model_validate(json.loads(text))


def parse_yaml(text: str) -> NodeSnapshot:
    return NodeSnapshot.model_validate(yaml.safe_load(text))


def create_snapshot_document(node: Node) -> SnapshotDocument:
    """Capture a node's snapshot tree into a new document."""
    tree = node.snapshot()
    return SnapshotDocument(
        created_at=datetime.now(UTC),
        source=node.uri(),
        tree=tree,
        stats=SnapshotStats.from_snapshot(tree),
    )


def save_snapshot(document: SnapshotDocument, path: Path) -> None:
    """Save a snapshot document, as YAML for .yaml/.yml paths and JSON otherwise."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = document.model_dump(mode="json")

    with open(path, "w") as f:
        if path.suffix in YAML_SUFFIXES:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=2)


def load_snapshot(path: Path) -> SnapshotDocument | None:
    """Load a snapshot document.

    Returns None if file doesn't exist.
    """
    if not path.exists():
        return None

    with open(path) as f:
        if path.suffix in YAML_SUFFIXES:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    return SnapshotDocument.model_validate(data)
