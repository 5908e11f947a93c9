"""Integration tests for snapshot serialization."""

import json
import os
from pathlib import Path

import yaml

from fsmirror.builder import build_tree
from fsmirror.snapshot import (
    NodeSnapshot,
    NodeType,
    SnapshotStats,
    create_snapshot_document,
    load_snapshot,
    parse_json,
    parse_yaml,
    render_json,
    render_yaml,
    save_snapshot,
)


def _identities(snapshot: NodeSnapshot) -> set[tuple[str, NodeType, str | None]]:
    return {(s.path, s.type, s.checksum) for s in snapshot.walk()}


class TestSerializedForm:
    """Tests for the fields written per node."""

    def test_directory_omits_checksum(self, source_dir: Path):
        data = json.loads(build_tree(".").to_json())

        assert list(data) == ["path", "dirname", "name", "type", "nodes"]
        b = next(child for child in data["nodes"] if child["name"] == "b")
        assert "checksum" not in b

    def test_file_omits_nodes(self, source_dir: Path):
        data = json.loads(build_tree(".").to_json())

        a = next(child for child in data["nodes"] if child["name"] == "a.txt")
        assert a == {
            "path": "a.txt",
            "dirname": ".",
            "name": "a.txt",
            "type": "FILE",
            "checksum": build_tree(".").table()["a.txt"].checksum,
        }

    def test_internal_fields_are_not_serialized(self, source_dir: Path):
        text = build_tree(".").to_json()

        for field in ("depth", "parent", "table", "content", "_tree"):
            assert f'"{field}"' not in text

    def test_json_indent(self, source_dir: Path):
        root = build_tree(".")

        assert root.to_json().splitlines()[1].startswith('    "path"')
        assert root.to_json(indent=2).splitlines()[1].startswith('  "path"')

    def test_yaml_keeps_field_order(self, source_dir: Path):
        text = build_tree(".").to_yaml()

        data = yaml.safe_load(text)
        assert list(data) == ["path", "dirname", "name", "type", "nodes"]
        assert data["path"] == "."
        assert data["type"] == "DIRECTORY"


class TestRoundTrip:
    """Serialized trees parse back into the same identities."""

    def test_json_round_trip(self, source_dir: Path):
        snapshot = build_tree(".").snapshot()

        parsed = parse_json(render_json(snapshot))

        assert parsed.model_dump() == snapshot.model_dump()
        assert _identities(parsed) == _identities(snapshot)

    def test_yaml_round_trip(self, source_dir: Path):
        (source_dir / "link").symlink_to("a.txt")
        snapshot = build_tree(".").snapshot()

        parsed = parse_yaml(render_yaml(snapshot))

        assert _identities(parsed) == _identities(snapshot)
        assert ("link", NodeType.SYMBOLIC, None) in _identities(parsed)

    def test_walk_visits_every_node(self, source_dir: Path):
        root = build_tree(".")

        paths = {s.path for s in root.snapshot().walk()}
        assert paths == {".", *root.map()}


class TestSnapshotDocument:
    """Tests for saving and loading snapshot documents."""

    def test_document_stats(self, source_dir: Path):
        (source_dir / "link").symlink_to("a.txt")

        document = create_snapshot_document(build_tree("."))

        assert document.stats == SnapshotStats(files=2, directories=1, symlinks=1)
        assert document.source == str(source_dir)

    def test_save_and_load_json(self, source_dir: Path, tmp_path: Path):
        document = create_snapshot_document(build_tree("."))
        path = tmp_path / "out" / "snapshot.json"

        save_snapshot(document, path)
        loaded = load_snapshot(path)

        assert loaded is not None
        assert loaded.model_dump() == document.model_dump()
        assert json.loads(path.read_text())["tree"]["path"] == "."

    def test_save_and_load_yaml(self, source_dir: Path, tmp_path: Path):
        document = create_snapshot_document(build_tree("."))
        path = tmp_path / "snapshot.yaml"

        save_snapshot(document, path)
        loaded = load_snapshot(path)

        assert loaded is not None
        assert _identities(loaded.tree) == _identities(document.tree)
        assert loaded.created_at == document.created_at

    def test_load_missing_returns_none(self, tmp_path: Path):
        assert load_snapshot(tmp_path / "missing.json") is None

    def test_nested_paths_in_document(self, source_dir: Path, tmp_path: Path):
        path = tmp_path / "snapshot.json"
        save_snapshot(create_snapshot_document(build_tree(".")), path)

        data = json.loads(path.read_text())
        b = next(child for child in data["tree"]["nodes"] if child["name"] == "b")
        assert b["nodes"][0]["path"] == os.path.join("b", "c.txt")
