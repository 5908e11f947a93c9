"""Shared test fixtures for fsmirror."""

import logging
import os
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def reset_fsmirror_logger():
    """Undo handlers and propagation changes made by CLI invocations."""
    logger = logging.getLogger("fsmirror")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def source_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Create a small source tree and make it the working directory.

    Structure:
        source/
        ├── a.txt        ("hi")
        └── b/
            └── c.txt    ("nested")

    Trees are built from "." so node paths read a.txt, b and b/c.txt.
    """
    source = tmp_path / "source"
    source.mkdir()
    (source / "a.txt").write_text("hi")

    b = source / "b"
    b.mkdir()
    (b / "c.txt").write_text("nested")

    monkeypatch.chdir(source)
    return source


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    """Destination path outside the source tree (not created)."""
    return tmp_path / "destination"


def current_umask() -> int:
    """Return the process umask without changing it."""
    mask = os.umask(0)
    os.umask(mask)
    return mask
