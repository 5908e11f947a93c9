"""Content checksums for file nodes."""

import hashlib
from pathlib import Path

CHUNK_SIZE = 8192


def compute_file_hash(filepath: Path | str) -> str:
    """Compute SHA256 hash of file contents."""
    h = hashlib.sha256()
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()
