"""Exceptions raised by fsmirror."""


class TreeError(Exception):
    """Base exception for tree construction, access and mirroring errors."""


class NilNodeError(TreeError):
    """An operation was invoked without a node."""

    def __init__(self, message: str = "nil node"):
        super().__init__(message)


class InvalidFileNodeError(TreeError):
    """A file-only operation was invoked on a non-file node."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"invalid file node: {path}")


class InvalidDirectoryNodeError(TreeError):
    """A directory-only operation was invoked on a non-directory node."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"invalid directory node: {path}")


class InvalidDirectoryError(TreeError):
    """The construction root is missing or is not a directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"invalid directory: {path}")


class ChecksumError(TreeError):
    """A file could not be opened or read for hashing."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"unable to checksum {path}: {reason}")


class MirrorError(TreeError):
    """A filesystem operation failed while mirroring."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"mirror failed at {path}: {reason}")


class ContentError(TreeError):
    """A file node's contents could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"unable to read {path}: {reason}")
