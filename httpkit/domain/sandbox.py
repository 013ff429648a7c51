"""Filesystem sandbox utilities for lexical path containment."""

import os
from pathlib import Path


def _normalize(path: str) -> str:
    return os.path.normpath(path)


def is_sub_path(root: str, candidate: str) -> bool:
    """Return True when ``candidate`` joined onto ``root`` stays inside it.

    The check is purely lexical: ``.`` and ``..`` segments are collapsed
    without consulting the filesystem, so traversal attempts are rejected
    before any I/O happens.
    """
    if "\x00" in candidate:
        return False

    normalized_root = _normalize(root)
    combined = _normalize(os.path.join(normalized_root, candidate.lstrip("/\\")))
    if not combined:
        return False
    if combined == normalized_root:
        return True

    prefix = normalized_root
    if not prefix.endswith(os.sep):
        prefix += os.sep
    return combined.startswith(prefix)


class PathSandbox:
    """A fixed root directory outside of which nothing may be addressed."""

    def __init__(self, root: str):
        self._root_path = str(Path(root).resolve())

    @property
    def root_path(self) -> str:
        return self._root_path

    def contains(self, candidate: str) -> bool:
        """Return True when ``candidate`` stays inside the root."""
        return is_sub_path(self._root_path, candidate)

    def join(self, candidate: str) -> Path:
        """Return the lexical full path of ``candidate`` under the root."""
        return Path(
            _normalize(os.path.join(self._root_path, candidate.lstrip("/\\")))
        )
