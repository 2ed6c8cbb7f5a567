"""Existence checks for lockfiles and workspace marker files."""

from __future__ import annotations

from pathlib import Path

YARN_LOCK = "yarn.lock"
PNPM_LOCK = "pnpm-lock.yaml"
PNPM_WORKSPACE = "pnpm-workspace.yaml"
MANIFEST = "package.json"


def exists(path: Path | str) -> bool:
    """True if path exists; any access error counts as missing."""
    try:
        return Path(path).exists()
    except (OSError, ValueError):
        return False


def is_file(path: Path | str) -> bool:
    """True if path is a regular file; any access error counts as missing."""
    try:
        return Path(path).is_file()
    except (OSError, ValueError):
        return False
