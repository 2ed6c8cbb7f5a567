"""Turn manager-relative workspace paths into absolute, normalized ones."""

from __future__ import annotations

import os
from pathlib import Path

from nodews.core.detector import PackageManagerKind
from nodews.core.enumerator import WorkspaceEntry


def join_root(root_directory: Path | str, path: str) -> str:
    """Join path onto the workspace root and collapse ``.``, ``..`` and separators."""
    return os.path.normpath(f"{root_directory}/{path}")


def normalize(
    entries: list[WorkspaceEntry],
    root_directory: Path | str,
    kind: PackageManagerKind,
) -> list[WorkspaceEntry]:
    """
    Resolve each entry's path against root_directory.

    pnpm already reports absolute paths, so its entries are returned as-is.
    """
    if kind is PackageManagerKind.PNPM:
        return list(entries)
    return [WorkspaceEntry(name=e.name, path=join_root(root_directory, e.path)) for e in entries]
