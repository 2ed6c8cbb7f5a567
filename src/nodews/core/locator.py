"""Find the root package.json of a Node.js workspace by searching upward."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from nodews.core.jsonvalue import decode_object
from nodews.core.markers import MANIFEST, PNPM_WORKSPACE, exists, is_file
from nodews.errors import DecodeError, ManifestParseError, NotInWorkspaceError


@dataclass(frozen=True)
class WorkspaceRoot:
    """The manifest that declares a workspace, and the directory holding it."""

    manifest_path: Path
    root_directory: Path
    manifest: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {
            "manifest_path": str(self.manifest_path),
            "root_directory": str(self.root_directory),
        }


def _absolute(path: Path | str) -> Path:
    # abspath keeps symlinked paths as the user typed them
    return Path(os.path.abspath(os.path.expanduser(str(path))))


def find_manifests(start_directory: Path | str) -> list[Path]:
    """
    List every package.json from start_directory up to the filesystem root.

    Returned nearest first, so the last element is the outermost manifest.
    """
    start = _absolute(start_directory)
    found: list[Path] = []
    for directory in (start, *start.parents):
        candidate = directory / MANIFEST
        if is_file(candidate):
            found.append(candidate)
    return found


def read_manifest(path: Path | str) -> dict[str, Any]:
    """Read and decode a package.json; raise ManifestParseError unless it is an object."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(path, str(e)) from e
    try:
        return decode_object(raw)
    except DecodeError as e:
        raise ManifestParseError(path, e.reason) from e


def is_workspace_manifest(directory: Path, manifest: dict[str, Any]) -> bool:
    """True if manifest declares workspaces or a pnpm-workspace.yaml sits beside it."""
    if manifest.get("workspaces") is not None:
        return True
    return exists(directory / PNPM_WORKSPACE)


def locate(start_directory: Path | str | None = None) -> WorkspaceRoot | None:
    """
    Return the outermost workspace root above start_directory, or None.

    Every ancestor package.json is a candidate; they are checked from the
    filesystem root downward so a workspace nested inside another resolves
    to the top-level one. Unreadable or non-object manifests are skipped.
    """
    if start_directory is None:
        start_directory = Path.cwd()
    candidates = find_manifests(start_directory)
    logger.debug("Found {} package.json candidate(s) above {}", len(candidates), start_directory)

    for manifest_path in reversed(candidates):
        try:
            manifest = read_manifest(manifest_path)
        except ManifestParseError as e:
            logger.debug("Skipping {}: {}", manifest_path, e.reason)
            continue
        directory = manifest_path.parent
        if is_workspace_manifest(directory, manifest):
            logger.debug("Workspace root: {}", directory)
            return WorkspaceRoot(
                manifest_path=manifest_path,
                root_directory=directory,
                manifest=manifest,
            )
    return None


def load_workspace_root(directory: Path | str) -> WorkspaceRoot:
    """
    Build a WorkspaceRoot for an explicitly named root directory.

    Unlike locate(), a broken manifest here is an error rather than skipped.
    """
    root_directory = _absolute(directory)
    manifest_path = root_directory / MANIFEST
    if not is_file(manifest_path):
        raise NotInWorkspaceError(root_directory)
    manifest = read_manifest(manifest_path)
    if not is_workspace_manifest(root_directory, manifest):
        raise NotInWorkspaceError(root_directory)
    return WorkspaceRoot(
        manifest_path=manifest_path,
        root_directory=root_directory,
        manifest=manifest,
    )
