"""Public API: resolve a Node.js workspace from Python or from other tools."""

from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from nodews.core.detector import PackageManagerKind, detect
from nodews.core.enumerator import WorkspaceEntry, enumerate_workspaces
from nodews.core.locator import WorkspaceRoot, load_workspace_root, locate
from nodews.core.paths import normalize
from nodews.errors import NotInWorkspaceError

_MAX_WORKERS = 2

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


@dataclass(frozen=True)
class ResolveResult:
    """A resolved workspace: its manager, root and member packages."""

    manager: PackageManagerKind
    root: WorkspaceRoot
    entries: list[WorkspaceEntry] = field(default_factory=list)

    @property
    def root_directory(self) -> Path:
        return self.root.root_directory

    def find(self, name: str) -> WorkspaceEntry | None:
        """First entry called name, if any."""
        return next((e for e in self.entries if e.name == name), None)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {
            "manager": self.manager.value,
            "root": str(self.root.root_directory),
            "entries": [e.to_dict() for e in self.entries],
        }


def find_root(
    start_directory: Path | str | None = None,
    *,
    root: Path | str | None = None,
) -> WorkspaceRoot:
    """
    Workspace root for start_directory (default: cwd), or the explicit root.

    Raises NotInWorkspaceError when no ancestor declares a workspace.
    """
    if root is not None:
        return load_workspace_root(root)
    start = Path(start_directory) if start_directory is not None else Path.cwd()
    found = locate(start)
    if found is None:
        raise NotInWorkspaceError(start)
    return found


def resolve(
    start_directory: Path | str | None = None,
    *,
    root: Path | str | None = None,
    timeout: float | None = None,
) -> ResolveResult:
    """
    Find the workspace around start_directory and list its packages.

    Args:
        start_directory: Where to start searching upward. Defaults to cwd.
        root: Use this directory as the workspace root instead of searching.
        timeout: Seconds to wait for the package manager; defaults to
            $NODEWS_TIMEOUT or 60.

    Returns:
        ResolveResult with absolute, normalized entry paths.

    Raises:
        WorkspaceError: not in a workspace, bad manifest, or the package
            manager command failed or printed something unparseable.
    """
    workspace = find_root(start_directory, root=root)
    kind = detect(workspace)
    entries = enumerate_workspaces(kind, workspace, timeout=timeout)
    entries = normalize(entries, workspace.root_directory, kind)
    logger.debug("Resolved {} {} workspace(s) under {}", len(entries), kind.value, workspace.root_directory)
    return ResolveResult(manager=kind, root=workspace, entries=entries)


def _default_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=_MAX_WORKERS, thread_name_prefix="nodews")
        return _executor


def resolve_async(
    start_directory: Path | str | None = None,
    *,
    root: Path | str | None = None,
    timeout: float | None = None,
    executor: ThreadPoolExecutor | None = None,
) -> Future[ResolveResult]:
    """
    Run resolve() on a worker thread.

    The returned future holds the ResolveResult, or raises the WorkspaceError
    resolve() raised. start_directory is fixed to an absolute path before
    submission so a later chdir in the caller does not change the result.
    """
    start = Path(start_directory) if start_directory is not None else Path.cwd()
    start = Path(os.path.abspath(start))
    pool = executor if executor is not None else _default_executor()
    return pool.submit(resolve, start, root=root, timeout=timeout)


def switch_directory(target: WorkspaceEntry | Path | str) -> Path:
    """Change the current working directory to a workspace entry's path."""
    path = Path(target.path) if isinstance(target, WorkspaceEntry) else Path(target)
    os.chdir(path)
    logger.debug("Changed directory to {}", path)
    return path
