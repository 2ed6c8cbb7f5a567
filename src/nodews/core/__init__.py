"""Core library: workspace root search, package manager detection, workspace listing."""

from nodews.core.detector import PackageManagerKind, detect
from nodews.core.enumerator import WorkspaceEntry, enumerate_workspaces
from nodews.core.jsonvalue import decode
from nodews.core.locator import WorkspaceRoot, load_workspace_root, locate
from nodews.core.paths import normalize

__all__ = [
    "PackageManagerKind",
    "detect",
    "WorkspaceEntry",
    "enumerate_workspaces",
    "decode",
    "WorkspaceRoot",
    "load_workspace_root",
    "locate",
    "normalize",
]
