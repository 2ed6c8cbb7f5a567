"""Work out which package manager governs a workspace."""

from __future__ import annotations

from enum import Enum

from loguru import logger

from nodews.core.locator import WorkspaceRoot
from nodews.core.markers import PNPM_LOCK, YARN_LOCK, exists


class PackageManagerKind(str, Enum):
    """Package managers nodews knows how to list workspaces for."""

    NPM = "npm"
    YARN = "yarn"
    YARN_BERRY = "yarn-berry"
    PNPM = "pnpm"

    def __str__(self) -> str:
        return self.value


# Offset of the major version digit in "yarn@x.y.z"
_YARN_MAJOR_OFFSET = len("yarn@")


def _is_yarn_berry(package_manager: object) -> bool:
    """True if a packageManager field names a yarn release other than 1.x."""
    if not isinstance(package_manager, str):
        return False
    return package_manager[_YARN_MAJOR_OFFSET : _YARN_MAJOR_OFFSET + 1] != "1"


def detect(root: WorkspaceRoot) -> PackageManagerKind:
    """
    Classify the workspace's package manager from lockfiles and package.json.

    npm unless yarn.lock (yarn) or pnpm-lock.yaml (pnpm) is present. A yarn
    workspace whose packageManager field is not yarn@1.x is yarn berry.
    """
    kind = PackageManagerKind.NPM
    if exists(root.root_directory / YARN_LOCK):
        kind = PackageManagerKind.YARN
    elif exists(root.root_directory / PNPM_LOCK):
        kind = PackageManagerKind.PNPM

    if kind is PackageManagerKind.YARN and _is_yarn_berry(root.manifest.get("packageManager")):
        kind = PackageManagerKind.YARN_BERRY

    logger.debug("Detected package manager {} for {}", kind.value, root.root_directory)
    return kind
