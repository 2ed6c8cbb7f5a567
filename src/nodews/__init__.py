"""nodews: find a Node.js monorepo's workspace root and jump between its packages."""

from importlib.metadata import version, PackageNotFoundError

from loguru import logger

from nodews.api import (
    find_root,
    resolve,
    resolve_async,
    switch_directory,
    ResolveResult,
)
from nodews.core import PackageManagerKind, WorkspaceEntry, WorkspaceRoot, locate
from nodews.errors import (
    CommandExecutionError,
    DecodeError,
    EnumerationError,
    ManifestParseError,
    NotInWorkspaceError,
    WorkspaceError,
)

__all__ = [
    "find_root",
    "resolve",
    "resolve_async",
    "switch_directory",
    "ResolveResult",
    "PackageManagerKind",
    "WorkspaceEntry",
    "WorkspaceRoot",
    "locate",
    "CommandExecutionError",
    "DecodeError",
    "EnumerationError",
    "ManifestParseError",
    "NotInWorkspaceError",
    "WorkspaceError",
    "__version__",
]

# Silent as a library; nodews.log.setup_logging() turns this back on.
logger.disable("nodews")

try:
    __version__ = version("nodews")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
