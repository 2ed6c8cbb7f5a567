"""Exceptions raised while resolving and enumerating a Node.js workspace."""

from __future__ import annotations

from pathlib import Path


class WorkspaceError(Exception):
    """Base class for every error nodews reports to the user."""


class NotInWorkspaceError(WorkspaceError):
    """No ancestor package.json declares a workspace."""

    def __init__(self, start_directory: Path | str) -> None:
        self.start_directory = Path(start_directory)
        super().__init__(f"You are not in a Node.js workspace: {self.start_directory}")


class ManifestParseError(WorkspaceError):
    """A package.json could not be read or is not a JSON object."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid manifest {self.path}: {reason}")


class DecodeError(WorkspaceError):
    """Text could not be decoded as the JSON value a caller expected."""

    def __init__(self, raw: str, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Could not decode JSON: {reason}")


class EnumerationError(WorkspaceError):
    """A package manager's workspace listing could not be turned into entries."""

    def __init__(self, kind: str, message: str, raw: str = "") -> None:
        self.kind = str(kind)
        self.raw = raw
        super().__init__(f"{self.kind}: {message}")


class CommandExecutionError(EnumerationError):
    """The package manager command could not be launched or failed without output."""

    def __init__(
        self,
        kind: str,
        command: list[str],
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        raw: str | None = None,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(kind, f"`{' '.join(command)}` {message}", raw=stderr if raw is None else raw)
