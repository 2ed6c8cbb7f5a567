"""List the member packages of a workspace by asking its package manager."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from nodews.core.detector import PackageManagerKind
from nodews.core.jsonvalue import decode_array, decode_object, get_string
from nodews.core.locator import WorkspaceRoot
from nodews.errors import CommandExecutionError, DecodeError, EnumerationError

DEFAULT_COMMAND_TIMEOUT = 60.0
TIMEOUT_ENV = "NODEWS_TIMEOUT"

ROOT_ENTRY_NAME = "root"

# Exact arguments matter: each manager's output shape depends on them.
COMMANDS: dict[PackageManagerKind, list[str]] = {
    PackageManagerKind.YARN_BERRY: ["yarn", "workspaces", "list", "--json"],
    PackageManagerKind.YARN: ["yarn", "workspaces", "info"],
    PackageManagerKind.PNPM: ["pnpm", "ls", "--json", "-r"],
    PackageManagerKind.NPM: ["npm", "list", "-json", "-depth", "1", "-omit=dev"],
}

_FILE_SCHEME = "file:"


@dataclass(frozen=True)
class WorkspaceEntry:
    """One workspace package: its name and the directory it lives in."""

    name: str
    path: str

    @property
    def manifest_path(self) -> Path:
        """Path to this package's package.json."""
        return Path(self.path) / "package.json"

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {"name": self.name, "path": self.path}


def _root_entry() -> WorkspaceEntry:
    return WorkspaceEntry(name=ROOT_ENTRY_NAME, path=".")


def _fallback_name(path: str) -> str:
    """Name for a package whose manifest has none."""
    if path in (".", ""):
        return ROOT_ENTRY_NAME
    return os.path.basename(os.path.normpath(path))


def _string_field(record: object, key: str) -> str | None:
    """record[key] if record is an object holding a string there, else None."""
    if not isinstance(record, dict):
        return None
    try:
        return get_string(record, key)
    except DecodeError as e:
        logger.debug("Ignoring {}: {}", key, e.reason)
        return None


def command_for(kind: PackageManagerKind) -> list[str]:
    """Command line that lists workspaces for kind."""
    return list(COMMANDS[kind])


def command_timeout(timeout: float | None = None) -> float:
    """Timeout in seconds: explicit value, else $NODEWS_TIMEOUT, else the default."""
    if timeout is not None:
        return float(timeout)
    value = os.environ.get(TIMEOUT_ENV, "").strip()
    if not value:
        return DEFAULT_COMMAND_TIMEOUT
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("Ignoring invalid {}={!r}", TIMEOUT_ENV, value)
        return DEFAULT_COMMAND_TIMEOUT
    if parsed <= 0:
        logger.warning("Ignoring non-positive {}={!r}", TIMEOUT_ENV, value)
        return DEFAULT_COMMAND_TIMEOUT
    return parsed


def run_command(
    command: list[str],
    cwd: Path | str,
    *,
    kind: PackageManagerKind | str,
    timeout: float = DEFAULT_COMMAND_TIMEOUT,
) -> str:
    """
    Run a package manager command in cwd and return its stdout.

    The working directory is passed to the child process; the current
    process's directory is never changed.

    A non-zero exit is a CommandExecutionError, except for npm when it still
    printed output: npm exits 1 on dependency problems while printing a
    complete listing.
    """
    logger.debug("Running `{}` in {}", " ".join(command), cwd)
    try:
        result = subprocess.run(
            command,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CommandExecutionError(kind, command, "not found; is it installed?") from e
    except subprocess.TimeoutExpired as e:
        raise CommandExecutionError(kind, command, f"timed out after {timeout:g}s") from e
    except OSError as e:
        raise CommandExecutionError(kind, command, f"could not be started: {e}") from e

    if result.returncode != 0:
        tolerated = kind == PackageManagerKind.NPM and result.returncode > 0 and result.stdout.strip()
        if not tolerated:
            raise CommandExecutionError(
                kind,
                command,
                f"exited with status {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr or "",
                raw=result.stdout or result.stderr or "",
            )
        logger.warning(
            "`{}` exited with status {}; parsing its output anyway",
            " ".join(command),
            result.returncode,
        )
    return result.stdout


def parse_yarn_berry(raw: str) -> list[WorkspaceEntry]:
    """
    Parse ``yarn workspaces list --json``: one JSON object per line.

    Lines that are blank or not a ``{name, location}`` object are skipped.
    """
    entries: list[WorkspaceEntry] = []
    for line in raw.splitlines():
        if not line.strip():
            continue
        try:
            obj = decode_object(line)
        except DecodeError as e:
            logger.debug("Skipping yarn output line {!r}: {}", line, e.reason)
            continue
        location = _string_field(obj, "location")
        if location is None:
            logger.debug("Skipping yarn output line without location: {!r}", line)
            continue
        name = _string_field(obj, "name") or _fallback_name(location)
        entries.append(WorkspaceEntry(name=name, path=location))
    return entries


def parse_yarn_classic(raw: str) -> list[WorkspaceEntry]:
    """
    Parse ``yarn workspaces info``.

    Yarn 1 wraps the JSON body in a version banner and a "Done in ..." line;
    both are dropped before decoding. The result maps package name to an
    object with a ``location``.
    """
    lines = [line for line in raw.splitlines() if line.strip()]
    if lines and not lines[0].lstrip().startswith("yarn "):
        logger.warning("Unexpected first line from yarn workspaces info: {!r}", lines[0])
    if len(lines) > 1 and not lines[-1].lstrip().startswith("Done"):
        logger.warning("Unexpected last line from yarn workspaces info: {!r}", lines[-1])
    body = "\n".join(lines[1:-1])
    try:
        info = decode_object(body)
    except DecodeError as e:
        raise EnumerationError(
            PackageManagerKind.YARN,
            f"could not parse workspace info: {e.reason}",
            raw=body,
        ) from e

    entries = [_root_entry()]
    for name, details in info.items():
        location = _string_field(details, "location")
        if location is None:
            logger.debug("Skipping workspace {} without location", name)
            continue
        entries.append(WorkspaceEntry(name=name, path=location))
    return entries


def parse_pnpm(raw: str) -> list[WorkspaceEntry]:
    """Parse ``pnpm ls --json -r``: an array of ``{name, path}`` with absolute paths."""
    try:
        projects = decode_array(raw)
    except DecodeError as e:
        raise EnumerationError(
            PackageManagerKind.PNPM,
            f"could not parse project list: {e.reason}",
            raw=raw,
        ) from e

    entries: list[WorkspaceEntry] = []
    for project in projects:
        path = _string_field(project, "path")
        if path is None:
            logger.debug("Skipping pnpm project without path: {!r}", project)
            continue
        name = _string_field(project, "name") or _fallback_name(path)
        entries.append(WorkspaceEntry(name=name, path=path))
    return entries


def local_path_from_resolved(resolved: str) -> str | None:
    """
    Relative path of a linked workspace from npm's ``resolved`` field.

    Returns None for anything that is not a ``file:`` link (registry
    tarballs, git URLs). npm reports links relative to node_modules, so a
    leading ``../`` is dropped to make the path relative to the root.
    """
    if not resolved.startswith(_FILE_SCHEME):
        return None
    path = resolved[len(_FILE_SCHEME) :]
    if path.startswith("../"):
        path = path[len("../") :]
    return path


def parse_npm(raw: str) -> list[WorkspaceEntry]:
    """Parse ``npm list -json``: an object whose ``dependencies`` hold linked workspaces."""
    try:
        tree = decode_object(raw)
    except DecodeError as e:
        raise EnumerationError(
            PackageManagerKind.NPM,
            f"could not parse dependency list: {e.reason}",
            raw=raw,
        ) from e

    dependencies = tree.get("dependencies") or {}
    if not isinstance(dependencies, dict):
        raise EnumerationError(
            PackageManagerKind.NPM,
            "`dependencies` is not an object",
            raw=raw,
        )

    entries = [_root_entry()]
    for name, details in dependencies.items():
        resolved = _string_field(details, "resolved")
        if resolved is None:
            continue
        path = local_path_from_resolved(resolved)
        if path is None:
            logger.debug("Skipping {}: not a local package ({})", name, resolved)
            continue
        entries.append(WorkspaceEntry(name=name, path=path))
    return entries


PARSERS: dict[PackageManagerKind, Callable[[str], list[WorkspaceEntry]]] = {
    PackageManagerKind.YARN_BERRY: parse_yarn_berry,
    PackageManagerKind.YARN: parse_yarn_classic,
    PackageManagerKind.PNPM: parse_pnpm,
    PackageManagerKind.NPM: parse_npm,
}


def enumerate_workspaces(
    kind: PackageManagerKind,
    root: WorkspaceRoot,
    *,
    timeout: float | None = None,
) -> list[WorkspaceEntry]:
    """
    Run the listing command for kind in the workspace root and parse it.

    Paths are returned as the manager reports them; see nodews.core.paths
    for normalization.
    """
    raw = run_command(
        command_for(kind),
        root.root_directory,
        kind=kind,
        timeout=command_timeout(timeout),
    )
    entries = PARSERS[kind](raw)
    logger.debug("{} listed {} workspace(s)", kind.value, len(entries))
    return entries
