"""Tests for nodews.core.locator and nodews.core.markers modules."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nodews.core.locator import (
    WorkspaceRoot,
    find_manifests,
    is_workspace_manifest,
    load_workspace_root,
    locate,
    read_manifest,
)
from nodews.core.markers import exists, is_file
from nodews.errors import ManifestParseError, NotInWorkspaceError


def _write_manifest(directory: Path, data: object) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "package.json"
    path.write_text(json.dumps(data))
    return path


class TestMarkers:
    """Tests for exists / is_file."""

    def test_exists(self, tmp_path: Path) -> None:
        (tmp_path / "yarn.lock").write_text("")
        assert exists(tmp_path / "yarn.lock") is True
        assert exists(tmp_path / "pnpm-lock.yaml") is False

    def test_exists_accepts_str(self, tmp_path: Path) -> None:
        assert exists(str(tmp_path)) is True

    def test_invalid_path_is_missing(self) -> None:
        assert exists("bad\0path") is False

    def test_is_file(self, tmp_path: Path) -> None:
        (tmp_path / "f").write_text("")
        assert is_file(tmp_path / "f") is True
        assert is_file(tmp_path) is False


class TestFindManifests:
    """Tests for find_manifests."""

    def test_nearest_first(self, tmp_path: Path) -> None:
        outer = _write_manifest(tmp_path / "a", {"workspaces": ["b"]})
        inner = _write_manifest(tmp_path / "a" / "b", {"name": "b"})
        start = tmp_path / "a" / "b" / "c"
        start.mkdir()
        assert find_manifests(start)[:2] == [inner, outer]

    def test_ignores_directories_named_package_json(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").mkdir()
        assert tmp_path / "package.json" not in find_manifests(tmp_path)

    def test_none(self, tmp_path: Path) -> None:
        assert [p for p in find_manifests(tmp_path) if tmp_path in p.parents] == []


class TestReadManifest:
    """Tests for read_manifest."""

    def test_object(self, tmp_path: Path) -> None:
        path = _write_manifest(tmp_path, {"name": "x"})
        assert read_manifest(path) == {"name": "x"}

    def test_not_object(self, tmp_path: Path) -> None:
        path = _write_manifest(tmp_path, ["x"])
        with pytest.raises(ManifestParseError) as exc_info:
            read_manifest(path)
        assert exc_info.value.path == path

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{ nope")
        with pytest.raises(ManifestParseError):
            read_manifest(path)

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestParseError):
            read_manifest(tmp_path / "package.json")


class TestIsWorkspaceManifest:
    """Tests for the workspace-membership predicate."""

    def test_workspaces_array(self, tmp_path: Path) -> None:
        assert is_workspace_manifest(tmp_path, {"workspaces": ["packages/*"]}) is True

    def test_workspaces_object(self, tmp_path: Path) -> None:
        assert is_workspace_manifest(tmp_path, {"workspaces": {"packages": ["a"]}}) is True

    def test_workspaces_null(self, tmp_path: Path) -> None:
        assert is_workspace_manifest(tmp_path, {"workspaces": None}) is False

    def test_pnpm_workspace_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "pnpm-workspace.yaml").write_text("packages:\n  - 'packages/*'\n")
        assert is_workspace_manifest(tmp_path, {"name": "root"}) is True

    def test_plain_package(self, tmp_path: Path) -> None:
        assert is_workspace_manifest(tmp_path, {"name": "lib"}) is False


class TestLocate:
    """Tests for locate."""

    def test_outermost_workspace_wins(self, tmp_path: Path) -> None:
        outer = _write_manifest(tmp_path / "a", {"workspaces": ["b"]})
        _write_manifest(tmp_path / "a" / "b", {"name": "b"})
        start = tmp_path / "a" / "b" / "c"
        start.mkdir()

        root = locate(start)
        assert root is not None
        assert root.manifest_path == outer
        assert root.root_directory == tmp_path / "a"
        assert root.manifest == {"workspaces": ["b"]}

    def test_nested_workspaces_resolve_to_top(self, tmp_path: Path) -> None:
        outer = _write_manifest(tmp_path, {"workspaces": ["inner"]})
        _write_manifest(tmp_path / "inner", {"workspaces": ["pkgs/*"]})
        root = locate(tmp_path / "inner")
        assert root is not None
        assert root.manifest_path == outer

    def test_inner_workspace_when_outer_is_plain(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, {"name": "not-a-workspace"})
        inner = _write_manifest(tmp_path / "repo", {"workspaces": ["pkgs/*"]})
        root = locate(tmp_path / "repo" / "pkgs")
        assert root is not None
        assert root.manifest_path == inner

    def test_pnpm_workspace_yaml_sibling(self, tmp_path: Path) -> None:
        manifest = _write_manifest(tmp_path / "repo", {"name": "root"})
        (tmp_path / "repo" / "pnpm-workspace.yaml").write_text("packages: []\n")
        root = locate(tmp_path / "repo")
        assert root is not None
        assert root.manifest_path == manifest

    def test_skips_broken_manifest(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("{ broken")
        inner = _write_manifest(tmp_path / "repo", {"workspaces": ["a"]})
        root = locate(tmp_path / "repo")
        assert root is not None
        assert root.manifest_path == inner

    def test_skips_non_object_manifest(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, ["workspaces"])
        inner = _write_manifest(tmp_path / "repo", {"workspaces": ["a"]})
        root = locate(tmp_path / "repo")
        assert root is not None
        assert root.manifest_path == inner

    def test_no_qualifying_manifest(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path / "lib", {"name": "lib"})
        assert locate(tmp_path / "lib") is None

    def test_no_manifest_at_all(self, tmp_path: Path) -> None:
        start = tmp_path / "x" / "y"
        start.mkdir(parents=True)
        assert locate(start) is None

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        manifest = _write_manifest(tmp_path, {"workspaces": []})
        monkeypatch.chdir(tmp_path)
        root = locate()
        assert root is not None
        assert root.manifest_path == manifest


class TestLoadWorkspaceRoot:
    """Tests for load_workspace_root."""

    def test_valid(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, {"workspaces": ["a"]})
        root = load_workspace_root(tmp_path)
        assert isinstance(root, WorkspaceRoot)
        assert root.root_directory == tmp_path
        assert root.manifest_path == tmp_path / "package.json"

    def test_broken_manifest_is_an_error(self, tmp_path: Path) -> None:
        (tmp_path / "package.json").write_text("nope")
        with pytest.raises(ManifestParseError):
            load_workspace_root(tmp_path)

    def test_missing_manifest(self, tmp_path: Path) -> None:
        with pytest.raises(NotInWorkspaceError):
            load_workspace_root(tmp_path)

    def test_not_a_workspace(self, tmp_path: Path) -> None:
        _write_manifest(tmp_path, {"name": "lib"})
        with pytest.raises(NotInWorkspaceError):
            load_workspace_root(tmp_path)


class TestWorkspaceRoot:
    """Tests for WorkspaceRoot dataclass."""

    def test_to_dict(self) -> None:
        root = WorkspaceRoot(
            manifest_path=Path("/repo/package.json"),
            root_directory=Path("/repo"),
            manifest={"workspaces": []},
        )
        assert root.to_dict() == {
            "manifest_path": "/repo/package.json",
            "root_directory": "/repo",
        }
