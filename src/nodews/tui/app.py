"""Textual picker for choosing a package in a Node.js workspace."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Footer, Header, Input, LoadingIndicator, OptionList, Static
from textual.widgets.option_list import Option
from textual.worker import Worker, WorkerState

from nodews.api import ResolveResult, resolve
from nodews.core.enumerator import WorkspaceEntry
from nodews.errors import WorkspaceError

PREVIEW_MAX_LINES = 60

COLOR_HEADER = "bold magenta"
COLOR_NAME = "bold"
COLOR_PATH = "dim"
COLOR_ERROR = "red"


def _match_rank(name: str, query: str) -> int | None:
    """
    Rank of name against query (lower is better), or None if it doesn't match.

    0 = prefix, 1 = substring, 2 = characters in order. Case-insensitive.
    """
    if not query:
        return 0
    name = name.lower()
    query = query.lower()
    if name.startswith(query):
        return 0
    if query in name:
        return 1
    chars = iter(name)
    if all(c in chars for c in query):
        return 2
    return None


def filter_entries(entries: list[WorkspaceEntry], query: str) -> list[WorkspaceEntry]:
    """Entries matching query, best matches first; ties keep their listing order."""
    query = query.strip()
    ranked = []
    for index, entry in enumerate(entries):
        rank = _match_rank(entry.name, query)
        if rank is not None:
            ranked.append((rank, index, entry))
    ranked.sort(key=lambda item: (item[0], item[1]))
    return [entry for _rank, _index, entry in ranked]


def _display_path(entry: WorkspaceEntry, root_directory: Path | None) -> str:
    """Entry path relative to the root when it lies inside it."""
    if root_directory is None:
        return entry.path
    try:
        rel = os.path.relpath(entry.path, root_directory)
    except ValueError:
        return entry.path
    if rel.startswith(".."):
        return entry.path
    return rel


def preview_text(entry: WorkspaceEntry, max_lines: int = PREVIEW_MAX_LINES) -> str:
    """Markup for the details pane: the entry's path and its package.json."""
    lines = [
        f"[{COLOR_HEADER}]Package[/]",
        f"  [{COLOR_NAME}]{escape(entry.name)}[/]",
        "",
        f"[{COLOR_HEADER}]Path[/]",
        f"  [{COLOR_PATH}]{escape(entry.path)}[/]",
        "",
        f"[{COLOR_HEADER}]package.json[/]",
    ]
    try:
        content = entry.manifest_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        lines.append("  [dim](no package.json)[/]")
        return "\n".join(lines)
    manifest_lines = content.splitlines()
    lines.extend(escape(line) for line in manifest_lines[:max_lines])
    if len(manifest_lines) > max_lines:
        lines.append(f"[dim]… {len(manifest_lines) - max_lines} more lines[/]")
    return "\n".join(lines)


class WorkspacePickerApp(App[WorkspaceEntry | None]):
    """Terminal UI to pick one package of a Node.js workspace.

    Resolves the workspace in a background thread unless a ResolveResult is
    passed in. app.run() returns the chosen WorkspaceEntry, or None; when
    resolution failed, the failure is kept in app.resolve_error.
    """

    TITLE = "Node Workspaces"
    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
        Binding("q", "cancel", "Quit", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("up", "cursor_up", "Up", show=False),
        Binding("ctrl+r", "refresh", "Refresh"),
    ]

    DEFAULT_CSS = """
    #filter {
        margin: 0 1;
    }
    #loading {
        height: auto;
        display: none;
    }
    #loading.loading {
        display: block;
    }
    #loading LoadingIndicator {
        height: 3;
        background: transparent;
    }
    #loading_text {
        text-align: center;
    }
    #body {
        height: 1fr;
    }
    #entries {
        width: 2fr;
    }
    #preview {
        width: 3fr;
        padding: 0 2;
        border: solid $primary;
        height: 100%;
        overflow-y: auto;
    }
    """

    def __init__(
        self,
        start_directory: Path | str | None = None,
        *,
        root: Path | str | None = None,
        timeout: float | None = None,
        result: ResolveResult | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._start_directory = Path(start_directory) if start_directory is not None else Path.cwd()
        self._root = root
        self._timeout = timeout
        self._result: ResolveResult | None = result
        self._visible: list[WorkspaceEntry] = []
        self._loading = False
        self.resolve_error: WorkspaceError | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        yield Input(placeholder="Filter packages...", id="filter")
        with Container(id="loading"):
            yield LoadingIndicator()
            yield Static("[dim]Asking the package manager for workspaces...[/]", id="loading_text")
        with Horizontal(id="body"):
            yield OptionList(id="entries")
            yield Static("", id="preview")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = str(self._start_directory)
        if self._result is not None:
            self._show_result(self._result)
        else:
            self._start_resolve()
        self.query_one("#filter", Input).focus()

    def _start_resolve(self) -> None:
        """Resolve the workspace in a background thread."""
        if self._loading:
            return
        self._loading = True
        self.resolve_error = None
        self.query_one("#loading").add_class("loading")
        self.run_worker(self._resolve_worker, thread=True, exclusive=True, exit_on_error=False)

    def _resolve_worker(self) -> ResolveResult:
        """Worker that runs the package manager in a background thread."""
        return resolve(self._start_directory, root=self._root, timeout=self._timeout)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Handle worker completion."""
        if event.state == WorkerState.SUCCESS:
            self._loading = False
            self.query_one("#loading").remove_class("loading")
            self._show_result(event.worker.result)
        elif event.state == WorkerState.ERROR:
            self._loading = False
            self.query_one("#loading").remove_class("loading")
            error = event.worker.error
            if not isinstance(error, WorkspaceError):
                error = WorkspaceError(f"Unexpected error: {error!r}")
            self.resolve_error = error
            self._set_preview(f"[{COLOR_ERROR}]Error: {escape(str(error))}[/]")

    def _show_result(self, result: ResolveResult) -> None:
        self._result = result
        self.title = f"Node Workspaces - {result.manager.value}"
        self.sub_title = str(result.root_directory)
        self._apply_filter(self.query_one("#filter", Input).value)

    def _apply_filter(self, query: str) -> None:
        if self._result is None:
            return
        self._visible = filter_entries(self._result.entries, query)
        option_list = self.query_one("#entries", OptionList)
        option_list.clear_options()
        root_directory = self._result.root_directory
        option_list.add_options(
            [
                Option(
                    Text.assemble(
                        (entry.name, COLOR_NAME),
                        "  ",
                        (_display_path(entry, root_directory), COLOR_PATH),
                    )
                )
                for entry in self._visible
            ]
        )
        if self._visible:
            option_list.highlighted = 0
            self._set_preview(preview_text(self._visible[0]))
        else:
            self._set_preview("[dim]No matching packages[/]")

    def _set_preview(self, text: str) -> None:
        self.query_one("#preview", Static).update(text)

    def _select(self, index: int | None) -> None:
        if index is None or not 0 <= index < len(self._visible):
            return
        self.exit(self._visible[index])

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "filter":
            self._apply_filter(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter in the filter picks the highlighted package."""
        if event.input.id != "filter":
            return
        self._select(self.query_one("#entries", OptionList).highlighted)

    def on_option_list_option_highlighted(self, event: OptionList.OptionHighlighted) -> None:
        index = event.option_index
        if 0 <= index < len(self._visible):
            self._set_preview(preview_text(self._visible[index]))

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self._select(event.option_index)

    def action_cursor_down(self) -> None:
        self.query_one("#entries", OptionList).action_cursor_down()

    def action_cursor_up(self) -> None:
        self.query_one("#entries", OptionList).action_cursor_up()

    def action_refresh(self) -> None:
        self._result = None
        self._visible = []
        self.query_one("#entries", OptionList).clear_options()
        self._set_preview("")
        self._start_resolve()

    def action_cancel(self) -> None:
        self.exit(None)


def present(result: ResolveResult) -> WorkspaceEntry | None:
    """Show an already resolved workspace and return the user's choice."""
    return WorkspacePickerApp(result=result).run()


def pick(
    start_directory: Path | str | None = None,
    *,
    root: Path | str | None = None,
    timeout: float | None = None,
) -> WorkspaceEntry | None:
    """
    Resolve the workspace around start_directory and let the user pick a package.

    Returns None when the user cancels. If resolution failed, its
    WorkspaceError is raised once the picker closes.
    """
    app = WorkspacePickerApp(start_directory, root=root, timeout=timeout)
    entry = app.run()
    if entry is None and app.resolve_error is not None:
        raise app.resolve_error
    return entry


def main() -> None:
    """Entry point for the nodews picker."""
    start = sys.argv[1].strip() if len(sys.argv) > 1 else None
    try:
        entry = pick(start)
    except WorkspaceError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if entry is None:
        sys.exit(1)
    print(entry.path)


if __name__ == "__main__":
    main()
