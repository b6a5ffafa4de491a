"""Interactive session: read a line, parse it, dispatch it to the view or engine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import Console

from parrot.errors import EditorError, ExecutionError, ParseError, ScanError, StoreError
from parrot.services.editor import Editor
from parrot.services.reconcile import Reconciler
from parrot.session.parser import Clear, Edit, Filter, Help, Quit, Run, Script, Show, Target, Update, parse
from parrot.session.scanner import scan
from parrot.session.view import View
from parrot.storage.models import Snapshot, normalize_name
from parrot.storage.store import SnapshotStore
from parrot.utils import formatting

if TYPE_CHECKING:
    from parrot.session.terminal import Terminal

logger = logging.getLogger(__name__)


class Session:
    """Dispatches parsed scripts against a view over the store's snapshots."""

    def __init__(
        self,
        store: SnapshotStore,
        view: View,
        reconciler: Reconciler,
        editor: Editor,
        console: Console | None = None,
    ) -> None:
        self.store = store
        self.view = view
        self.reconciler = reconciler
        self.editor = editor
        self.console = console or Console()

    def run(self, terminal: Terminal) -> None:
        """Loop until quit, EOF or interrupt."""
        while True:
            line = terminal.read_line(self.view)
            if line is None or not self.execute(line):
                break

    def execute(self, line: str) -> bool:
        """Handle one line of input. Returns False when the session should end."""
        if not line.strip():
            return True
        try:
            script = parse(scan(line))
        except (ScanError, ParseError) as e:
            formatting.warning(self.console, e.message)
            return True

        logger.debug("Dispatching %s", script)
        try:
            return self.dispatch(script)
        except (ExecutionError, StoreError) as e:
            formatting.error(self.console, e.message)
            return True

    def dispatch(self, script: Script) -> bool:
        if isinstance(script, Quit):
            return False
        if isinstance(script, Help):
            formatting.write_help(self.console)
        elif isinstance(script, Edit):
            self.execute_edit()
        elif isinstance(script, Clear):
            self.view.clear_filters()
        elif isinstance(script, Filter):
            self.view.apply_filter(script.predicates)
            if not len(self.view):
                self.console.print("[dim]No snapshot matches the current filters.[/dim]")
        elif isinstance(script, Run):
            self.execute_run(script.target)
        elif isinstance(script, Show):
            self.execute_show(script.target)
        elif isinstance(script, Update):
            self.execute_update(script.target)
        return True

    def execute_run(self, target: Target) -> bool:
        if target is Target.ALL:
            report = self.reconciler.run_all(self.view.get_view())
            results = report.results
            passed = report.passed
        else:
            with self.view.get_selected_mut() as snapshot:
                results = [self.reconciler.run(snapshot)] if snapshot is not None else []
            passed = all(result.passed for result in results)

        for result in results:
            formatting.write_run_result(self.console, result)
        if passed:
            formatting.success(self.console)
        else:
            formatting.failure(self.console)
        # Statuses changed, which matters under a status filter.
        self.view.refresh()
        return passed

    def execute_show(self, target: Target) -> None:
        if target is Target.ALL:
            snapshots = self.view.get_view()
        else:
            selected = self.view.get_selected()
            snapshots = [selected] if selected is not None else []
        if not snapshots:
            self.console.print("No snapshot to show.")
        for snapshot in snapshots:
            formatting.show_snapshot(self.console, snapshot)

    def execute_update(self, target: Target) -> int:
        count = 0
        try:
            if target is Target.ALL:
                for snapshot in self.view.get_view():
                    if self.reconciler.update(snapshot):
                        self.store.persist_snapshot_content(snapshot)
                        count += 1
            else:
                with self.view.get_selected_mut() as snapshot:
                    if snapshot is None:
                        self.console.print("No snapshot to update.")
                        return 0
                    if self.reconciler.update(snapshot):
                        self.store.persist_snapshot_content(snapshot)
                        count = 1
        finally:
            # The borrow is released by now. Also runs when a later snapshot fails.
            if count:
                self.store.persist_metadata()
        self.console.print(formatting.format_updated(count))
        self.view.refresh()
        return count

    def execute_edit(self) -> bool:
        with self.view.get_selected_mut() as snapshot:
            if snapshot is None:
                self.console.print("No snapshot to edit.")
                return False
            changed = self.edit_snapshot(snapshot)
        if changed:
            self.store.persist_metadata()
            self.view.refresh()
        return changed

    def edit_snapshot(self, snapshot: Snapshot) -> bool:
        """Apply editor changes to a snapshot. Returns True if anything changed."""
        try:
            edit = self.editor.open_for_edit(
                self.store.path, snapshot.name, snapshot.description, snapshot.cmd, snapshot.tags
            )
        except EditorError as e:
            logger.warning("Edit of %s aborted: %s", snapshot.name, e.message)
            formatting.warning(self.console, e.message)
            return False

        has_changed = False
        if edit.name is not None:
            name = normalize_name(edit.name)
            if name != snapshot.name:
                try:
                    self.store.rename(snapshot, name)
                except StoreError as e:
                    formatting.warning(self.console, e.message)
                    return False
                has_changed = True
        if edit.description != snapshot.description:
            snapshot.description = edit.description
            has_changed = True
        if set(edit.tags) != snapshot.tags:
            snapshot.tags = set(edit.tags)
            has_changed = True

        self.console.print("Updated." if has_changed else "Nothing to change.")
        return has_changed
