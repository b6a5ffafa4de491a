"""Interactive prompt with keyboard navigation over a view."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout

from parrot.session.view import View

TOOLBAR_ROWS = 5

STATUS_MARKS = {
    "unknown": ("", "?"),
    "passed": ("fg:ansigreen", "✓"),
    "failed": ("fg:ansired", "✗"),
}


def _prompt_message(view: View) -> FormattedText:
    selected = view.get_selected()
    if selected is None:
        return FormattedText([("fg:ansibrightblack", "(empty) "), ("bold", "> ")])
    style, mark = STATUS_MARKS[selected.status.value]
    return FormattedText([(style, f"{mark} "), ("bold", selected.name), ("", " > ")])


def _toolbar(view: View) -> FormattedText:
    """Visible entries around the cursor, followed by the active filters."""
    snapshots = view.get_view()
    fragments: list[tuple[str, str]] = []
    if not snapshots:
        fragments.append(("", " no snapshots to show\n"))
    else:
        cursor = view.cursor or 0
        start = max(0, min(cursor - TOOLBAR_ROWS // 2, len(snapshots) - TOOLBAR_ROWS))
        for index in range(start, min(start + TOOLBAR_ROWS, len(snapshots))):
            snapshot = snapshots[index]
            style, mark = STATUS_MARKS[snapshot.status.value]
            pointer = ">" if index == cursor else " "
            fragments.append(("bold" if index == cursor else "", f" {pointer} "))
            fragments.append((style, mark))
            fragments.append(("", f" {snapshot.name}  {snapshot.cmd}\n"))
    filters = ", ".join(str(predicate) for predicate in view.filters) or "none"
    fragments.append(("", f" {len(snapshots)} shown | filters: {filters}"))
    return FormattedText(fragments)


class Terminal:
    """Line input for the session; Up/Down move the view's selection in place."""

    def __init__(self, session: PromptSession | None = None) -> None:
        self._session: PromptSession[str] = session or PromptSession()

    def _bindings(self, view: View) -> KeyBindings:
        bindings = KeyBindings()

        @bindings.add("up")
        def _up(event) -> None:
            view.up()
            event.app.invalidate()

        @bindings.add("down")
        def _down(event) -> None:
            view.down()
            event.app.invalidate()

        return bindings

    def read_line(self, view: View) -> str | None:
        """Read one command line. Returns None on EOF or interrupt."""
        try:
            with patch_stdout(raw=True):
                return self._session.prompt(
                    lambda: _prompt_message(view),
                    bottom_toolbar=lambda: _toolbar(view),
                    key_bindings=self._bindings(view),
                )
        except (EOFError, KeyboardInterrupt):
            return None
