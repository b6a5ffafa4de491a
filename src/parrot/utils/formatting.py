"""Terminal rendering of snapshots, run results and diffs."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from rich.console import Console
from rich.text import Text

from parrot.services.reconcile import RunResult
from parrot.storage.models import ExecutionResult, Snapshot
from parrot.utils.diff import DiffKind, DiffLine

BOX_STYLE = "bright_blue"

DIFF_STYLES: dict[DiffKind, str] = {
    DiffKind.UNCHANGED: "",
    DiffKind.ADDED: "green",
    DiffKind.REMOVED: "red",
}

HELP_COMMANDS: list[tuple[str, str]] = [
    ("run [all|sel]", "Run the selected (default) or all visible snapshots"),
    ("show [all|sel]", "Show stored output of the selected or all visible snapshots"),
    ("update [all|sel]", "Accept the current output as the new snapshot"),
    ("filter <pred>...", "Narrow the view: tag:<t>, status:<s>, name:<n>, or any text"),
    ("clear", "Remove all filters"),
    ("edit, e", "Edit name, description and tags of the selected snapshot"),
    ("help, h", "Show this help"),
    ("quit, q", "Leave the session (also Ctrl-D)"),
]


class SeparatorKind(Enum):
    TOP = "┌"
    MIDDLE = "├"
    BOTTOM = "└"


def decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def format_code(code: int | None) -> str:
    return "None" if code is None else str(code)


def box_separator(console: Console, title: str, kind: SeparatorKind) -> None:
    line = Text(f"{kind.value}────", style=BOX_STYLE)
    if title:
        line.append(" ")
        line.append(title, style="bold")
    console.print(line)


def boxed_lines(console: Console, lines: Iterable[Text | str]) -> None:
    for content in lines:
        line = Text("│ ", style=BOX_STYLE)
        line.append(content)
        console.print(line, soft_wrap=True)


def boxed_write(console: Console, body: bytes) -> None:
    """Write raw output inside a box, one line per line feed."""
    boxed_lines(console, (decode(line) for line in body.split(b"\n")))


def snap_summary(console: Console, snapshot: Snapshot) -> None:
    lines = [
        Text.assemble("cmd:  ", (snapshot.cmd, "bold")),
        Text.assemble("code: ", (format_code(snapshot.exit_code), "bold")),
    ]
    if snapshot.tags:
        lines.append(Text.assemble("tags: ", (", ".join(sorted(snapshot.tags)), "cyan")))
    boxed_lines(console, lines)
    if snapshot.description:
        boxed_lines(console, ["", *snapshot.description.splitlines()])


def snap_preview(console: Console, result: ExecutionResult) -> None:
    """Preview a fresh capture before it is saved."""
    box_separator(console, "status code", SeparatorKind.TOP)
    boxed_lines(console, [Text(format_code(result.exit_code), style="bold")])
    if result.stdout:
        box_separator(console, "stdout", SeparatorKind.MIDDLE)
        boxed_write(console, result.stdout)
    if result.stderr:
        box_separator(console, "stderr", SeparatorKind.MIDDLE)
        boxed_write(console, result.stderr)
    box_separator(console, "", SeparatorKind.BOTTOM)


def show_snapshot(console: Console, snapshot: Snapshot) -> None:
    box_separator(console, snapshot.name, SeparatorKind.TOP)
    snap_summary(console, snapshot)
    if snapshot.stdout is not None:
        box_separator(console, "stdout", SeparatorKind.MIDDLE)
        boxed_write(console, snapshot.stdout.body)
    if snapshot.stderr is not None:
        box_separator(console, "stderr", SeparatorKind.MIDDLE)
        boxed_write(console, snapshot.stderr.body)
    box_separator(console, "", SeparatorKind.BOTTOM)


def write_diff(console: Console, lines: Iterable[DiffLine]) -> None:
    boxed_lines(
        console,
        (Text(f"{line.kind.value} {decode(line.content)}", style=DIFF_STYLES[line.kind]) for line in lines),
    )


def write_run_result(console: Console, result: RunResult) -> None:
    """Describe a failed run: summary, then a diff per drifted stream."""
    if result.passed:
        return
    box_separator(console, result.snapshot.name, SeparatorKind.TOP)
    snap_summary(console, result.snapshot)
    if result.code_changed:
        box_separator(console, "exit code", SeparatorKind.MIDDLE)
        write_diff(
            console,
            [
                DiffLine(DiffKind.REMOVED, format_code(result.expected_code).encode()),
                DiffLine(DiffKind.ADDED, format_code(result.actual_code).encode()),
            ],
        )
    if result.stdout_diff is not None:
        box_separator(console, "stdout", SeparatorKind.MIDDLE)
        write_diff(console, result.stdout_diff)
    if result.stderr_diff is not None:
        box_separator(console, "stderr", SeparatorKind.MIDDLE)
        write_diff(console, result.stderr_diff)
    box_separator(console, "", SeparatorKind.BOTTOM)


def success(console: Console) -> None:
    console.print(Text("Success ✓", style="bold bright_green"))


def failure(console: Console) -> None:
    console.print(Text("Failure ✗", style="bold bright_red"))


def write_help(console: Console) -> None:
    box_separator(console, "commands", SeparatorKind.TOP)
    width = max(len(usage) for usage, _ in HELP_COMMANDS)
    boxed_lines(
        console,
        (Text.assemble((usage.ljust(width), "bold"), "  ", text) for usage, text in HELP_COMMANDS),
    )
    box_separator(console, "keys", SeparatorKind.MIDDLE)
    boxed_lines(console, ["Up/Down  Move the selection", "Ctrl-D   Quit"])
    box_separator(console, "", SeparatorKind.BOTTOM)


def format_updated(count: int) -> str:
    if count == 0:
        return "Nothing to do."
    if count == 1:
        return "Updated 1 snapshot."
    return f"Updated {count} snapshots."


def error(console: Console, message: str) -> None:
    console.print(Text.assemble(("Error: ", "bold red"), message), soft_wrap=True)


def warning(console: Console, message: str) -> None:
    console.print(Text(message, style="yellow"), soft_wrap=True)
