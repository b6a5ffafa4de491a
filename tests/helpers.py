"""Test helpers shared across modules."""

from __future__ import annotations

from rich.console import Console

from parrot.storage.models import Blob, ExecutionResult, Snapshot


class FakeRunner:
    """Stands in for ShellRunner with canned results per command."""

    def __init__(self, outputs: dict[str, ExecutionResult] | None = None) -> None:
        self.outputs = outputs or {}
        self.calls: list[str] = []

    def execute(self, command: str) -> ExecutionResult:
        self.calls.append(command)
        return self.outputs[command]


def output_of(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


def make_snapshot(
    name: str,
    cmd: str = "echo hi",
    stdout: bytes = b"hi\n",
    stderr: bytes = b"",
    exit_code: int | None = 0,
    tags: set[str] | None = None,
) -> Snapshot:
    return Snapshot(
        name=name,
        cmd=cmd,
        tags=tags or set(),
        exit_code=exit_code,
        stdout=Blob(name, ".out", stdout) if stdout else None,
        stderr=Blob(name, ".err", stderr) if stderr else None,
    )
