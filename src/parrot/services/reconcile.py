"""Reconciliation of stored snapshots against fresh command output."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from parrot.services.shell import ShellRunner
from parrot.storage.models import Blob, Snapshot, SnapshotStatus, to_blob
from parrot.utils.diff import DiffLine, diff_lines

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Verdict for a single snapshot run.

    A diff is only set for a stream whose output drifted.
    """

    snapshot: Snapshot
    passed: bool
    stdout_diff: list[DiffLine] | None = None
    stderr_diff: list[DiffLine] | None = None
    expected_code: int | None = 0
    actual_code: int | None = 0

    @property
    def code_changed(self) -> bool:
        return self.expected_code != self.actual_code


@dataclass
class RunReport:
    results: list[RunResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.results)

    @property
    def failures(self) -> list[RunResult]:
        return [result for result in self.results if not result.passed]


def _body(blob: Blob | None) -> bytes:
    return blob.body if blob is not None else b""


class Reconciler:
    """Run snapshots in verify mode, or update them in accept mode."""

    def __init__(self, runner: ShellRunner) -> None:
        self.runner = runner

    def run(self, snapshot: Snapshot) -> RunResult:
        """Compare fresh output with the stored one. Only ``status`` changes."""
        result = self.runner.execute(snapshot.cmd)
        old_stdout = _body(snapshot.stdout)
        old_stderr = _body(snapshot.stderr)

        run_result = RunResult(
            snapshot=snapshot,
            passed=True,
            expected_code=snapshot.exit_code,
            actual_code=result.exit_code,
        )
        if result.stdout != old_stdout:
            run_result.stdout_diff = diff_lines(old_stdout, result.stdout)
        if result.stderr != old_stderr:
            run_result.stderr_diff = diff_lines(old_stderr, result.stderr)
        run_result.passed = (
            run_result.stdout_diff is None
            and run_result.stderr_diff is None
            and not run_result.code_changed
        )

        snapshot.status = SnapshotStatus.PASSED if run_result.passed else SnapshotStatus.FAILED
        logger.debug("Run %s: %s", snapshot.name, snapshot.status.value)
        return run_result

    def run_all(self, snapshots: Iterable[Snapshot]) -> RunReport:
        return RunReport(results=[self.run(snapshot) for snapshot in snapshots])

    def update(self, snapshot: Snapshot) -> bool:
        """Accept the current output as the snapshot's truth.

        Returns True if any stored field changed.
        """
        result = self.runner.execute(snapshot.cmd)
        new_stdout = to_blob(result.stdout, snapshot.name, ".out")
        new_stderr = to_blob(result.stderr, snapshot.name, ".err")

        has_changed = False
        if snapshot.exit_code != result.exit_code:
            snapshot.exit_code = result.exit_code
            has_changed = True
        if snapshot.stdout != new_stdout:
            snapshot.stdout = new_stdout
            has_changed = True
        if snapshot.stderr != new_stderr:
            snapshot.stderr = new_stderr
            has_changed = True

        snapshot.status = SnapshotStatus.PASSED
        logger.debug("Update %s: %s", snapshot.name, "changed" if has_changed else "unchanged")
        return has_changed
