"""Data models for parrot."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from enum import Enum

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[\\/]+")


class SnapshotStatus(str, Enum):
    UNKNOWN = "unknown"
    PASSED = "passed"
    FAILED = "failed"


@dataclass
class Blob:
    """A named chunk of captured output, stored as ``<name><extension>``."""

    name: str
    extension: str
    body: bytes = b""

    @property
    def file_name(self) -> str:
        return f"{self.name}{self.extension}"


@dataclass
class ExecutionResult:
    """Raw result of running a shell command.

    ``exit_code`` is None when the process was terminated by a signal.
    """

    stdout: bytes = b""
    stderr: bytes = b""
    exit_code: int | None = 0


@dataclass(eq=False)
class Snapshot:
    """A stored capture of a command's expected output.

    Snapshots compare by identity: two entries with the same content are still
    distinct members of the collection.
    """

    name: str
    cmd: str
    description: str | None = None
    tags: set[str] = field(default_factory=set)
    exit_code: int | None = 0
    stdout: Blob | None = None
    stderr: Blob | None = None
    status: SnapshotStatus = SnapshotStatus.UNKNOWN


def normalize_name(name: str) -> str:
    """Lowercase a name and collapse whitespace and path separators into dashes."""
    name = _WHITESPACE.sub("-", name.strip().lower())
    return _SEPARATORS.sub("-", name)


def random_name() -> str:
    return f"snap-{uuid.uuid4().hex[:8]}"


def to_blob(body: bytes, name: str, extension: str) -> Blob | None:
    """Wrap captured bytes in a blob. Empty output is stored as no blob."""
    if not body:
        return None
    return Blob(name=name, extension=extension, body=body)


def to_snapshot(
    name: str,
    cmd: str,
    result: ExecutionResult,
    description: str | None = None,
    tags: list[str] | set[str] | None = None,
) -> Snapshot:
    """Build a new snapshot from a fresh execution result."""
    return Snapshot(
        name=name,
        cmd=cmd,
        description=description,
        tags=set(tags or ()),
        exit_code=result.exit_code,
        stdout=to_blob(result.stdout, name, ".out"),
        stderr=to_blob(result.stderr, name, ".err"),
        status=SnapshotStatus.PASSED,
    )
