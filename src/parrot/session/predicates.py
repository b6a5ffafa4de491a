"""Filter predicates over snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from parrot.storage.models import Snapshot, SnapshotStatus


@dataclass(frozen=True)
class ByTag:
    tag: str

    def matches(self, snapshot: Snapshot) -> bool:
        return self.tag in snapshot.tags

    def __str__(self) -> str:
        return f"tag:{self.tag}"


@dataclass(frozen=True)
class ByStatus:
    status: SnapshotStatus

    def matches(self, snapshot: Snapshot) -> bool:
        return snapshot.status is self.status

    def __str__(self) -> str:
        return f"status:{self.status.value}"


@dataclass(frozen=True)
class ByName:
    substring: str

    def matches(self, snapshot: Snapshot) -> bool:
        return self.substring.lower() in snapshot.name.lower()

    def __str__(self) -> str:
        return f"name:{self.substring}"


@dataclass(frozen=True)
class BySubstring:
    """Matches the substring against both the name and the command text."""

    substring: str

    def matches(self, snapshot: Snapshot) -> bool:
        needle = self.substring.lower()
        return needle in snapshot.name.lower() or needle in snapshot.cmd.lower()

    def __str__(self) -> str:
        return repr(self.substring)


Predicate = Union[ByTag, ByStatus, ByName, BySubstring]
