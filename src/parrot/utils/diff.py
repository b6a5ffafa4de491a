"""Line-oriented diff over raw bytes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiffKind(Enum):
    UNCHANGED = " "
    ADDED = "+"
    REMOVED = "-"


@dataclass(frozen=True)
class DiffLine:
    kind: DiffKind
    content: bytes


def split_lines(blob: bytes) -> list[bytes]:
    """Split on line feeds only; a carriage return stays part of its line."""
    return blob.split(b"\n")


def diff_lines(old: bytes, new: bytes) -> list[DiffLine]:
    """Compute a minimal line diff between two blobs.

    Uses a longest-common-subsequence table over the lines that remain after
    trimming the shared prefix and suffix. Within a changed block, removed
    lines are listed before added lines.
    """
    a = split_lines(old)
    b = split_lines(new)

    prefix = 0
    while prefix < len(a) and prefix < len(b) and a[prefix] == b[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < len(a) - prefix
        and suffix < len(b) - prefix
        and a[len(a) - 1 - suffix] == b[len(b) - 1 - suffix]
    ):
        suffix += 1

    mid_a = a[prefix : len(a) - suffix]
    mid_b = b[prefix : len(b) - suffix]

    result = [DiffLine(DiffKind.UNCHANGED, line) for line in a[:prefix]]
    result.extend(_lcs_script(mid_a, mid_b))
    result.extend(DiffLine(DiffKind.UNCHANGED, line) for line in a[len(a) - suffix :])
    return result


def _lcs_script(a: list[bytes], b: list[bytes]) -> list[DiffLine]:
    n, m = len(a), len(b)
    # lengths[i][j] is the LCS length of a[i:] and b[j:]
    lengths = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = lengths[i], lengths[i + 1]
        for j in range(m - 1, -1, -1):
            if a[i] == b[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])

    script: list[DiffLine] = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            script.append(DiffLine(DiffKind.UNCHANGED, a[i]))
            i += 1
            j += 1
        elif lengths[i + 1][j] >= lengths[i][j + 1]:
            script.append(DiffLine(DiffKind.REMOVED, a[i]))
            i += 1
        else:
            script.append(DiffLine(DiffKind.ADDED, b[j]))
            j += 1
    script.extend(DiffLine(DiffKind.REMOVED, line) for line in a[i:])
    script.extend(DiffLine(DiffKind.ADDED, line) for line in b[j:])
    return script
