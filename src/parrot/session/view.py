"""Filterable, cursor-addressable projection over the snapshot collection."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator

from parrot.errors import BorrowError
from parrot.session.predicates import Predicate
from parrot.storage.models import Snapshot

logger = logging.getLogger(__name__)


class View:
    """Presentation state over a shared list of snapshots.

    The view keeps indices into ``snapshots`` (owned by the store) plus a
    filter stack and a cursor into the filtered entries. It never copies or
    mutates snapshot data itself.
    """

    def __init__(self, snapshots: list[Snapshot]) -> None:
        self._snapshots = snapshots
        self._filters: list[Predicate] = []
        self._visible: list[int] = []
        self._cursor: int | None = None
        self._borrowed = False
        self._recompute(keep=None)

    @property
    def filters(self) -> list[Predicate]:
        return list(self._filters)

    @property
    def cursor(self) -> int | None:
        return self._cursor

    def __len__(self) -> int:
        return len(self._visible)

    def apply_filter(self, predicates: Iterable[Predicate]) -> None:
        """Push predicates onto the filter stack; all of them must match."""
        self._check_borrow()
        keep = self._selected_index()
        self._filters.extend(predicates)
        self._recompute(keep)
        logger.debug("Filters: %s (%d visible)", [str(p) for p in self._filters], len(self._visible))

    def clear_filters(self) -> None:
        self._check_borrow()
        self._filters.clear()
        self._recompute(keep=None)

    def refresh(self) -> None:
        """Re-evaluate the filters after the collection or statuses changed."""
        self._check_borrow()
        self._recompute(self._selected_index())

    def up(self) -> None:
        self._check_borrow()
        if self._cursor is not None and self._cursor > 0:
            self._cursor -= 1

    def down(self) -> None:
        self._check_borrow()
        if self._cursor is not None and self._cursor < len(self._visible) - 1:
            self._cursor += 1

    def get_view(self) -> list[Snapshot]:
        """Currently visible snapshots, in collection order."""
        self._check_borrow()
        return [self._snapshots[index] for index in self._visible]

    def get_selected(self) -> Snapshot | None:
        self._check_borrow()
        index = self._selected_index()
        return self._snapshots[index] if index is not None else None

    @contextmanager
    def get_selected_mut(self) -> Iterator[Snapshot | None]:
        """Hold exclusive access to the selected snapshot.

        Until the ``with`` block exits, any other access through this view
        raises BorrowError; persist or iterate only after releasing it.
        """
        self._check_borrow()
        index = self._selected_index()
        self._borrowed = True
        try:
            yield self._snapshots[index] if index is not None else None
        finally:
            self._borrowed = False

    def _check_borrow(self) -> None:
        if self._borrowed:
            raise BorrowError("The selected snapshot is already borrowed for mutation.")

    def _selected_index(self) -> int | None:
        if self._cursor is None:
            return None
        return self._visible[self._cursor]

    def _recompute(self, keep: int | None) -> None:
        self._visible = [
            index
            for index, snapshot in enumerate(self._snapshots)
            if all(predicate.matches(snapshot) for predicate in self._filters)
        ]
        if not self._visible:
            self._cursor = None
        elif keep is not None and keep in self._visible:
            self._cursor = self._visible.index(keep)
        else:
            self._cursor = 0
