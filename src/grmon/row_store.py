"""Per-unit widget cache and grid state.

// [LAW:one-source-of-truth] RowStore owns every RowWidget; rows are references into it.
// [LAW:single-enforcer] reconcile() is the only place rows are rebuilt.

Rows are rebuilt wholesale on each successful sample. Widgets are not: they
are keyed by unit id so view-local flags (expanded) survive a refresh.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from grmon.sampler import ExecutionUnitRecord

# Consecutive successful samples an id may be missing from before eviction.
EVICT_AFTER = 3


class SortKey(Enum):
    BY_ID = "id"
    BY_STATE = "state"


@dataclass(eq=False)
class RowWidget:
    """Persistent view state for one execution unit."""

    id: int
    state: str = ""
    description: str = ""
    trace_lines: list[str] = field(default_factory=list)
    expanded: bool = False
    missed: int = 0

    def update(self, record: ExecutionUnitRecord) -> None:
        self.state = record.state
        self.description = record.description
        self.trace_lines = list(record.frames)
        self.missed = 0

    def toggle_show_trace(self) -> None:
        self.expanded = not self.expanded


# [LAW:dataflow-not-control-flow] Sort key -> comparator key function.
_SORT_KEYS = {
    SortKey.BY_ID: lambda w: (w.id,),
    SortKey.BY_STATE: lambda w: (w.state, w.id),
}


def sort_rows(widgets, sort_key: SortKey) -> list[RowWidget]:
    return sorted(widgets, key=_SORT_KEYS[sort_key])


@dataclass
class GridState:
    rows: list[RowWidget] = field(default_factory=list)
    cursor_index: int = 0
    sort_key: SortKey = SortKey.BY_ID

    def clamp_cursor(self) -> None:
        if not self.rows:
            self.cursor_index = 0
        else:
            self.cursor_index = max(0, min(self.cursor_index, len(self.rows) - 1))


class RowStore:
    """Widget cache plus the grid built from it."""

    def __init__(self, sort_key: SortKey = SortKey.BY_ID):
        self._widgets: dict[int, RowWidget] = {}
        self.grid = GridState(sort_key=sort_key)

    # ─── Queries ───────────────────────────────────────────────────────

    @property
    def rows(self) -> list[RowWidget]:
        return self.grid.rows

    @property
    def cursor_index(self) -> int:
        return self.grid.cursor_index

    @property
    def sort_key(self) -> SortKey:
        return self.grid.sort_key

    def cached(self, unit_id: int) -> RowWidget | None:
        return self._widgets.get(unit_id)

    def cache_size(self) -> int:
        return len(self._widgets)

    def current(self) -> RowWidget | None:
        """Widget under the cursor, or None when the grid is empty."""
        if not self.grid.rows:
            return None
        return self.grid.rows[self.grid.cursor_index]

    # ─── Mutations ─────────────────────────────────────────────────────

    def reconcile(self, records: list[ExecutionUnitRecord]) -> None:
        """Apply a successful sample.

        Creates or updates widgets by id, ages and evicts widgets not seen,
        then rebuilds rows from exactly the ids in this sample.
        """
        focused = self.current()
        focused_id = focused.id if focused is not None else None

        seen: dict[int, RowWidget] = {}
        for record in records:
            widget = self._widgets.get(record.id)
            if widget is None:
                widget = RowWidget(id=record.id)
                self._widgets[record.id] = widget
            widget.update(record)
            seen[record.id] = widget

        for unit_id in list(self._widgets):
            if unit_id in seen:
                continue
            widget = self._widgets[unit_id]
            widget.missed += 1
            if widget.missed >= EVICT_AFTER:
                del self._widgets[unit_id]

        self.grid.rows = sort_rows(seen.values(), self.grid.sort_key)
        self._restore_cursor(focused_id)

    def set_sort_key(self, sort_key: SortKey) -> None:
        """Re-sort the current rows in place; no new data is needed."""
        focused = self.current()
        self.grid.sort_key = sort_key
        self.grid.rows = sort_rows(self.grid.rows, sort_key)
        self._restore_cursor(focused.id if focused is not None else None)

    def toggle_sort(self) -> SortKey:
        next_key = SortKey.BY_STATE if self.grid.sort_key is SortKey.BY_ID else SortKey.BY_ID
        self.set_sort_key(next_key)
        return next_key

    def cursor_up(self) -> bool:
        """Move up one row. Returns False when already at the top."""
        if self.grid.cursor_index <= 0:
            return False
        self.grid.cursor_index -= 1
        return True

    def cursor_down(self) -> bool:
        """Move down one row. Returns False when already at the bottom."""
        if self.grid.cursor_index >= len(self.grid.rows) - 1:
            return False
        self.grid.cursor_index += 1
        return True

    def toggle_show_trace(self) -> bool:
        widget = self.current()
        if widget is None:
            return False
        widget.toggle_show_trace()
        return True

    def _restore_cursor(self, focused_id: int | None) -> None:
        if focused_id is not None:
            for index, widget in enumerate(self.grid.rows):
                if widget.id == focused_id:
                    self.grid.cursor_index = index
                    return
        self.grid.clamp_cursor()
