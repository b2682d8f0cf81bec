"""Custom widgets for the TUI interface."""

import time

from textual.widgets import Static

import grmon.tui.rendering
from grmon.row_store import RowStore
from grmon.scheduler import ScheduleSnapshot


class GridView(Static):
    """Execution-unit grid. Renders a scrolled window that keeps the cursor visible."""

    DEFAULT_CSS = """
    GridView {
        height: 1fr;
        width: 100%;
    }
    """

    def __init__(self, store: RowStore, **kwargs):
        super().__init__("", **kwargs)
        self._store = store
        self._window_top = 0

    def show(self) -> None:
        """Rebuild the display text from the store."""
        width = self.size.width or 80
        height = self.size.height or 24
        grid = self._store.grid
        text, self._window_top = grmon.tui.rendering.render_grid(
            grid.rows, grid.cursor_index, grid.sort_key, width, height, self._window_top
        )
        self.update(text)

    def on_resize(self, event) -> None:
        self.show()


class StatusBar(Static):
    """One-line status: schedule state, sort key, last error, key hints."""

    DEFAULT_CSS = """
    StatusBar {
        dock: bottom;
        height: 1;
        width: 100%;
        background: $panel;
    }
    """

    def __init__(self, **kwargs):
        super().__init__("", **kwargs)

    def update_display(
        self,
        snapshot: ScheduleSnapshot,
        store: RowStore,
        last_error: str | None,
        defect_count: int,
    ) -> None:
        self.update(
            grmon.tui.rendering.render_status(
                snapshot,
                store.sort_key,
                len(store.rows),
                time.monotonic(),
                last_error=last_error,
                defect_count=defect_count,
            )
        )
