"""Tests for pure rendering functions."""

from grmon.row_store import RowWidget, SortKey
from grmon.scheduler import ScheduleSnapshot
from grmon.tui import rendering


def _widget(unit_id, state="running", frames=("main.f()  /f.go:1",), expanded=False):
    return RowWidget(
        id=unit_id,
        state=state,
        description=frames[0] if frames else "",
        trace_lines=list(frames),
        expanded=expanded,
    )


def _snapshot(**overrides):
    values = dict(paused=False, interval_seconds=5, last_refresh_at=None, in_flight=False)
    values.update(overrides)
    return ScheduleSnapshot(**values)


class TestRenderRow:
    def test_row_shows_id_state_description(self):
        text = rendering.render_row(_widget(42, "select"), width=80, selected=False)
        assert "42" in text.plain
        assert "select" in text.plain
        assert "main.f()" in text.plain

    def test_row_is_truncated_to_width(self):
        text = rendering.render_row(_widget(1, frames=("x" * 200,)), width=40, selected=False)
        assert len(text.plain) == 40
        assert text.plain.endswith("…")

    def test_selected_row_fills_width(self):
        text = rendering.render_row(_widget(1), width=60, selected=True)
        assert len(text.plain) == 60

    def test_expand_marker_only_with_more_frames(self):
        single = rendering.render_row(_widget(1), width=80, selected=False)
        multi = rendering.render_row(
            _widget(2, frames=("a()", "b()")), width=80, selected=False
        )
        assert "+" not in single.plain
        assert "+ a()" in multi.plain


class TestGridLines:
    def test_expanded_rows_add_trace_lines(self):
        rows = [
            _widget(1, frames=("a()", "b()", "c()"), expanded=True),
            _widget(2),
        ]
        lines, spans = rendering.render_grid_lines(rows, cursor_index=0, width=80)
        assert spans == [(0, 3), (3, 4)]
        assert lines[1].plain.strip() == "b()"
        assert lines[2].plain.strip() == "c()"

    def test_collapsed_rows_are_one_line(self):
        rows = [_widget(1, frames=("a()", "b()")), _widget(2)]
        _, spans = rendering.render_grid_lines(rows, cursor_index=0, width=80)
        assert spans == [(0, 1), (1, 2)]


class TestScrollTop:
    def test_cursor_below_window_scrolls_down(self):
        spans = [(i, i + 1) for i in range(50)]
        assert rendering.scroll_top(spans, cursor_index=30, top=0, height=10) == 21

    def test_cursor_above_window_scrolls_up(self):
        spans = [(i, i + 1) for i in range(50)]
        assert rendering.scroll_top(spans, cursor_index=5, top=20, height=10) == 5

    def test_cursor_inside_window_keeps_top(self):
        spans = [(i, i + 1) for i in range(50)]
        assert rendering.scroll_top(spans, cursor_index=12, top=10, height=10) == 10

    def test_tall_expanded_row_keeps_header_visible(self):
        spans = [(0, 1), (1, 40), (40, 41)]
        assert rendering.scroll_top(spans, cursor_index=1, top=0, height=10) == 1

    def test_empty(self):
        assert rendering.scroll_top([], cursor_index=0, top=5, height=10) == 0


class TestRenderGrid:
    def test_header_marks_sort_column(self):
        text, _ = rendering.render_grid([_widget(1)], 0, SortKey.BY_STATE, 80, 10)
        header = text.plain.splitlines()[0]
        assert "STATE▼" in header
        assert "ID▼" not in header

    def test_empty_grid_placeholder(self):
        text, top = rendering.render_grid([], 0, SortKey.BY_ID, 80, 10)
        assert "no execution units" in text.plain
        assert top == 0

    def test_window_height_respected(self):
        rows = [_widget(i) for i in range(100)]
        text, top = rendering.render_grid(rows, 99, SortKey.BY_ID, 80, 11)
        lines = text.plain.splitlines()
        assert len(lines) == 11
        assert top == 90
        assert lines[-1].strip().startswith("99")


class TestRenderStatus:
    def test_paused_and_error(self):
        text = rendering.render_status(
            _snapshot(paused=True),
            SortKey.BY_ID,
            row_count=3,
            now=10.0,
            last_error="connection refused",
        )
        assert "PAUSED" in text.plain
        assert "units: 3" in text.plain
        assert "error: connection refused" in text.plain

    def test_live_with_age_and_defects(self):
        text = rendering.render_status(
            _snapshot(last_refresh_at=7.0),
            SortKey.BY_STATE,
            row_count=0,
            now=10.0,
            defect_count=2,
        )
        assert "LIVE 5s" in text.plain
        assert "sort: state" in text.plain
        assert "3s ago" in text.plain
        assert "skipped 2 block(s)" in text.plain

    def test_zero_interval_unpaused_is_manual(self):
        text = rendering.render_status(
            _snapshot(paused=False, interval_seconds=0), SortKey.BY_ID, 0, now=1.0
        )
        assert "MANUAL" in text.plain
        assert "LIVE" not in text.plain

    def test_never_refreshed(self):
        text = rendering.render_status(_snapshot(), SortKey.BY_ID, 0, now=1.0)
        assert "updated: never" in text.plain


class TestTraceAndHelp:
    def test_trace_lists_state_and_all_frames(self):
        text = rendering.render_trace(_widget(9, "chan receive", frames=("a()", "b()")))
        assert text.plain.splitlines() == ["9 [chan receive]", "a()", "b()"]

    def test_empty_trace(self):
        text = rendering.render_trace(_widget(9, frames=()))
        assert "(empty trace)" in text.plain

    def test_help_text(self):
        assert "manual refresh" in rendering.render_help().plain
