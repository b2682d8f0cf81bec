"""Rendering logic - pure functions building Rich Text for the grid, status and dialogs.

Kept free of widget state so rendering can be tested without a running app.
"""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

from grmon.row_store import RowWidget, SortKey
from grmon.scheduler import ScheduleSnapshot
from grmon.tui.input_modes import FOOTER_KEYS, HELP_LINES

ID_WIDTH = 8
STATE_WIDTH = 18
TRACE_INDENT = "    "

CURSOR_STYLE = Style(reverse=True)
HEADER_STYLE = Style(bold=True, underline=True)
TRACE_STYLE = Style(dim=True)
ERROR_STYLE = Style(color="red", bold=True)
PAUSED_STYLE = Style(color="yellow", bold=True)
LIVE_STYLE = Style(color="green", bold=True)

_SORT_LABELS = {SortKey.BY_ID: "id", SortKey.BY_STATE: "state"}


def _fit(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


def render_header(width: int, sort_key: SortKey) -> Text:
    id_label = "ID" + ("▼" if sort_key is SortKey.BY_ID else "")
    state_label = "STATE" + ("▼" if sort_key is SortKey.BY_STATE else "")
    line = "{:>{w1}}  {:<{w2}}  {}".format(
        id_label, state_label, "DESCRIPTION", w1=ID_WIDTH, w2=STATE_WIDTH
    )
    return Text(_fit(line, width), style=HEADER_STYLE)


def render_row(widget: RowWidget, width: int, selected: bool) -> Text:
    marker = "-" if widget.expanded else "+"
    line = "{:>{w1}}  {:<{w2}}  {} {}".format(
        widget.id,
        _fit(widget.state, STATE_WIDTH),
        marker if len(widget.trace_lines) > 1 else " ",
        widget.description,
        w1=ID_WIDTH,
        w2=STATE_WIDTH,
    )
    text = Text(_fit(line, width))
    if selected:
        text.pad_right(max(0, width - len(text)))
        text.stylize(CURSOR_STYLE)
    return text


def render_grid_lines(
    rows: list[RowWidget], cursor_index: int, width: int
) -> tuple[list[Text], list[tuple[int, int]]]:
    """Lay out every row plus its expanded trace.

    Returns (lines, spans) where spans[i] is the [start, end) line range of row i.
    """
    lines: list[Text] = []
    spans: list[tuple[int, int]] = []
    for index, widget in enumerate(rows):
        start = len(lines)
        lines.append(render_row(widget, width, selected=(index == cursor_index)))
        if widget.expanded:
            for trace_line in widget.trace_lines[1:]:
                lines.append(Text(_fit(TRACE_INDENT + trace_line, width), style=TRACE_STYLE))
        spans.append((start, len(lines)))
    return lines, spans


def scroll_top(spans: list[tuple[int, int]], cursor_index: int, top: int, height: int) -> int:
    """Smallest scroll adjustment that keeps the cursor row on screen."""
    if not spans or height <= 0:
        return 0
    start, end = spans[cursor_index]
    total = spans[-1][1]
    if start < top:
        top = start
    elif end > top + height:
        # Keep the row header visible even if its trace is taller than the view.
        top = min(start, end - height)
    return max(0, min(top, max(0, total - height)))


def render_grid(
    rows: list[RowWidget],
    cursor_index: int,
    sort_key: SortKey,
    width: int,
    height: int,
    top: int = 0,
) -> tuple[Text, int]:
    """Render the visible window of the grid. Returns (text, new_top)."""
    body_height = max(0, height - 1)
    lines, spans = render_grid_lines(rows, cursor_index, width)
    top = scroll_top(spans, cursor_index, top, body_height)
    visible = [render_header(width, sort_key)] + lines[top : top + body_height]
    if not rows:
        visible.append(Text("  (no execution units)", style=TRACE_STYLE))
    return Text("\n").join(visible), top


def _fmt_age(seconds: float | None) -> str:
    if seconds is None:
        return "never"
    if seconds < 1:
        return "just now"
    if seconds < 60:
        return "{:.0f}s ago".format(seconds)
    return "{:.0f}m ago".format(seconds // 60)


def render_status(
    snapshot: ScheduleSnapshot,
    sort_key: SortKey,
    row_count: int,
    now: float,
    last_error: str | None = None,
    defect_count: int = 0,
) -> Text:
    text = Text()
    if snapshot.paused:
        text.append(" PAUSED ", style=PAUSED_STYLE)
    elif snapshot.interval_seconds <= 0:
        # No timer at all; only r refreshes.
        text.append(" MANUAL ", style=PAUSED_STYLE)
    else:
        text.append(" LIVE {}s ".format(snapshot.interval_seconds), style=LIVE_STYLE)

    age = None if snapshot.last_refresh_at is None else now - snapshot.last_refresh_at
    parts = [
        "units: {}".format(row_count),
        "sort: {}".format(_SORT_LABELS[sort_key]),
        "updated: {}".format(_fmt_age(age)),
    ]
    if snapshot.in_flight:
        parts.append("polling…")
    if defect_count:
        parts.append("skipped {} block(s)".format(defect_count))
    text.append(" | ".join(parts))

    if last_error:
        text.append("  ")
        text.append("error: {}".format(last_error), style=ERROR_STYLE)

    text.append("   ")
    text.append(" ".join("{}:{}".format(k, d) for k, d in FOOTER_KEYS), style=TRACE_STYLE)
    return text


def render_trace(widget: RowWidget) -> Text:
    """Full-screen trace: state on the first line, then every frame."""
    lines = [Text("{} [{}]".format(widget.id, widget.state), style=HEADER_STYLE)]
    if not widget.trace_lines:
        lines.append(Text("(empty trace)", style=TRACE_STYLE))
    lines.extend(Text(line) for line in widget.trace_lines)
    return Text("\n").join(lines)


def render_help() -> Text:
    return Text("\n".join(HELP_LINES))
