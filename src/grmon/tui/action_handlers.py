"""Action handlers for cursor movement, refresh, sort, pause and dialogs.

// [LAW:locality-or-seam] All action logic here - app.py keeps thin delegates.
// [LAW:one-way-deps] Depends on row_store, scheduler, dialogs. No upward deps.

All functions take the app as their first parameter and run on the
foreground loop only.
"""

import logging

import grmon.tui.dialogs
from grmon.tui.input_modes import Mode

logger = logging.getLogger(__name__)


# ─── Cursor ────────────────────────────────────────────────────────────


def cursor_up(app) -> None:
    if app._store.cursor_up():
        app._repaint_grid()


def cursor_down(app) -> None:
    if app._store.cursor_down():
        app._repaint_grid()


# ─── Refresh / sort / pause ────────────────────────────────────────────


def refresh(app) -> None:
    app.request_refresh(manual=True)


def toggle_sort(app) -> None:
    sort_key = app._store.toggle_sort()
    logger.debug("sort key -> %s", sort_key.value)
    app._repaint()
    app.request_refresh(manual=True)


def toggle_pause(app) -> None:
    paused = app._schedule.toggle_pause()
    logger.info("automatic refresh %s", "paused" if paused else "resumed")
    app._repaint_status()


def toggle_trace(app) -> None:
    """Expand/collapse the row under the cursor. Only while paused."""
    if not app._schedule.paused:
        return
    if app._store.toggle_show_trace():
        app._repaint_grid()


# ─── Dialogs ───────────────────────────────────────────────────────────


def open_trace(app) -> None:
    widget = app._store.current()
    if widget is None:
        return
    app._mode_stack.enter(Mode.TRACE_DIALOG)
    app.push_screen(grmon.tui.dialogs.TraceDialog(widget))


def open_help(app) -> None:
    app._mode_stack.enter(Mode.HELP_DIALOG)
    app.push_screen(grmon.tui.dialogs.HelpDialog())


def close_dialog(app) -> None:
    if app._mode_stack.is_main:
        return
    app.pop_screen()
    closed = app._mode_stack.exit()
    logger.debug("closed %s", closed.name)


# ─── Layout / lifecycle ────────────────────────────────────────────────


def relayout(app) -> None:
    app.refresh(layout=True)
    app._repaint()


def quit_app(app) -> None:
    app._poll_scheduler.stop()
    app.exit()
