"""Main TUI application using Textual.

// [LAW:locality-or-seam] Thin coordinator - delegates to action_handlers,
//   rendering, mode_stack.
// [LAW:single-enforcer] on_key is the sole key dispatcher; the Mode keymap decides.

Threads: the scheduler thread only posts RefreshDue; the poll worker thread
only runs Sampler.poll and hands the result back with call_from_thread.
Reconcile and rendering always run on the app's message loop.
"""

import logging
import time
import traceback

from textual.app import App, ComposeResult
from textual.css.query import NoMatches
from textual.message import Message

import grmon.tui.input_modes
from grmon.errors import GrmonError
from grmon.row_store import RowStore
from grmon.sampler import Sample
from grmon.scheduler import DEFAULT_TICK_SECONDS, ScheduleState, Scheduler
from grmon.tui import action_handlers as _actions
from grmon.tui.mode_stack import ModeStack
from grmon.tui.widgets import GridView, StatusBar

logger = logging.getLogger(__name__)


class RefreshDue(Message, bubble=False):
    """Thread-safe bridge: scheduler thread → app message pump."""


class GrmonApp(App):
    """TUI application for grmon."""

    ENABLE_COMMAND_PALETTE = False
    TITLE = "grmon"

    def __init__(
        self,
        sampler,
        interval: int = 5,
        *,
        tick_seconds: float = DEFAULT_TICK_SECONDS,
        clock=time.monotonic,
    ):
        super().__init__()
        self._sampler = sampler
        self._store = RowStore()
        self._schedule = ScheduleState(interval, clock=clock)
        self._poll_scheduler = Scheduler(
            self._schedule,
            on_due=self._post_refresh_due,
            tick_seconds=tick_seconds,
        )
        self._mode_stack = ModeStack(
            on_enter_modal=self._poll_scheduler.stop,
            on_return_main=self._on_return_main,
        )
        self._last_error: str | None = None
        self._defect_count = 0
        self._poll_count = 0

        # Buffered error log - dumped to the log file after the TUI exits
        self._error_log: list[str] = []

        self._grid_id = "grid"
        self._status_id = "status"
        self.sub_title = getattr(sampler, "url", "")

    # ─── Widget accessors ──────────────────────────────────────────────

    def _query_safe(self, selector):
        try:
            return self.query_one(selector)
        except NoMatches:
            return None

    def _get_grid(self):
        return self._query_safe("#" + self._grid_id)

    def _get_status(self):
        return self._query_safe("#" + self._status_id)

    # ─── Lifecycle ─────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield GridView(self._store, id=self._grid_id)
        yield StatusBar(id=self._status_id)

    def on_mount(self):
        self._repaint()
        self.set_interval(1.0, self._repaint_status)
        self._poll_scheduler.start()
        self.request_refresh(manual=True)

    def on_unmount(self):
        self._poll_scheduler.stop()
        for line in self._error_log:
            logger.error("%s", line)

    def _handle_exception(self, error: Exception) -> None:
        """// [LAW:single-enforcer] Top-level exception handler - keeps the dashboard running.

        Logs the traceback and surfaces the error in the status line. Does NOT
        call super(); the user quits explicitly.
        """
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._error_log.append(f"EXCEPTION: {error}")
        self._error_log.append(tb)
        logger.error("Unhandled exception: %s\n%s", error, tb)
        self._last_error = f"{type(error).__name__}: {error}"
        self._repaint_status()

    # ─── State accessors (tests, status) ───────────────────────────────

    @property
    def store(self) -> RowStore:
        return self._store

    @property
    def schedule(self) -> ScheduleState:
        return self._schedule

    @property
    def input_mode(self):
        return self._mode_stack.current

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def poll_count(self) -> int:
        return self._poll_count

    # ─── Rendering ─────────────────────────────────────────────────────

    def _repaint_grid(self):
        grid = self._get_grid()
        if grid is not None:
            grid.show()

    def _repaint_status(self):
        status = self._get_status()
        if status is not None:
            status.update_display(
                self._schedule.snapshot(),
                self._store,
                self._last_error,
                self._defect_count,
            )

    def _repaint(self):
        self._repaint_grid()
        self._repaint_status()

    def _on_return_main(self):
        # Dialog screens covered the whole display; restart ticking and repaint everything.
        self._poll_scheduler.start()
        self.refresh(layout=True)
        self._repaint()

    # ─── Refresh pipeline ──────────────────────────────────────────────

    def _post_refresh_due(self):
        # Called from the scheduler thread; post_message is thread-safe.
        self.post_message(RefreshDue())

    def on_refresh_due(self, message: RefreshDue) -> None:
        if not self._mode_stack.is_main:
            return
        self.request_refresh(manual=False)

    def request_refresh(self, manual: bool) -> bool:
        """Start a poll unless one is already in flight. Returns whether it started."""
        if not self._schedule.begin_refresh(manual=manual):
            logger.debug("refresh request dropped (manual=%s)", manual)
            return False
        self._repaint_status()
        self.run_worker(self._poll_worker, thread=True, exclusive=False, group="poll")
        return True

    def _poll_worker(self):
        try:
            sample = self._sampler.poll()
        except GrmonError as e:
            self.call_from_thread(self._on_poll_failed, e)
        except Exception as e:
            logger.exception("unexpected poll failure")
            self.call_from_thread(self._on_poll_failed, e)
        else:
            self.call_from_thread(self._on_sample, sample)

    def _on_sample(self, sample: Sample) -> None:
        self._schedule.finish_refresh()
        self._poll_count += 1
        self._store.reconcile(sample.records)
        self._last_error = None
        self._defect_count = len(sample.defects)
        self._repaint()

    def _on_poll_failed(self, error: Exception) -> None:
        # Previous rows stay as they were; only the status line changes.
        self._schedule.finish_refresh()
        self._poll_count += 1
        self._last_error = str(error) or type(error).__name__
        logger.warning("refresh failed: %s", self._last_error)
        self._repaint()

    # ─── Delegates to action_handlers ──────────────────────────────────
    # Textual requires action_* as methods on the App class.

    def action_cursor_up(self):
        _actions.cursor_up(self)

    def action_cursor_down(self):
        _actions.cursor_down(self)

    def action_refresh(self):
        _actions.refresh(self)

    def action_toggle_sort(self):
        _actions.toggle_sort(self)

    def action_toggle_pause(self):
        _actions.toggle_pause(self)

    def action_toggle_trace(self):
        _actions.toggle_trace(self)

    def action_open_trace(self):
        _actions.open_trace(self)

    def action_open_help(self):
        _actions.open_help(self)

    def action_close_dialog(self):
        _actions.close_dialog(self)

    def action_relayout(self):
        _actions.relayout(self)

    def action_quit(self):
        _actions.quit_app(self)

    # ─── Input dispatch ────────────────────────────────────────────────

    async def on_key(self, event) -> None:
        action_name = grmon.tui.input_modes.lookup_action(self._mode_stack.current, event.key)
        if action_name:
            event.prevent_default()
            event.stop()
            await self.run_action(action_name)

    async def on_resize(self, event) -> None:
        action_name = grmon.tui.input_modes.lookup_action(
            self._mode_stack.current, grmon.tui.input_modes.RESIZE, wildcard=False
        )
        if action_name:
            await self.run_action(action_name)
