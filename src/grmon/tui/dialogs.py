"""Modal screens for the full-screen trace and the help text.

Both are display-only. Key handling stays in App.on_key (Mode keymaps),
which closes them on any key.
"""

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Static

import grmon.tui.rendering
from grmon.row_store import RowWidget


class TraceScroll(VerticalScroll, can_focus=False):
    """Mouse-scrollable only; keys must reach App.on_key."""


class TraceDialog(ModalScreen[None]):
    """Full-screen trace for one execution unit."""

    DEFAULT_CSS = """
    TraceDialog {
        background: $background;
    }

    TraceDialog TraceScroll {
        width: 100%;
        height: 100%;
        padding: 0 1;
    }
    """

    def __init__(self, widget: RowWidget):
        super().__init__()
        self.unit_id = widget.id
        self._trace_text: Text = grmon.tui.rendering.render_trace(widget)

    def compose(self) -> ComposeResult:
        with TraceScroll():
            yield Static(self._trace_text, id="trace-body")


class HelpDialog(ModalScreen[None]):
    """Key binding summary."""

    DEFAULT_CSS = """
    HelpDialog {
        align: center middle;
    }

    HelpDialog Static {
        width: auto;
        height: auto;
        border: solid $accent;
        border-title-align: left;
        padding: 0 1;
    }
    """

    def compose(self) -> ComposeResult:
        body = Static(grmon.tui.rendering.render_help(), id="help-body")
        body.border_title = "help"
        yield body
