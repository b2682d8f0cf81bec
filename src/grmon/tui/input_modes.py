"""Pure mode system for key dispatch.

All keyboard input routes through App.on_key based on the current mode.
Textual BINDINGS are not used - on_key is the sole dispatcher.
"""

from enum import Enum, auto


class Mode(Enum):
    """Which full-screen view is active. MAIN is initial; dialogs return to it."""

    MAIN = auto()
    TRACE_DIALOG = auto()
    HELP_DIALOG = auto()


# Matches any key in a mode's keymap.
ANY_KEY = "*"

# Synthetic event id dispatched from App.on_resize.
RESIZE = "resize"


# [LAW:one-source-of-truth] Key→action mapping per mode.
# Keys are Textual key names; values are App action strings.
MODE_KEYMAP: dict[Mode, dict[str, str]] = {
    Mode.MAIN: {
        "up": "cursor_up",
        "k": "cursor_up",
        "down": "cursor_down",
        "j": "cursor_down",
        "r": "refresh",
        "s": "toggle_sort",
        "p": "toggle_pause",
        "enter": "toggle_trace",
        "o": "toggle_trace",
        "t": "open_trace",
        "h": "open_help",
        "question_mark": "open_help",
        "escape": "quit",
        "q": "quit",
        RESIZE: "relayout",
    },
    Mode.TRACE_DIALOG: {
        ANY_KEY: "close_dialog",
    },
    Mode.HELP_DIALOG: {
        ANY_KEY: "close_dialog",
    },
}


def lookup_action(mode: Mode, key: str, wildcard: bool = True) -> str | None:
    """Resolve an input event id to an action name for the given mode.

    Non-key events (resize) pass wildcard=False so "any key" maps ignore them.
    """
    keymap = MODE_KEYMAP.get(mode, MODE_KEYMAP[Mode.MAIN])
    action = keymap.get(key)
    if action is None and wildcard:
        action = keymap.get(ANY_KEY)
    return action


# [LAW:one-source-of-truth] Footer hints shown in the status line.
FOOTER_KEYS: list[tuple[str, str]] = [
    ("r", "refresh"),
    ("s", "sort"),
    ("p", "pause"),
    ("jk", "move"),
    ("o", "expand"),
    ("t", "trace"),
    ("?", "help"),
    ("q", "quit"),
]


# [LAW:one-source-of-truth] Help dialog text.
HELP_LINES: list[str] = [
    " r - manual refresh",
    " s - toggle sort column and refresh",
    " p - pause/unpause automatic updates",
    " <up>,<down>,j,k - move cursor position",
    " <enter>,o - expand trace under cursor (while paused)",
    " t - open trace in full screen",
    " h,? - show this help",
    " <esc>,q - exit grmon",
]
