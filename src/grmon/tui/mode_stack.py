"""Finite mode machine: MAIN → TRACE_DIALOG → MAIN, MAIN → HELP_DIALOG → MAIN.

// [LAW:single-enforcer] Mode transitions own scheduler cancellation and restart.

enter() runs the stop hook before the mode changes, so no refresh signal is
produced once a dialog is visible. exit() switches back to MAIN first and then
runs the restart hook (scheduler start + forced full re-render).
"""

from typing import Callable

from grmon.tui.input_modes import Mode


class ModeError(Exception):
    """Illegal mode transition."""


class ModeStack:
    def __init__(
        self,
        on_enter_modal: Callable[[], None],
        on_return_main: Callable[[], None],
    ):
        self._stack: list[Mode] = [Mode.MAIN]
        self._on_enter_modal = on_enter_modal
        self._on_return_main = on_return_main

    @property
    def current(self) -> Mode:
        return self._stack[-1]

    @property
    def is_main(self) -> bool:
        return self.current is Mode.MAIN

    def enter(self, mode: Mode) -> None:
        if mode is Mode.MAIN:
            raise ModeError("MAIN is entered only by exit()")
        if not self.is_main:
            raise ModeError("cannot enter {} from {}".format(mode.name, self.current.name))
        self._on_enter_modal()
        self._stack.append(mode)

    def exit(self) -> Mode:
        """Leave the active dialog. Returns the mode that was closed."""
        if self.is_main:
            raise ModeError("no dialog to exit")
        closed = self._stack.pop()
        self._on_return_main()
        return closed
