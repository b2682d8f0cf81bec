"""Logging bootstrap for grmon.

// [LAW:single-enforcer] Handler wiring for the "grmon" logger lives here only.

The TUI owns the terminal while it runs, so records go to a rotating file
and a stderr handler is attached only on request. A tally handler counts
warnings (failed polls among them) so the CLI can point at the log file once
the screen is released.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "grmon"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"
CONSOLE_FORMAT = "grmon: %(levelname)s %(message)s"
MAX_BYTES = 20 * 1024 * 1024
BACKUP_COUNT = 5


class WarningTally(logging.Handler):
    """Counts WARNING and above. Writes nothing."""

    def __init__(self):
        super().__init__(level=logging.WARNING)
        self.count = 0

    def emit(self, record: logging.LogRecord) -> None:
        self.count += 1


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str
    tally: WarningTally = field(compare=False, repr=False)

    @property
    def warning_count(self) -> int:
        return self.tally.count

    def exit_notice(self) -> str | None:
        """Line for stderr after the TUI exits; None when nothing was worth a warning."""
        if not self.tally.count:
            return None
        return "grmon: {} warning(s) logged to {}".format(self.tally.count, self.file_path)


_RUNTIME: LoggingRuntime | None = None


def resolve_level(raw: str | None) -> tuple[str, int]:
    """GRMON_LOG_LEVEL text to (name, level). Unknown names mean INFO."""
    level = logging.getLevelName(str(raw or "INFO").strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    return logging.getLevelName(level), level


def resolve_path() -> Path:
    explicit = os.environ.get("GRMON_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = os.environ.get("GRMON_LOG_DIR") or Path.home() / ".local" / "share" / "grmon" / "logs"
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return Path(log_dir) / "grmon-{}-{}.log".format(stamp, os.getpid())


def configure(console: bool = False) -> LoggingRuntime:
    """Attach handlers to the grmon logger. Later calls return the first runtime."""
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level_name, level = resolve_level(os.environ.get("GRMON_LOG_LEVEL"))
    path = resolve_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        path, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    tally = WarningTally()
    handlers: list[logging.Handler] = [file_handler, tally]
    if console:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers.append(stream)

    logger = logging.getLogger(LOGGER_NAME)
    _detach(logger)
    logger.setLevel(level)
    logger.propagate = False
    for handler in handlers:
        logger.addHandler(handler)
    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(
        level_name=level_name, level=level, file_path=str(path), tally=tally
    )
    return _RUNTIME


def _detach(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def reset() -> None:
    """Detach handlers and forget the runtime. Used by tests."""
    global _RUNTIME
    logger = logging.getLogger(LOGGER_NAME)
    _detach(logger)
    logger.propagate = True
    _RUNTIME = None
