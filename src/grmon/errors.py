"""Error taxonomy for sampling a remote dump.

This module is STABLE. Safe for `from` imports everywhere.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParseDefect:
    """A dump block whose header did not parse. Recorded, never raised."""

    block_index: int
    header: str


class GrmonError(Exception):
    """Base class for errors that abort a single refresh."""


class TransportError(GrmonError):
    """Fetch failed, timed out, or returned a non-success status."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__("{}: {}".format(url, reason))


class TotalParseFailure(GrmonError):
    """Dump was non-empty but yielded zero valid records."""

    def __init__(self, defects: list[ParseDefect]):
        self.defects = list(defects)
        super().__init__(
            "no valid records in dump ({} malformed block(s))".format(len(self.defects))
        )
