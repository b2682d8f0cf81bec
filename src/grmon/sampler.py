"""Fetch a raw execution-unit dump over HTTP and parse it into records.

// [LAW:single-enforcer] parse_dump is the sole dump validation boundary.

The parser is tolerant: one malformed block is dropped and recorded as a
ParseDefect; only a non-empty dump with zero valid blocks fails the poll.
"""

from __future__ import annotations

import http.client
import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field

from grmon.errors import ParseDefect, TotalParseFailure, TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0

# <keyword> <numeric-id> [<state-text>]:
_HEADER_RE = re.compile(r"^(\S+) (\d+) \[([^\]]+)\]:\s*$")


@dataclass(frozen=True)
class ExecutionUnitRecord:
    """One execution unit from a single dump. Discarded after reconcile."""

    id: int
    state: str
    frames: tuple[str, ...] = ()

    @property
    def description(self) -> str:
        return self.frames[0] if self.frames else ""


@dataclass
class Sample:
    """Result of one successful poll."""

    records: list[ExecutionUnitRecord] = field(default_factory=list)
    defects: list[ParseDefect] = field(default_factory=list)


def _split_blocks(text: str) -> list[list[str]]:
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in text.splitlines():
        if line.strip():
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def _is_location(line: str) -> bool:
    return line[:1] in ("\t", " ")


def collapse_frames(lines: list[str]) -> tuple[str, ...]:
    """Join each call line with its indented location line.

    An indented line with no call line before it is kept on its own.
    """
    frames: list[str] = []
    pending: str | None = None
    for line in lines:
        if _is_location(line):
            if pending is not None:
                frames.append("{}  {}".format(pending, line.strip()))
                pending = None
            else:
                frames.append(line.strip())
            continue
        if pending is not None:
            frames.append(pending)
        pending = line.rstrip()
    if pending is not None:
        frames.append(pending)
    return tuple(frames)


def parse_block(lines: list[str]) -> ExecutionUnitRecord | None:
    """Parse one block; None when the header does not match."""
    match = _HEADER_RE.match(lines[0].strip())
    if match is None:
        return None
    state = match.group(3).strip()
    if not state:
        return None
    return ExecutionUnitRecord(
        id=int(match.group(2)),
        state=state,
        frames=collapse_frames(lines[1:]),
    )


def parse_dump(text: str) -> Sample:
    """Parse a whole dump. Raises TotalParseFailure if nothing in a non-empty dump parses."""
    sample = Sample()
    for index, block in enumerate(_split_blocks(text)):
        record = parse_block(block)
        if record is None:
            sample.defects.append(ParseDefect(block_index=index, header=block[0].strip()))
            continue
        sample.records.append(record)

    if sample.defects:
        logger.debug(
            "dropped %d malformed block(s): %s",
            len(sample.defects),
            ", ".join(d.header[:40] for d in sample.defects[:5]),
        )
    if not sample.records and text.strip():
        raise TotalParseFailure(sample.defects)
    return sample


class Sampler:
    """Polls one dump endpoint."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> str:
        req = urllib.request.Request(self.url, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise TransportError(self.url, "HTTP {} {}".format(e.code, e.reason)) from e
        except urllib.error.URLError as e:
            raise TransportError(self.url, str(e.reason)) from e
        except http.client.HTTPException as e:
            # IncompleteRead and friends are not OSErrors
            raise TransportError(self.url, str(e) or type(e).__name__) from e
        except (OSError, ValueError) as e:
            # socket.timeout is an OSError; malformed URLs raise ValueError
            raise TransportError(self.url, str(e) or type(e).__name__) from e
        return body.decode("utf-8", errors="replace")

    def poll(self) -> Sample:
        """Fetch and parse. Raises TransportError or TotalParseFailure."""
        text = self.fetch()
        sample = parse_dump(text)
        logger.debug(
            "polled %s: %d record(s), %d defect(s)",
            self.url,
            len(sample.records),
            len(sample.defects),
        )
        return sample
