"""Textual in-process test harness for grmon.

Re-exports all public API for convenient imports:
    from tests.harness import run_app, FakeSampler, make_dump, ...
"""

from tests.harness.app_runner import FakeSampler, press_and_settle, run_app, settle
from tests.harness.builders import (
    SCENARIO_PAIRS,
    make_block,
    make_dump,
    make_record,
    make_sample,
)

__all__ = [
    "FakeSampler",
    "press_and_settle",
    "run_app",
    "settle",
    "SCENARIO_PAIRS",
    "make_block",
    "make_dump",
    "make_record",
    "make_sample",
]
