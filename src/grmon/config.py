"""Runtime configuration for grmon.

CLI flags win; GRMON_* environment variables supply the defaults.

This module is STABLE. Import as: import grmon.config
"""

import os
from dataclasses import dataclass

DEFAULT_HOST = "localhost:1234"
DEFAULT_ENDPOINT = "/debug/grmon"
DEFAULT_INTERVAL = 5
DEFAULT_TIMEOUT = 5.0
SELF_PORT = 1234


@dataclass(frozen=True)
class MonitorConfig:
    host: str = DEFAULT_HOST
    endpoint: str = DEFAULT_ENDPOINT
    interval: int = DEFAULT_INTERVAL
    serve_self: bool = False
    timeout: float = DEFAULT_TIMEOUT

    @property
    def url(self) -> str:
        endpoint = self.endpoint if self.endpoint.startswith("/") else "/" + self.endpoint
        return "http://{}{}".format(self.host, endpoint)

    @property
    def starts_paused(self) -> bool:
        return self.interval == 0


def env_default(name: str, fallback):
    """Read GRMON_<name>, coerced to the fallback's type. Bad values fall back."""
    raw = os.environ.get("GRMON_" + name)
    if raw is None or raw == "":
        return fallback
    try:
        return type(fallback)(raw)
    except ValueError:
        return fallback
