"""Pytest configuration and shared fixtures for grmon tests."""

import http.server
import threading
import time

import pytest

import grmon.io.logging_setup


# ---------------------------------------------------------------------------
# Fake clock for scheduler timing
# ---------------------------------------------------------------------------

class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ---------------------------------------------------------------------------
# Local dump endpoint
# ---------------------------------------------------------------------------

class DumpEndpoint:
    """Mutable response served by the dump_server fixture."""

    def __init__(self):
        self.body = ""
        self.status = 200
        self.delay = 0.0
        # Advertised length; None sends the real one.
        self.content_length = None
        self.requests = 0
        self.port = 0

    @property
    def url(self):
        return "http://127.0.0.1:{}/debug/grmon".format(self.port)


@pytest.fixture
def dump_server():
    """Serve DumpEndpoint.body at /debug/grmon on an OS-assigned port."""
    endpoint = DumpEndpoint()

    class Handler(http.server.BaseHTTPRequestHandler):
        def log_message(self, fmt, *args):
            pass

        def do_GET(self):
            endpoint.requests += 1
            if endpoint.delay:
                time.sleep(endpoint.delay)
            body = endpoint.body
            if isinstance(body, str):
                body = body.encode("utf-8")
            self.send_response(endpoint.status)
            self.send_header("Content-Type", "text/plain; charset=utf-8")
            length = endpoint.content_length
            if length is None:
                length = len(body)
            self.send_header("Content-Length", str(length))
            self.end_headers()
            try:
                self.wfile.write(body)
            except OSError:
                pass  # client gave up (timeout tests)

    srv = http.server.ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    srv.daemon_threads = True
    endpoint.port = srv.server_address[1]
    t = threading.Thread(target=srv.serve_forever, daemon=True)
    t.start()
    try:
        yield endpoint
    finally:
        srv.shutdown()
        srv.server_close()


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------

@pytest.fixture
def isolated_logging(tmp_path, monkeypatch):
    """Point log output at tmp_path and undo configure() afterwards."""
    log_file = tmp_path / "logs" / "grmon-test.log"
    monkeypatch.setenv("GRMON_LOG_FILE", str(log_file))
    monkeypatch.delenv("GRMON_LOG_LEVEL", raising=False)
    grmon.io.logging_setup.reset()
    yield log_file
    grmon.io.logging_setup.reset()
