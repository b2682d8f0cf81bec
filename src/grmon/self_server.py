"""Serve this process's own thread dump so grmon can monitor itself (-self).

The dump uses the same block grammar the sampler parses:

    thread <ident> [<name>]:
    <function>()
    \t<file>:<line>
"""

from __future__ import annotations

import http.server
import logging
import sys
import threading
import traceback

from grmon.config import DEFAULT_ENDPOINT, SELF_PORT

logger = logging.getLogger(__name__)


def _state_label(thread: threading.Thread | None) -> str:
    name = thread.name if thread is not None else ""
    # Brackets would end the header's state field early.
    label = name.replace("[", "(").replace("]", ")").strip()
    return label or "unknown"


def format_thread_dump(frames=None, threads=None) -> str:
    """Render every live thread as one block, innermost frame first."""
    if frames is None:
        frames = sys._current_frames()
    if threads is None:
        threads = threading.enumerate()
    by_ident = {t.ident: t for t in threads}

    blocks = []
    for ident in sorted(frames):
        lines = ["thread {} [{}]:".format(ident, _state_label(by_ident.get(ident)))]
        for fs in reversed(traceback.extract_stack(frames[ident])):
            lines.append("{}()".format(fs.name))
            lines.append("\t{}:{}".format(fs.filename, fs.lineno))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


class DumpHandler(http.server.BaseHTTPRequestHandler):
    endpoint = DEFAULT_ENDPOINT  # set by make_handler_class

    def log_message(self, fmt, *args):
        logger.debug("self-server %s", fmt % args)

    def do_GET(self):
        if self.path.split("?", 1)[0] != self.endpoint:
            self.send_error(404)
            return
        body = format_thread_dump().encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def make_handler_class(endpoint: str) -> type[DumpHandler]:
    return type("DumpHandler_self", (DumpHandler,), {"endpoint": endpoint})


def start(host: str = "", port: int = SELF_PORT, endpoint: str = DEFAULT_ENDPOINT):
    """Start the dump server on a daemon thread. Returns (server, actual_port)."""
    srv = http.server.ThreadingHTTPServer((host, port), make_handler_class(endpoint))
    actual_port = srv.server_address[1]
    t = threading.Thread(target=srv.serve_forever, name="grmon-self-server", daemon=True)
    t.start()
    logger.info("self-diagnostic server on :%d%s", actual_port, endpoint)
    return srv, actual_port
