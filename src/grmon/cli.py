"""CLI entry point for grmon."""

import argparse
import logging
import sys

import grmon.config
import grmon.io.logging_setup
import grmon.self_server
from grmon.config import MonitorConfig, env_default
from grmon.sampler import Sampler
from grmon.tui.app import GrmonApp

logger = logging.getLogger(__name__)

DESCRIPTION = "grmon - execution unit monitor"


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got {!r}".format(raw)) from None
    if value < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return value


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("expected a number, got {!r}".format(raw)) from None
    if value <= 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grmon",
        description=DESCRIPTION,
        usage="grmon [options]",
    )
    parser.add_argument(
        "-host",
        "--host",
        dest="host",
        type=str,
        default=env_default("HOST", grmon.config.DEFAULT_HOST),
        help="listening grmon host (default: %(default)s). Env: GRMON_HOST",
    )
    parser.add_argument(
        "-self",
        "--self",
        dest="serve_self",
        action="store_true",
        default=False,
        help="monitor grmon itself",
    )
    parser.add_argument(
        "-endpoint",
        "--endpoint",
        dest="endpoint",
        type=str,
        default=env_default("ENDPOINT", grmon.config.DEFAULT_ENDPOINT),
        help="URL endpoint for grmon (default: %(default)s). Env: GRMON_ENDPOINT",
    )
    parser.add_argument(
        "-i",
        "--interval",
        dest="interval",
        type=_non_negative_int,
        # Passed as a string so argparse runs the type check on it too.
        default=env_default("INTERVAL", str(grmon.config.DEFAULT_INTERVAL)),
        help="time in seconds between refresh, 0 starts paused (default: %(default)s). Env: GRMON_INTERVAL",
    )
    parser.add_argument(
        "--timeout",
        dest="timeout",
        type=_positive_float,
        default=grmon.config.DEFAULT_TIMEOUT,
        help="HTTP timeout in seconds for each poll (default: %(default)s)",
    )
    return parser


def parse_config(argv=None) -> MonitorConfig:
    args = build_parser().parse_args(argv)
    return MonitorConfig(
        host=args.host,
        endpoint=args.endpoint,
        interval=args.interval,
        serve_self=args.serve_self,
        timeout=args.timeout,
    )


def main(argv=None):
    config = parse_config(argv)

    log_runtime = grmon.io.logging_setup.configure()
    logger.info(
        "logging configured level=%s file=%s",
        log_runtime.level_name,
        log_runtime.file_path,
    )

    server = None
    if config.serve_self:
        try:
            server, _ = grmon.self_server.start(
                port=grmon.config.SELF_PORT, endpoint=config.endpoint
            )
        except OSError as e:
            print("grmon: cannot serve own dump on :{}: {}".format(grmon.config.SELF_PORT, e), file=sys.stderr)
            return 1

    sampler = Sampler(config.url, timeout=config.timeout)
    logger.info("monitoring %s interval=%ds", config.url, config.interval)
    app = GrmonApp(sampler, interval=config.interval)
    try:
        app.run()
    finally:
        if server is not None:
            server.shutdown()
            server.server_close()
        logger.info("grmon exited")
    notice = log_runtime.exit_notice()
    if notice:
        print(notice, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
