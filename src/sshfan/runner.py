#!/usr/bin/env python3
"""Main entry point for sshfan."""

import argparse
import logging
import sys
from pathlib import Path

from .config import ConfigError, RunConfig, build_config
from .dashboard import Dashboard
from .dispatcher import run
from .formatter import ResultFormatter
from .sink import ConsoleSink, make_console

LOGGING_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    # -h is the host file, as in other parallel ssh tools
    parser = argparse.ArgumentParser(
        prog="sshfan",
        description="Run one command on many hosts over ssh in parallel",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", dest="host_file", type=Path, help="File with list of hosts")
    parser.add_argument("-H", dest="host_string", help="List of hosts separated by spaces")
    parser.add_argument("-i", dest="command", help="Command to execute")
    parser.add_argument(
        "-l",
        "-u",
        dest="user",
        help="Specifies the user to log in as on the remote machine",
    )
    parser.add_argument(
        "-o",
        dest="ssh_options",
        help="Additional ssh options in quotes and separated by spaces",
    )
    parser.add_argument("--config", type=Path, help="Path to YAML settings file")
    parser.add_argument(
        "-p",
        "--max-workers",
        type=int,
        help="Run at most this many ssh processes at once (default: all hosts)",
    )
    parser.add_argument("--log-dir", type=Path, help="Write per-host logs under this directory")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--dashboard", action="store_true", help="Run with the TUI dashboard")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOGGING_FORMAT,
    )

    try:
        config = build_config(
            command=args.command,
            host_string=args.host_string,
            host_file=args.host_file,
            user=args.user,
            ssh_options=args.ssh_options,
            max_workers=args.max_workers,
            log_dir=args.log_dir,
            config_file=args.config,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        if args.dashboard:
            return _run_dashboard(config)
        return _run_headless(config, no_color=args.no_color)
    except KeyboardInterrupt:
        return 130


def _run_headless(config: RunConfig, no_color: bool = False) -> int:
    """Print one block per host as each one completes."""
    sink = ConsoleSink(make_console(no_color=no_color))
    run(config, on_result=ResultFormatter(sink))
    # Per-host failures are reported in the output only
    return 0


def _run_dashboard(config: RunConfig) -> int:
    app = Dashboard(config)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
