#!/usr/bin/env python3
"""
ncmonitor_main.py - CLI entry point for ncmonitor.

Replays an ``ausearch`` trace and reports name confusion: objects created
under one path spelling and later used under another.

Usage
-----
    # Capture (outside this tool), then replay
    sudo ausearch -k icase > logs.auditd
    python -m ncmonitor.ncmonitor_main --file logs.auditd

    # Collect everything into one JSON document
    python -m ncmonitor.ncmonitor_main --file logs.auditd --json --pretty
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TextIO

from ncmonitor.config import DEFAULT_TRACE_FILE, MonitorConfig
from ncmonitor.detector import Detector
from ncmonitor.errors import TraceFormatError
from ncmonitor.monitor import replay_file
from ncmonitor.reporter import make_reporter
from ncmonitor.syscalls import SyscallNames, load_syscall_names

logger = logging.getLogger("ncmonitor")


# ---------------------------------------------------------------------------
# Run loop
# ---------------------------------------------------------------------------

def run(
    config: MonitorConfig,
    names: SyscallNames | None = None,
    stream: TextIO | None = None,
) -> int:
    """Replay ``config.trace_file`` and report violations.

    Args:
        config: Run options.
        names:  Syscall name table.  Loaded from ``ausyscall`` when omitted
                and ``config.syscall_names`` is set.
        stream: Where reports go (default stdout).

    Returns:
        Number of violations found.

    Raises:
        TraceFormatError: The trace has structure we cannot parse.
        OSError: The trace file cannot be read.
    """
    if names is None:
        names = load_syscall_names() if config.syscall_names else SyscallNames()

    reporter = make_reporter(config, stream=stream)
    detector = Detector(
        names=names,
        log_bad_open=config.log_bad_open,
        on_violation=reporter.report,
    )

    replay_file(config.trace_file, detector.process_event)
    reporter.close()

    logger.debug("Run summary: %s", detector.get_statistics())
    return detector.violations_found


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ncmonitor",
        description="Find create/use name confusion in auditd logs.",
    )
    parser.add_argument(
        "--file",
        default=DEFAULT_TRACE_FILE,
        metavar="LOGFILE",
        help=f"auditd log to parse (default: {DEFAULT_TRACE_FILE}).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug diagnostics on stderr; record ids and syscall numbers in output.",
    )
    parser.add_argument("--json", action="store_true", help="Output in JSON.")
    parser.add_argument(
        "--pretty", action="store_true", help="Pretty-print JSON output."
    )
    parser.add_argument(
        "--abspath",
        action="store_true",
        help="Convert paths to absolute for non-JSON output.",
    )
    parser.add_argument(
        "--logbadopen",
        action="store_true",
        help="Log uses of existing files with the O_CREAT flag.",
    )
    parser.add_argument(
        "--no-syscall-names",
        dest="syscall_names",
        action="store_false",
        help="Do not run ausyscall; show syscall numbers only.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> MonitorConfig:
    return MonitorConfig(
        trace_file=args.file,
        verbose=args.verbose,
        json_output=args.json,
        pretty=args.pretty,
        abs_path=args.abspath,
        log_bad_open=args.logbadopen,
        syscall_names=args.syscall_names,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Parse CLI args, run the detector and return the exit status."""
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logger.debug("Name confusion detection utility")

    try:
        run(config)
    except TraceFormatError as exc:
        logger.error("Cannot parse %s: %s", config.trace_file, exc)
        return 1
    except OSError as exc:
        logger.error("Cannot read %s: %s", config.trace_file, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
