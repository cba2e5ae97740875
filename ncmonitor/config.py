"""
config.py - Run configuration for ncmonitor.

Built once by the CLI and passed to the components that need it.
"""

from __future__ import annotations

from dataclasses import dataclass

# File the capture scripts write ``ausearch`` output to
DEFAULT_TRACE_FILE = "logs.auditd"


@dataclass(frozen=True)
class MonitorConfig:
    """Options for one detection run.

    Attributes:
        trace_file:    Audit log to replay.
        verbose:       Debug diagnostics; record ids and syscall numbers in reports.
        json_output:   Buffer violations and print one JSON array at the end.
        pretty:        Indent the JSON output.
        abs_path:      Show normalized absolute paths in line-oriented output.
        log_bad_open:  Log uses made by open/openat calls carrying O_CREAT.
        syscall_names: Resolve syscall numbers with ``ausyscall --dump``.
    """

    trace_file: str = DEFAULT_TRACE_FILE
    verbose: bool = False
    json_output: bool = False
    pretty: bool = False
    abs_path: bool = False
    log_bad_open: bool = False
    syscall_names: bool = True
