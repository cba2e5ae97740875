"""
reporter.py - Violation output for ncmonitor.

Two flavours:

* :class:`ConsoleReporter` prints one line per violation as soon as it is
  found.
* :class:`JsonReporter` collects violations and prints a single JSON array
  when closed.  Nothing is printed if nothing was collected.

Reports go to stdout; diagnostics go through ``logging`` (stderr).
"""

from __future__ import annotations

import json
import sys
from typing import TextIO

from ncmonitor.config import MonitorConfig
from ncmonitor.timeline import Violation


class Reporter:
    """Base reporter; subclasses override :meth:`report`."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self.count = 0

    def report(self, violation: Violation) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Flush anything pending.  Safe to call more than once."""


class ConsoleReporter(Reporter):
    """Prints ``CREATE[...] USE[...]`` lines immediately."""

    def __init__(
        self,
        stream: TextIO | None = None,
        verbose: bool = False,
        abs_path: bool = False,
    ) -> None:
        super().__init__(stream)
        self.verbose = verbose
        self.abs_path = abs_path

    def format(self, violation: Violation) -> str:
        create = violation.create.describe(self.verbose, self.abs_path)
        use = violation.use.describe(self.verbose, self.abs_path)
        return f"CREATE{create} USE{use}"

    def report(self, violation: Violation) -> None:
        self.count += 1
        print(self.format(violation), file=self._stream)


class JsonReporter(Reporter):
    """Buffers violations and dumps them as JSON on :meth:`close`."""

    def __init__(self, stream: TextIO | None = None, pretty: bool = False) -> None:
        super().__init__(stream)
        self.pretty = pretty
        self._pending: list[Violation] = []
        self._closed = False

    @property
    def pending(self) -> list[Violation]:
        return list(self._pending)

    def report(self, violation: Violation) -> None:
        self.count += 1
        self._pending.append(violation)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if not self._pending:
            return

        payload = [v.to_dict() for v in self._pending]
        if self.pretty:
            text = json.dumps(payload, indent=2)
        else:
            text = json.dumps(payload)
        print(text, file=self._stream)


def make_reporter(config: MonitorConfig, stream: TextIO | None = None) -> Reporter:
    """Pick the reporter matching *config*."""
    if config.json_output:
        return JsonReporter(stream=stream, pretty=config.pretty)
    return ConsoleReporter(stream=stream, verbose=config.verbose, abs_path=config.abs_path)
