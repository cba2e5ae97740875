"""
monitor.py - Event assembly for ncmonitor.

Feeds raw trace lines one at a time, buffers the records of the current
audit event and hands each finished :class:`~ncmonitor.events.Event` to a
callback.  Events are closed by the ``----`` separator line, and by the end
of input for the last one.

Public API
----------
TraceMonitor(callback)
    Line-at-a-time assembler.  Call ``feed(line)`` per line and ``close()``
    once at the end of input.

replay_file(path, callback)
    Read a whole trace file and feed it through a TraceMonitor.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from ncmonitor.events import KNOWN_KINDS, SEPARATOR, Event
from ncmonitor.parser import build_record, is_timestamp_line, parse_timestamp

logger = logging.getLogger(__name__)


class TraceMonitor:
    """Assembles audit records into events.

    Parameters:
        callback: Receives each closed, non-empty Event.  Any exception it
                  raises propagates out of :meth:`feed`.
    """

    def __init__(self, callback: Callable[[Event], None]) -> None:
        self._callback = callback
        self._event = Event()
        self.lines_read = 0
        self.events_closed = 0

    def feed(self, line: str) -> None:
        """Consume one line of trace text (without its newline)."""
        self.lines_read += 1

        if line == SEPARATOR:
            self._dispatch()
            return

        if not line:
            return

        if is_timestamp_line(line):
            self._event.timestamp = parse_timestamp(line)
            return

        record = build_record(line, timestamp=self._event.timestamp)
        self._event.add(record)

        if record.kind not in KNOWN_KINDS:
            logger.debug("unknown record type %s: %s", record.kind, record)

    def feed_lines(self, lines) -> None:
        for line in lines:
            self.feed(line)

    def close(self) -> None:
        """Flush the event still open at end of input, if any."""
        self._dispatch()

    def _dispatch(self) -> None:
        event, self._event = self._event, Event()
        if event.is_empty():
            return
        self.events_closed += 1
        self._callback(event)


def read_trace(path: str | Path) -> list[str]:
    """Read the whole trace file and split it into lines."""
    text = Path(path).read_text(encoding="utf-8", errors="replace")
    return text.splitlines()


def replay_file(path: str | Path, callback: Callable[[Event], None]) -> TraceMonitor:
    """Feed every line of *path* through a fresh TraceMonitor.

    Returns the monitor so callers can read its counters.
    """
    monitor = TraceMonitor(callback)
    lines = read_trace(path)
    logger.debug("Read %d lines from %s", len(lines), path)
    monitor.feed_lines(lines)
    monitor.close()
    return monitor
