"""
errors.py - Fatal error taxonomy for ncmonitor.

Everything raised from here means the trace contains structure the
detector does not understand.  Parsing code raises these; only the CLI
decides to stop the process.
"""

from __future__ import annotations


class TraceFormatError(ValueError):
    """Base class for unrecoverable trace format errors.

    Attributes:
        line:    The raw text that could not be handled (may be empty).
        partial: Key/value pairs accumulated before the failure, if any.
    """

    def __init__(
        self,
        message: str,
        line: str = "",
        partial: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.partial = dict(partial) if partial else {}

    def __str__(self) -> str:
        text = super().__str__()
        if self.line:
            text = f"{text}; line: {self.line!r}"
        if self.partial:
            text = f"{text}; parsed so far: {self.partial}"
        return text


class KVParseError(TraceFormatError):
    """A ``key=value`` token could not be parsed."""


class RecordFormatError(TraceFormatError):
    """A line or an event does not have the expected record structure."""


class UnknownOperationError(TraceFormatError):
    """A PATH record carries a ``nametype`` outside the supported set."""
