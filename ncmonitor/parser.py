"""
parser.py - Audit line parsing for ncmonitor.

Turns raw ``ausearch`` output lines into :class:`~ncmonitor.events.Record`
objects.  Lines look like::

    type=PATH msg=audit(1628098489.574:15451): item=0 name="a" inode=2123 ...

The header (before ``": "``) and the body (after it) are both
space-separated ``key=value`` tokens.  ``msg`` and ``proctitle`` values may
contain literal spaces, so bare tokens are glued back onto them.
"""

from __future__ import annotations

from ncmonitor.errors import KVParseError, RecordFormatError
from ncmonitor.events import TIME_MARKER, Record


HEADER_BODY_SEP = ": "

# Keys whose values may legitimately contain spaces, in lookup order
_ACCUMULATING_KEYS = ("msg", "proctitle")


def parse_kv_pairs(text: str, line: str | None = None) -> dict[str, str]:
    """Parse space-separated ``key=value`` tokens into a dict.

    A token without ``=`` is appended to ``msg`` if present, else to
    ``proctitle``.  Empty tokens are skipped.  Values containing ``=`` are
    not recovered.

    Args:
        text: The token string to parse.
        line: Full raw line, used only for error context (defaults to *text*).

    Raises:
        KVParseError: On a bare token with nowhere to go, or a token with
            more than one ``=``.
    """
    result: dict[str, str] = {}
    context = text if line is None else line

    for token in text.split(" "):
        if not token:
            continue

        parts = token.split("=")
        if len(parts) == 2:
            key, value = parts
            result[key] = value
            continue

        if len(parts) == 1:
            for key in _ACCUMULATING_KEYS:
                if key in result:
                    result[key] = f"{result[key]} {token}"
                    break
            else:
                raise KVParseError(
                    f"bare token {token!r} has no key", line=context, partial=result
                )
            continue

        raise KVParseError(
            f"token {token!r} holds more than one '='", line=context, partial=result
        )

    return result


def is_timestamp_line(line: str) -> bool:
    return TIME_MARKER in line


def parse_timestamp(line: str) -> str:
    """Return the timestamp carried by a ``time->`` line."""
    return line[len(TIME_MARKER):]


def build_record(line: str, timestamp: str = "") -> Record:
    """Build a :class:`Record` from one raw audit line.

    Raises:
        RecordFormatError: If the line does not split into exactly a header
            and a body on ``": "``.
        KVParseError: If either half has an unparsable token.
    """
    parts = line.split(HEADER_BODY_SEP)
    if len(parts) != 2:
        raise RecordFormatError(
            f"expected 'header{HEADER_BODY_SEP}body', got {len(parts)} part(s)",
            line=line,
        )

    header_raw, body_raw = parts
    header = parse_kv_pairs(header_raw, line=line)
    body = parse_kv_pairs(body_raw, line=line)

    return Record(
        kind=header.get("type", ""),
        id=header.get("msg", ""),
        timestamp=timestamp,
        body=body,
    )
