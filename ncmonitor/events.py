"""
events.py - Shared trace schema for ncmonitor.

Defines the Record and Event dataclasses that the parsing layer emits and
the extraction layer consumes, plus the audit record kinds we care about.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ncmonitor.errors import RecordFormatError

# ---------------------------------------------------------------------------
# Trace markers
# ---------------------------------------------------------------------------
SEPARATOR = "----"
TIME_MARKER = "time->"

# ---------------------------------------------------------------------------
# Record kinds (the ``type=`` header field)
# ---------------------------------------------------------------------------
SYSCALL = "SYSCALL"
PATH = "PATH"
CWD = "CWD"
PROCTITLE = "PROCTITLE"
CONFIG_CHANGE = "CONFIG_CHANGE"

# Kinds of which an Event may hold at most one
SINGLETON_KINDS = (SYSCALL, PROCTITLE, CWD)
KNOWN_KINDS = (SYSCALL, PATH, CWD, PROCTITLE, CONFIG_CHANGE)


@dataclass(frozen=True)
class Record:
    """One parsed audit line.

    Attributes:
        kind:      Record category, e.g. ``SYSCALL`` or ``PATH``.
        id:        The ``msg`` header value, shared by all records of an event.
        timestamp: The event timestamp taken from the preceding ``time->`` line.
        body:      Key/value pairs from the part of the line after ``": "``.
    """

    kind: str
    id: str
    timestamp: str = ""
    body: dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default: str = "") -> str:
        return self.body.get(key, default)


@dataclass
class Event:
    """Records describing one audited system call.

    ``records`` keeps every record in trace order.  Singleton kinds are also
    kept in their own slots and PATH records in ``paths``; anything else
    lands in ``others``.
    """

    timestamp: str = ""
    records: list[Record] = field(default_factory=list)
    syscall: Record | None = None
    proctitle: Record | None = None
    cwd: Record | None = None
    paths: list[Record] = field(default_factory=list)
    others: list[Record] = field(default_factory=list)

    def add(self, record: Record) -> None:
        """Classify *record* by kind and store it."""
        if record.kind == PATH:
            self.paths.append(record)
        elif record.kind in SINGLETON_KINDS:
            slot = record.kind.lower()
            if getattr(self, slot) is not None:
                raise RecordFormatError(
                    f"event {record.id} holds more than one {record.kind} record"
                )
            setattr(self, slot, record)
        else:
            self.others.append(record)
        self.records.append(record)

    def is_empty(self) -> bool:
        return not self.records
