"""
extractor.py - PathAction extraction for ncmonitor.

Each PATH record of an event becomes one :class:`PathAction`: the path and
inode it names, joined with the event's SYSCALL, CWD and PROCTITLE context.
The Timeline consumes PathActions; it never sees raw records.
"""

from __future__ import annotations

import logging
import os
import posixpath
import stat
from dataclasses import dataclass, field
from enum import Enum

from ncmonitor.errors import RecordFormatError, UnknownOperationError
from ncmonitor.events import Event, Record
from ncmonitor.syscalls import Syscall, SyscallNames, SyscallResolver

logger = logging.getLogger(__name__)

# Path value audit writes when a syscall addressed the object by descriptor
NULL_PATH = "(null)"


class Operation(str, Enum):
    """PATH record ``nametype`` values."""

    CREATE = "CREATE"
    NORMAL = "NORMAL"
    PARENT = "PARENT"
    DELETE = "DELETE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str, record: Record | None = None) -> "Operation":
        try:
            return cls(value)
        except ValueError:
            raise UnknownOperationError(
                f"unhandled PATH operation {value!r}",
                line=repr(record) if record is not None else "",
            ) from None


# ---------------------------------------------------------------------------
# Path helpers (module-level so they're easily testable)
# ---------------------------------------------------------------------------

def absolute_path(path: str, cwd: str) -> str:
    """Join a relative *path* onto *cwd*; absolute and null paths pass through.

    If either value is blank there is nothing to join and *path* is
    returned as is.
    """
    if not path.strip() or not cwd.strip():
        return path
    if path.startswith("/") or path == NULL_PATH:
        return path
    return posixpath.normpath(posixpath.join(cwd, path))


def strip_dir_suffix(path: str) -> str:
    """Drop one trailing ``/``, keeping the root itself."""
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path


def normalize_path(path: str, cwd: str, is_dir: bool) -> str:
    """Absolute form of *path*; directories lose their trailing separator.

    Symbolic links and files are not touched beyond the join.
    """
    result = absolute_path(path, cwd)
    if is_dir:
        return strip_dir_suffix(result)
    return result


def parse_mode(raw: str) -> int:
    """Parse an octal ``mode=`` value; bad or missing values give 0."""
    if not raw:
        return 0
    try:
        return int(raw, 8)
    except ValueError:
        logger.warning("cannot parse mode=%r, using 0", raw)
        return 0


def decode_proctitle(raw: str) -> str:
    """Recover the command line from a PROCTITLE value.

    Audit hex-encodes argv joined by NULs.  Values it printed verbatim come
    quoted.  Undecodable values are returned unchanged.
    """
    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        return raw[1:-1]
    try:
        decoded = bytes.fromhex(raw)
    except ValueError as exc:
        logger.warning("%s; cannot decode proctitle %r", exc, raw)
        return raw
    return decoded.replace(b"\x00", b" ").decode("utf-8", errors="replace")


# ---------------------------------------------------------------------------
# PathAction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PathAction:
    """One path accessed by a syscall, with its process context."""

    device: str
    inode: str
    raw_path: str
    operation: Operation
    mode: int = 0
    record_id: str = ""
    timestamp: str = ""
    executable: str = ""
    working_dir: str = ""
    process_title: str = ""
    syscall: Syscall = field(default_factory=Syscall)

    @property
    def identity(self) -> str:
        """``dev|inode``; unique per filesystem object within a mount."""
        return f"{self.device}|{self.inode}"

    @property
    def syscall_name(self) -> str:
        return self.syscall.name

    @property
    def syscall_succeeded(self) -> bool:
        return self.syscall.success

    @property
    def is_null_path(self) -> bool:
        return self.raw_path == NULL_PATH

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def normalized_path(self) -> str:
        return normalize_path(self.raw_path, self.working_dir, self.is_dir)

    def describe(self, verbose: bool = False, abs_path: bool = False) -> str:
        """Console form, e.g. ``[audit(...)'git'.unlink(87)]00:39|2123|a``."""
        path = self.normalized_path if abs_path else self.raw_path
        msg = self.record_id if verbose else ""
        exe = os.path.basename(self.executable)
        return (
            f"[{msg}'{exe}'.{self.syscall.describe(verbose)}]"
            f"{self.identity}|{path}"
        )

    def to_dict(self) -> dict:
        return {
            "msg": self.record_id,
            "timestamp": self.timestamp,
            "identity": self.identity,
            "device": self.device,
            "inode": self.inode,
            "path": self.raw_path,
            "normalized_path": self.normalized_path,
            "mode": self.mode,
            "operation": self.operation.value,
            "exe": self.executable,
            "cwd": self.working_dir,
            "proctitle": self.process_title,
            "syscall": self.syscall.to_dict(),
        }


class PathActionExtractor:
    """Builds PathActions from assembled events.

    Parameters:
        names: Syscall number to name lookup.  Defaults to numeric names.
    """

    def __init__(self, names: SyscallResolver | None = None) -> None:
        self._names = names if names is not None else SyscallNames()

    def extract(self, event: Event) -> list[PathAction]:
        """Return one PathAction per PATH record, in trace order.

        Raises:
            RecordFormatError: PATH records without a SYSCALL record.
            UnknownOperationError: A ``nametype`` outside :class:`Operation`.
        """
        if not event.paths:
            return []

        if event.syscall is None:
            raise RecordFormatError(
                f"event {event.paths[0].id} has PATH records but no SYSCALL record",
                line=repr(event.paths[0]),
            )

        syscall = Syscall.from_record(event.syscall, self._names)
        proctitle = ""
        if event.proctitle is not None:
            proctitle = decode_proctitle(event.proctitle.get("proctitle"))
        cwd = event.cwd.get("cwd").strip('"') if event.cwd is not None else ""

        return [
            self._build(record, syscall, proctitle, cwd) for record in event.paths
        ]

    @staticmethod
    def _build(
        record: Record, syscall: Syscall, proctitle: str, cwd: str
    ) -> PathAction:
        return PathAction(
            device=record.get("dev"),
            inode=record.get("inode"),
            raw_path=record.get("name").strip('"'),
            operation=Operation.parse(record.get("nametype"), record),
            mode=parse_mode(record.get("mode")),
            record_id=record.id,
            timestamp=record.timestamp,
            executable=syscall.exe,
            working_dir=cwd,
            process_title=proctitle,
            syscall=syscall,
        )
