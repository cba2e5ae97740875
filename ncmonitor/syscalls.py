"""
syscalls.py - Syscall context and name lookup for ncmonitor.

Wraps the SYSCALL record of an event into a :class:`Syscall` and resolves
syscall numbers to names through ``ausyscall --dump`` (optional).

The lookup is a capability: anything callable as ``names(number) -> str``
works.  :class:`SyscallNames` with an empty table is the null object and
answers with the bare number.  Failing to load the table is never fatal.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Iterable

from ncmonitor.events import Record

logger = logging.getLogger(__name__)

AUSYSCALL_DUMP = ("ausyscall", "--dump")

O_CREAT = 0o100

# x86_64 numbers, used when names are unavailable
SYS_OPEN = 2
SYS_OPENAT = 257
SYS_OPENAT2 = 437

SyscallResolver = Callable[[int], str]


class SyscallNames:
    """Syscall number to name table.

    Unknown numbers (and every number, for an empty table) resolve to the
    number itself as a string.
    """

    def __init__(self, table: dict[int, str] | None = None) -> None:
        self._table = dict(table or {})

    def __call__(self, number: int) -> str:
        return self._table.get(number, str(number))

    def __len__(self) -> int:
        return len(self._table)

    def resolves(self, number: int) -> bool:
        return number in self._table

    @classmethod
    def from_dump(cls, lines: Iterable[str]) -> "SyscallNames":
        """Build a table from ``number<TAB>name`` lines, skipping the rest."""
        table: dict[int, str] = {}
        for line in lines:
            items = line.split("\t")
            if len(items) != 2:
                continue
            num, name = items[0].strip(), items[1].strip()
            if not num.isdigit() or not name:
                continue
            table[int(num)] = name
        return cls(table)


def load_syscall_names(command: Iterable[str] = AUSYSCALL_DUMP) -> SyscallNames:
    """Run the syscall dump utility once and parse its output.

    Returns an empty (numeric-only) table if the utility is missing, exits
    non-zero, or prints nothing usable.
    """
    try:
        proc = subprocess.run(
            list(command), capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("couldn't convert syscall numbers to names: %s", exc)
        return SyscallNames()

    names = SyscallNames.from_dump(proc.stdout.splitlines())
    if not names:
        logger.debug("couldn't convert syscall numbers to names: empty output")
    else:
        logger.debug("Loaded %d syscall names", len(names))
    return names


# ---------------------------------------------------------------------------
# Numeric field helpers
# ---------------------------------------------------------------------------

def _parse_int(record: Record, key: str, base: int = 10) -> int:
    """Best-effort integer field; absent or bad values give 0."""
    raw = record.get(key)
    if not raw:
        return 0
    try:
        return int(raw, base)
    except ValueError:
        logger.warning("record %s: cannot parse %s=%r, using 0", record.id, key, raw)
        return 0


@dataclass(frozen=True)
class Syscall:
    """Context of one audited system call."""

    record_id: str = ""
    name: str = ""
    number: int = 0
    exe: str = ""
    cmd: str = ""
    pid: int = 0
    ppid: int = 0
    args: tuple[int, int, int, int] = field(default=(0, 0, 0, 0))
    exit: int = 0
    success: bool = False

    @classmethod
    def from_record(
        cls, record: Record, names: SyscallResolver = SyscallNames()
    ) -> "Syscall":
        number = _parse_int(record, "syscall")
        return cls(
            record_id=record.id,
            name=names(number),
            number=number,
            exe=record.get("exe").strip('"'),
            cmd=record.get("cmd").strip('"'),
            pid=_parse_int(record, "pid"),
            ppid=_parse_int(record, "ppid"),
            args=tuple(_parse_int(record, f"a{i}", 16) for i in range(4)),
            exit=_parse_int(record, "exit"),
            success=record.get("success") == "yes",
        )

    @property
    def resolved(self) -> bool:
        """True when ``name`` is a real name rather than the bare number."""
        return bool(self.name) and self.name != str(self.number)

    def describe(self, verbose: bool = False) -> str:
        """Short form used in console reports."""
        if not self.resolved:
            return f"syscall={self.number}"
        if verbose:
            return f"{self.name}({self.number})"
        return self.name

    def is_call(self, name: str, fallback_number: int) -> bool:
        """Match by name when resolved, else by the x86_64 number."""
        if self.resolved:
            return self.name == name
        return self.number == fallback_number

    def flag_create(self) -> bool:
        """Is O_CREAT set on an ``open``/``openat`` call?"""
        if self.is_call("open", SYS_OPEN):
            return bool(self.args[1] & O_CREAT)
        if self.is_call("openat", SYS_OPENAT):
            return bool(self.args[2] & O_CREAT)
        if self.is_call("openat2", SYS_OPENAT2):
            logger.info("openat2 flags are not handled")
        return False

    def to_dict(self) -> dict:
        a0, a1, a2, a3 = self.args
        return {
            "msg": self.record_id,
            "name": self.name,
            "number": self.number,
            "exe": self.exe,
            "cmd": self.cmd,
            "pid": self.pid,
            "ppid": self.ppid,
            "a0": a0,
            "a1": a1,
            "a2": a2,
            "a3": a3,
            "exit": self.exit,
            "success": self.success,
        }
