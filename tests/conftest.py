"""Shared builders for ncmonitor tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from ncmonitor.events import Event, Record
from ncmonitor.extractor import Operation, PathAction
from ncmonitor.syscalls import Syscall, SyscallNames

FIXTURES = Path(__file__).resolve().parent / "fixtures"

X86_64_NAMES = {2: "open", 257: "openat", 262: "newfstatat", 263: "unlinkat", 437: "openat2"}


@pytest.fixture
def names() -> SyscallNames:
    return SyscallNames(X86_64_NAMES)


@pytest.fixture
def sample_trace() -> Path:
    return FIXTURES / "case_confusion.auditd"


def make_action(
    op: str,
    path: str,
    identity: tuple[str, str] = ("08:01", "100"),
    success: bool = True,
    cwd: str = "",
    mode: int = 0o100644,
    syscall: Syscall | None = None,
) -> PathAction:
    """PathAction with just enough context for Timeline tests."""
    dev, inode = identity
    if syscall is None:
        syscall = Syscall(name="openat", number=257, exe="/usr/bin/touch", success=success)
    return PathAction(
        device=dev,
        inode=inode,
        raw_path=path,
        operation=Operation(op),
        mode=mode,
        working_dir=cwd,
        executable=syscall.exe,
        syscall=syscall,
    )


def syscall_line(msg: str, syscall: int = 257, success: str = "yes", a1: str = "0", a2: str = "0", exe: str = "/usr/bin/touch") -> str:
    return (
        f"type=SYSCALL msg={msg}: arch=c000003e syscall={syscall} success={success} "
        f"exit=3 a0=ffffff9c a1={a1} a2={a2} a3=1b6 items=1 ppid=10 pid=11 "
        f'comm="touch" exe="{exe}" key="icase"'
    )


def path_line(msg: str, name: str, nametype: str, inode: str = "100", mode: str = "0100644", item: int = 0) -> str:
    return (
        f'type=PATH msg={msg}: item={item} name="{name}" inode={inode} dev=08:01 '
        f"mode={mode} ouid=1000 ogid=1000 rdev=00:00 nametype={nametype}"
    )


def make_event(*records: Record) -> Event:
    event = Event()
    for record in records:
        event.add(record)
    return event
