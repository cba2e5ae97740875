import logging

import pytest

from ncmonitor.errors import UnknownOperationError
from ncmonitor.syscalls import Syscall
from ncmonitor.timeline import Timeline

from conftest import make_action


def test_same_path_is_not_a_violation():
    tm = Timeline()
    assert tm.apply(make_action("CREATE", "/tmp/name")) is None
    assert tm.apply(make_action("NORMAL", "/tmp/name")) is None


def test_case_mismatch_is_a_violation():
    tm = Timeline()
    create = make_action("CREATE", "name")
    use = make_action("NORMAL", "NAME")
    tm.apply(create)
    violation = tm.apply(use)
    assert violation is not None
    assert violation.create is create
    assert violation.use is use
    assert violation.create.normalized_path == "name"
    assert violation.use.normalized_path == "NAME"


def test_parent_use_is_checked_like_normal():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/dir", mode=0o40755))
    assert tm.apply(make_action("PARENT", "/tmp/DIR/", mode=0o40755)) is not None
    assert tm.apply(make_action("PARENT", "/tmp/dir/", mode=0o40755)) is None


def test_relative_and_absolute_spellings_agree():
    tm = Timeline()
    tm.apply(make_action("CREATE", "name", cwd="/tmp"))
    assert tm.apply(make_action("NORMAL", "/tmp/name", cwd="/home/u")) is None


def test_delete_clears_state():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/x"))
    tm.apply(make_action("DELETE", "/tmp/x"))
    assert "08:01|100" not in tm
    assert tm.apply(make_action("NORMAL", "/tmp/Y")) is None


def test_delete_applies_even_when_syscall_failed():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/x"))
    tm.apply(make_action("DELETE", "/tmp/x", success=False))
    assert len(tm) == 0


def test_delete_of_unknown_identity_is_a_noop():
    tm = Timeline()
    assert tm.apply(make_action("DELETE", "/tmp/x")) is None


def test_failed_create_is_not_recorded():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/name", success=False))
    assert tm.lookup("08:01|100") is None
    assert tm.apply(make_action("NORMAL", "/tmp/NAME")) is None


def test_failed_use_is_ignored():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/name"))
    assert tm.apply(make_action("NORMAL", "/tmp/NAME", success=False)) is None


def test_null_paths_never_match():
    tm = Timeline()
    tm.apply(make_action("CREATE", "(null)"))
    assert len(tm) == 0
    assert tm.apply(make_action("NORMAL", "(null)")) is None

    tm.apply(make_action("CREATE", "/tmp/name"))
    assert tm.apply(make_action("NORMAL", "(null)")) is None


def test_use_without_create():
    assert Timeline().apply(make_action("NORMAL", "/tmp/x")) is None


def test_last_create_wins():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/a"))
    tm.apply(make_action("CREATE", "/tmp/b"))
    assert tm.lookup("08:01|100").raw_path == "/tmp/b"
    assert tm.apply(make_action("NORMAL", "/tmp/b")) is None


def test_unknown_is_a_noop():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/a"))
    assert tm.apply(make_action("UNKNOWN", "/tmp/A")) is None
    assert tm.lookup("08:01|100").raw_path == "/tmp/a"


def test_operation_outside_closed_set_is_fatal():
    action = make_action("NORMAL", "/tmp/a")
    object.__setattr__(action, "operation", "SQUIGGLE")
    with pytest.raises(UnknownOperationError):
        Timeline().apply(action)


def test_event_is_replayed_last_to_first():
    # Trace order lists the DELETE first and the CREATE last
    event = [
        make_action("DELETE", "/tmp/x"),
        make_action("CREATE", "/tmp/x"),
    ]
    use = make_action("NORMAL", "/tmp/X")

    tm = Timeline()
    tm.apply_event(event)
    assert tm.apply(use) is None

    forward = Timeline()
    for action in event:
        forward.apply(action)
    assert forward.apply(use) is not None


def test_apply_event_collects_violations():
    tm = Timeline()
    tm.apply(make_action("CREATE", "/tmp/a"))
    tm.apply(make_action("CREATE", "/tmp/b", identity=("08:01", "200")))
    violations = tm.apply_event([
        make_action("NORMAL", "/tmp/B", identity=("08:01", "200")),
        make_action("NORMAL", "/tmp/A"),
    ])
    assert [v.use.raw_path for v in violations] == ["/tmp/A", "/tmp/B"]


def test_log_bad_open(caplog):
    caplog.set_level(logging.INFO)
    creat = Syscall(name="openat", number=257, args=(0, 0, 0o100, 0), success=True)
    tm = Timeline(log_bad_open=True)
    tm.apply(make_action("CREATE", "/tmp/a"))
    assert tm.apply(make_action("NORMAL", "/tmp/a", syscall=creat)) is None
    assert "use with O_CREAT" in caplog.text


def test_log_bad_open_off_by_default(caplog):
    caplog.set_level(logging.INFO)
    creat = Syscall(name="openat", number=257, args=(0, 0, 0o100, 0), success=True)
    Timeline().apply(make_action("NORMAL", "/tmp/a", syscall=creat))
    assert "O_CREAT" not in caplog.text
