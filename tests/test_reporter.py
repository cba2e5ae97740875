import io
import json

from ncmonitor.config import MonitorConfig
from ncmonitor.reporter import ConsoleReporter, JsonReporter, make_reporter
from ncmonitor.timeline import Violation

from conftest import make_action


def _violation():
    return Violation(
        create=make_action("CREATE", "name", cwd="/tmp"),
        use=make_action("NORMAL", "NAME", cwd="/tmp"),
    )


def test_console_reporter_prints_immediately():
    out = io.StringIO()
    reporter = ConsoleReporter(stream=out)
    reporter.report(_violation())
    assert out.getvalue() == (
        "CREATE['touch'.openat]08:01|100|name USE['touch'.openat]08:01|100|NAME\n"
    )
    assert reporter.count == 1


def test_console_reporter_abs_path():
    out = io.StringIO()
    ConsoleReporter(stream=out, abs_path=True).report(_violation())
    assert "|/tmp/name USE" in out.getvalue()
    assert out.getvalue().rstrip().endswith("|/tmp/NAME")


def test_console_reporter_verbose_shows_numbers():
    out = io.StringIO()
    ConsoleReporter(stream=out, verbose=True).report(_violation())
    assert "openat(257)" in out.getvalue()


def test_json_reporter_buffers_until_close():
    out = io.StringIO()
    reporter = JsonReporter(stream=out)
    reporter.report(_violation())
    reporter.report(_violation())
    assert out.getvalue() == ""

    reporter.close()
    data = json.loads(out.getvalue())
    assert len(data) == 2
    assert data[0]["create"]["path"] == "name"
    assert data[0]["use"]["normalized_path"] == "/tmp/NAME"


def test_json_reporter_flushes_once():
    out = io.StringIO()
    reporter = JsonReporter(stream=out)
    reporter.report(_violation())
    reporter.close()
    reporter.close()
    assert out.getvalue().count("\n") == 1


def test_json_reporter_pretty():
    out = io.StringIO()
    reporter = JsonReporter(stream=out, pretty=True)
    reporter.report(_violation())
    reporter.close()
    assert out.getvalue().startswith("[\n  {")


def test_json_reporter_silent_without_violations():
    out = io.StringIO()
    JsonReporter(stream=out).close()
    assert out.getvalue() == ""


def test_make_reporter():
    assert isinstance(make_reporter(MonitorConfig(json_output=True)), JsonReporter)
    reporter = make_reporter(MonitorConfig(abs_path=True, verbose=True))
    assert isinstance(reporter, ConsoleReporter)
    assert reporter.abs_path and reporter.verbose
