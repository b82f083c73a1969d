"""pytest plugin that records lifecycle events as JSON lines.

Loaded in the pytest process with ``-p suite_runner.engines.pytest_engine.plugin``
and activated by ``--suite-runner-events=PATH``.

The test module is the root suite of every test it contains. Test classes
become nested suites. Setup and teardown phases are reported as hooks.
"""

from datetime import datetime
from pathlib import Path
from typing import TextIO

import pytest

from suite_runner.models.events import (
    ErrorInfo,
    Event,
    Fail,
    HookEnd,
    Pass,
    Pending,
    Runnable,
    RunEnd,
    Suite,
    TestEnd,
)

EVENTS_OPTION = "--suite-runner-events"
ROOT_SUITE = Suite(title="")


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the events file option."""
    group = parser.getgroup("suite-runner")
    group.addoption(
        EVENTS_OPTION,
        dest="suite_runner_events",
        default=None,
        metavar="PATH",
        help="Write lifecycle events as JSON lines to PATH",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the recorder when an events file was requested."""
    if events_path := config.getoption("suite_runner_events"):
        config.pluginmanager.register(
            EventRecorder(Path(events_path)), "suite-runner-recorder"
        )


def suite_chain(nodeid: str) -> tuple[Suite, str]:
    """Split a node id into its parent suite and its own title.

    Parameter ids in brackets may contain ``::`` and stay part of the title.
    """
    path, _, rest = nodeid.partition("::")
    module = Suite(title=path, file=path, parent=ROOT_SUITE)
    if not rest:
        return module, path

    base, bracket, params = rest.partition("[")
    *classes, name = base.split("::")
    parent = module
    for title in classes:
        parent = Suite(title=title, file=path, parent=parent)
    return parent, name + bracket + params


def report_error(report: pytest.TestReport | pytest.CollectReport) -> ErrorInfo:
    """Extract the error of a failed report."""
    stack = report.longreprtext
    crash = getattr(report.longrepr, "reprcrash", None)
    if crash is not None:
        message = crash.message
    else:
        lines = stack.strip().splitlines()
        message = lines[-1] if lines else ""
    return ErrorInfo(message=message, stack=stack)


class EventRecorder:
    """Writes one JSON line per lifecycle event."""

    def __init__(self, events_path: Path) -> None:
        self.events_path = events_path
        self._stream: TextIO | None = None

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        self._stream = self.events_path.open("w", encoding="utf-8")

    def pytest_sessionfinish(
        self, session: pytest.Session, exitstatus: int | pytest.ExitCode
    ) -> None:
        self.emit(RunEnd(finished_at=datetime.now().astimezone()))
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def pytest_collectreport(self, report: pytest.CollectReport) -> None:
        if not report.failed:
            return

        parent, title = suite_chain(report.nodeid or ".")
        error = report_error(report)
        hook = Runnable(
            kind="hook",
            title=f'"collect" hook for "{title}"',
            parent=parent,
            state="failed",
            file=parent.file,
            err=error,
        )
        self.emit(Fail(test=hook, error=ErrorInfo(message=error.message)))
        self.emit(HookEnd(hook=hook))

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        parent, title = suite_chain(report.nodeid)
        duration = round(report.duration * 1000)

        if report.when == "call":
            self._record_test(report, parent, title, duration)
        elif report.when == "setup" and report.skipped:
            test = Runnable(
                title=title, parent=parent, state="pending", file=parent.file
            )
            self.emit(Pending(test=test))
            self.emit(TestEnd(test=test))
        else:
            self._record_hook(report, parent, title, duration)

    def emit(self, event: Event) -> None:
        if self._stream is None:
            raise RuntimeError("Event recorder used outside of a session")
        self._stream.write(event.model_dump_json() + "\n")
        self._stream.flush()

    def _record_test(
        self, report: pytest.TestReport, parent: Suite, title: str, duration: int
    ) -> None:
        if report.passed:
            test = Runnable(
                title=title,
                parent=parent,
                duration=duration,
                state="passed",
                file=parent.file,
            )
            self.emit(Pass(test=test))
        elif report.failed:
            error = report_error(report)
            test = Runnable(
                title=title,
                parent=parent,
                duration=duration,
                state="failed",
                file=parent.file,
                err=error,
            )
            self.emit(Fail(test=test, error=ErrorInfo(message=error.message)))
        else:
            # skipped at call time, including expected failures
            test = Runnable(
                title=title, parent=parent, state="pending", file=parent.file
            )
            self.emit(Pending(test=test))
        self.emit(TestEnd(test=test))

    def _record_hook(
        self, report: pytest.TestReport, parent: Suite, title: str, duration: int
    ) -> None:
        hook = Runnable(
            kind="hook",
            title=f'"{report.when}" hook for "{title}"',
            parent=parent,
            duration=duration,
            state="failed" if report.failed else "passed",
            file=parent.file,
            err=report_error(report) if report.failed else None,
        )
        if hook.err is not None:
            self.emit(Fail(test=hook, error=ErrorInfo(message=hook.err.message)))
        self.emit(HookEnd(hook=hook))
