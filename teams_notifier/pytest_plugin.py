"""pytest adapter feeding test reports into the run notifier."""

import asyncio
import logging
import os

import pytest

from teams_notifier.config import NotifierConfig
from teams_notifier.models.attempt import (
    AttemptStatus,
    EventLocation,
    TestError,
    TestFinishedEvent,
)
from teams_notifier.notifier import RunNotifier

log = logging.getLogger(__name__)

ENABLE_VAR = "TEAMS_NOTIFY"
TIMEOUT_MARKER = "Failed: Timeout"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("teams-notify")
    group.addoption(
        "--teams-notify",
        action="store_true",
        default=False,
        help="Send a test run summary to the Teams webhook in TEAMS_WEBHOOK_URL",
    )


def pytest_configure(config: pytest.Config) -> None:
    enabled = config.getoption("teams_notify") or os.environ.get(ENABLE_VAR) == "1"
    # xdist workers forward their reports to the controller
    if not enabled or hasattr(config, "workerinput"):
        return

    notifier = RunNotifier(
        config=NotifierConfig.from_environ(os.environ, config.rootpath)
    )
    config.pluginmanager.register(TeamsNotifierPlugin(notifier), "teams-notifier")


class TeamsNotifierPlugin:
    """Forwards pytest lifecycle hooks to a RunNotifier."""

    def __init__(self, notifier: RunNotifier) -> None:
        self.notifier = notifier
        self._attempts: dict[str, int] = {}

    def pytest_sessionstart(self, session: pytest.Session) -> None:
        self.notifier.on_begin()

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        retry_index = self._attempts.get(report.nodeid, 0)
        event = report_to_event(report, retry_index)
        if event is None:
            return
        self._attempts[report.nodeid] = retry_index + 1
        self.notifier.on_attempt_recorded(event)

    def pytest_sessionfinish(
        self, session: pytest.Session, exitstatus: int | pytest.ExitCode
    ) -> None:
        asyncio.run(self.notifier.on_run_end(str(exitstatus)))


def report_to_event(
    report: pytest.TestReport, retry_index: int
) -> TestFinishedEvent | None:
    """Convert a phase report into a finished-attempt event.

    Only the call phase, and setup phases that did not pass, describe an
    attempt. Reruns from pytest-rerunfailures count as failed attempts.
    """
    if report.when == "teardown":
        return None
    if report.when == "setup" and report.passed:
        return None

    status: AttemptStatus
    error = None
    if report.outcome == "rerun" or report.failed:
        message = _crash_message(report)
        status = "timedOut" if message.startswith(TIMEOUT_MARKER) else "failed"
        error = TestError(message=message, stack=report.longreprtext or None)
    elif report.skipped:
        status = "skipped"
    else:
        status = "passed"

    location = None
    path, lineno, domain = report.location
    if lineno is not None:
        location = EventLocation(file=path, line=lineno + 1)

    return TestFinishedEvent(
        test_id=report.nodeid,
        title=domain or report.nodeid,
        status=status,
        retry_index=retry_index,
        error=error,
        location=location,
    )


def _crash_message(report: pytest.TestReport) -> str:
    crash = getattr(report.longrepr, "reprcrash", None)
    if crash is not None and crash.message:
        return str(crash.message)
    text = report.longreprtext.strip()
    return text.splitlines()[0] if text else ""
