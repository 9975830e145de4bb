"""Derive final per-test classifications from recorded attempts."""

import logging
from collections import Counter

from teams_notifier.attempt_store import AttemptStore
from teams_notifier.models.attempt import Attempt
from teams_notifier.models.summary import (
    Classification,
    FailedTestDetail,
    FlakyTestDetail,
    RunSummary,
)

log = logging.getLogger(__name__)

NO_ERROR_MESSAGE = "No error message available"
UNKNOWN_LOCATION = "Unknown location"
STACK_LINES = 3

FAILURE_STATUSES = frozenset(["failed", "timedOut"])


def classify(store: AttemptStore) -> RunSummary:
    """Classify every test in the store and aggregate the run summary.

    Only the last recorded attempt decides passed, failed, skipped or timed
    out. Earlier failures matter only for flakiness: a test that failed and
    then passed on retry is flaky, never failed.
    """
    sequences = store.sequences()
    log.info("Processing %d test(s)", len(sequences))

    counts: Counter[Classification] = Counter()
    failed_tests: list[FailedTestDetail] = []
    flaky_tests: list[FlakyTestDetail] = []

    for sequence in sequences:
        if not sequence.attempts:
            continue

        final = sequence.attempts[-1]
        had_failure = any(a.status in FAILURE_STATUSES for a in sequence.attempts)

        match final.status:
            case "passed" if had_failure and len(sequence.attempts) > 1:
                counts[Classification.FLAKY] += 1
                flaky_tests.append(
                    FlakyTestDetail(
                        title=sequence.title, attempts=len(sequence.attempts)
                    )
                )
            case "passed":
                counts[Classification.PASSED] += 1
            case "failed":
                counts[Classification.FAILED] += 1
                failed_tests.append(capture_failure(sequence.title, final))
            case "skipped":
                counts[Classification.SKIPPED] += 1
            case "timedOut":
                counts[Classification.TIMED_OUT] += 1
                failed_tests.append(capture_failure(sequence.title, final))

    return RunSummary(
        counts={c: counts[c] for c in Classification},
        failed_tests=tuple(failed_tests),
        flaky_tests=tuple(flaky_tests),
    )


def capture_failure(title: str, attempt: Attempt) -> FailedTestDetail:
    """Capture the error details of a failing attempt, bounded in size."""
    stack = attempt.error_stack or ""
    return FailedTestDetail(
        title=title,
        error=attempt.error_message or NO_ERROR_MESSAGE,
        stack="\n".join(stack.split("\n")[:STACK_LINES]),
        location=str(attempt.location) if attempt.location else UNKNOWN_LOCATION,
    )
