"""Models for the classified outcome of a test run."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum, StrEnum


class Classification(StrEnum):
    """Final classification of one test."""

    PASSED = "passed"
    FLAKY = "flaky"
    FAILED = "failed"
    SKIPPED = "skipped"
    TIMED_OUT = "timedOut"


class RunStatus(Enum):
    """Overall status of a run, with its fixed card presentation."""

    PASSED = ("PASSED", "✅", "28a745")
    UNSTABLE = ("UNSTABLE", "⚠️", "ffc107")
    FAILED = ("FAILED", "❌", "dc3545")

    def __init__(self, text: str, emoji: str, theme_color: str) -> None:
        self.text = text
        self.emoji = emoji
        self.theme_color = theme_color


@dataclass(frozen=True, kw_only=True)
class FailedTestDetail:
    """Details captured from the final attempt of a failed or timed-out test."""

    title: str
    error: str
    stack: str
    location: str


@dataclass(frozen=True, kw_only=True)
class FlakyTestDetail:
    """A test that failed at least once before passing."""

    title: str
    attempts: int


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Aggregate counts and details for a finished run."""

    counts: Mapping[Classification, int]
    failed_tests: Sequence[FailedTestDetail] = field(default_factory=tuple)
    flaky_tests: Sequence[FlakyTestDetail] = field(default_factory=tuple)

    def count(self, classification: Classification) -> int:
        """Return the number of tests with the given classification."""
        return self.counts.get(classification, 0)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def total_failed(self) -> int:
        """Failed and timed-out tests, merged for display."""
        return self.count(Classification.FAILED) + self.count(
            Classification.TIMED_OUT
        )

    @property
    def pass_rate(self) -> float:
        """Percentage of tests that eventually passed, flaky ones included."""
        if not self.total:
            return 0.0
        passed = self.count(Classification.PASSED) + self.count(Classification.FLAKY)
        return passed / self.total * 100

    @property
    def status(self) -> RunStatus:
        if self.total_failed > 0:
            return RunStatus.FAILED
        if self.count(Classification.FLAKY) > 0:
            return RunStatus.UNSTABLE
        return RunStatus.PASSED
