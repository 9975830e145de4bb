"""Models for recorded test attempts and the events that produce them."""

from dataclasses import dataclass
from typing import Literal

from pydantic import Field

from teams_notifier.models.base import Model

type AttemptStatus = Literal["passed", "failed", "skipped", "timedOut"]


@dataclass(frozen=True, kw_only=True)
class SourceLocation:
    """Where a test is defined."""

    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True, kw_only=True)
class Attempt:
    """Outcome of a single execution of a test.

    Attempts are kept in arrival order; retry_index is informational only.
    """

    status: AttemptStatus
    retry_index: int = 0
    error_message: str | None = None
    error_stack: str | None = None
    location: SourceLocation | None = None


class TestError(Model):
    """Error reported by the test runner for a failed attempt."""

    __test__ = False

    message: str | None = None
    stack: str | None = None


class EventLocation(Model):
    """Source location as reported by the test runner."""

    file: str
    line: int


class TestFinishedEvent(Model):
    """A "test finished" lifecycle event emitted by the host runner."""

    __test__ = False

    test_id: str = Field(..., description="Stable identity across retries")
    title: str = Field(..., description="Human-readable test title")
    status: AttemptStatus
    retry_index: int = Field(default=0, ge=0)
    error: TestError | None = None
    location: EventLocation | None = None

    def to_attempt(self) -> Attempt:
        """Convert the event into an immutable attempt record."""
        return Attempt(
            status=self.status,
            retry_index=self.retry_index,
            error_message=self.error.message if self.error else None,
            error_stack=self.error.stack if self.error else None,
            location=(
                SourceLocation(file=self.location.file, line=self.location.line)
                if self.location
                else None
            ),
        )
