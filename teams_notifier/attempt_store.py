"""Append-only store of test attempts, keyed by test identity."""

import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from teams_notifier.models.attempt import Attempt


@dataclass(frozen=True, kw_only=True)
class TestAttempts:
    """All attempts recorded for one test, in arrival order."""

    __test__ = False

    test_id: str
    title: str
    attempts: Sequence[Attempt]


@dataclass(kw_only=True)
class _Entry:
    title: str
    attempts: list[Attempt] = field(default_factory=list)


class AttemptStore:
    """Collects attempts reported by the runner during a run.

    Safe to call from parallel workers: appends are serialized by a single
    lock, so attempts for the same test are never lost or interleaved.
    Identities keep their first-seen order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def record(self, test_id: str, title: str, attempt: Attempt) -> None:
        """Append an attempt for a test, creating its sequence if absent."""
        with self._lock:
            entry = self._entries.get(test_id)
            if entry is None:
                entry = self._entries[test_id] = _Entry(title=title)
            entry.attempts.append(attempt)

    def sequences(self) -> Sequence[TestAttempts]:
        """Return a read-only snapshot of every recorded sequence."""
        with self._lock:
            return tuple(
                TestAttempts(
                    test_id=test_id,
                    title=entry.title,
                    attempts=tuple(entry.attempts),
                )
                for test_id, entry in self._entries.items()
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
