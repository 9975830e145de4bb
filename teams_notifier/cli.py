"""CLI entry point replaying recorded test events into a notification."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from teams_notifier.config import NotifierConfig
from teams_notifier.delivery import DeliveryOutcome
from teams_notifier.models.attempt import TestFinishedEvent
from teams_notifier.models.summary import Classification, RunSummary
from teams_notifier.notifier import RunNotifier

EVENTS_ADAPTER = TypeAdapter(list[TestFinishedEvent])


def load_events(path: Path) -> Sequence[TestFinishedEvent]:
    """Load test-finished events from a JSON array file."""
    return EVENTS_ADAPTER.validate_json(path.read_bytes())


async def run(
    events: Sequence[TestFinishedEvent],
    config: NotifierConfig,
    duration: float = 0.0,
    run_status: str | None = None,
) -> int:
    """Replay events, send the notification and return exit code."""
    log = logging.getLogger("teams_notifier")

    notifier = RunNotifier(config=config)
    notifier.on_begin(started_at=notifier.clock() - duration)

    log.info("Replaying %d test event(s)...", len(events))
    for event in events:
        notifier.on_attempt_recorded(event)

    outcome = await notifier.on_run_end(run_status)

    print(json.dumps(format_output(notifier.summary(), outcome), indent=2))

    return 1 if outcome is DeliveryOutcome.ABANDONED else 0


def format_output(
    summary: RunSummary, outcome: DeliveryOutcome | None
) -> dict[str, Any]:
    """Format the run summary and delivery outcome for JSON output."""
    return {
        "status": summary.status.text,
        "total": summary.total,
        **{c.value: summary.count(c) for c in Classification},
        "pass_rate": round(summary.pass_rate, 1),
        "failed_tests": [
            {"title": t.title, "error": t.error, "location": t.location}
            for t in summary.failed_tests
        ],
        "flaky_tests": [
            {"title": t.title, "attempts": t.attempts} for t in summary.flaky_tests
        ],
        "delivery": outcome.value if outcome else "skipped",
    }


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Send a test run summary to a Teams incoming webhook"
    )
    parser.add_argument(
        "--events",
        type=Path,
        required=True,
        help="JSON file with the list of test-finished events, in arrival order",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=0.0,
        help="Run duration in seconds shown on the card",
    )
    parser.add_argument(
        "--run-status",
        default=None,
        help="Overall status reported by the test runner (informational)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=3,
        help="Maximum number of delivery attempts",
    )

    args = parser.parse_args()
    if args.max_retries < 1:
        parser.error("--max-retries must be at least 1")

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = NotifierConfig.from_environ(os.environ).model_copy(
        update={"max_retries": args.max_retries}
    )

    exit_code = asyncio.run(
        run(
            events=load_events(args.events),
            config=config,
            duration=args.duration,
            run_status=args.run_status,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
