"""Run notifier wiring lifecycle events to classification and delivery."""

import logging
import time
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo

from teams_notifier.attempt_store import AttemptStore
from teams_notifier.card_builder import (
    CardContext,
    build_message_card,
    format_duration,
)
from teams_notifier.classifier import classify
from teams_notifier.config import NotifierConfig
from teams_notifier.delivery import DeliveryClient, DeliveryOutcome
from teams_notifier.models.attempt import TestFinishedEvent
from teams_notifier.models.summary import Classification, RunSummary

log = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%d %b %Y, %H:%M:%S %Z"

type ClientFactory = Callable[
    [NotifierConfig], AbstractAsyncContextManager[DeliveryClient]
]


@dataclass(kw_only=True)
class RunNotifier:
    """Consumes run lifecycle events and sends one summary at run end.

    Host adapters call on_begin once, on_attempt_recorded for every finished
    test attempt (possibly from parallel workers), then on_run_end after all
    attempts have been reported. Notification problems are logged and never
    raised to the host.
    """

    config: NotifierConfig
    store: AttemptStore = field(default_factory=AttemptStore)
    client_factory: ClientFactory = DeliveryClient.from_config
    clock: Callable[[], float] = time.monotonic
    _started_at: float | None = field(default=None, init=False, repr=False)

    def on_begin(self, started_at: float | None = None) -> None:
        """Mark the start of the run, now unless given in clock units."""
        self._started_at = self.clock() if started_at is None else started_at

    def on_attempt_recorded(self, event: TestFinishedEvent) -> None:
        """Record one finished attempt of a test."""
        log.debug(
            "Test finished: %s - status=%s retry=%d",
            event.title,
            event.status,
            event.retry_index,
        )
        self.store.record(event.test_id, event.title, event.to_attempt())

    def summary(self) -> RunSummary:
        """Classify everything recorded so far."""
        return classify(self.store)

    async def on_run_end(
        self, run_status: str | None = None
    ) -> DeliveryOutcome | None:
        """Classify the run and deliver the notification.

        Returns None when no webhook is configured, otherwise the delivery
        outcome.
        """
        if run_status is not None:
            log.info("Run finished with host status=%s", run_status)

        if self.config.webhook_url is None:
            log.debug("Skipping Teams notification (no webhook URL configured)")
            return None

        try:
            summary = self.summary()
            log_summary(summary)
            card = build_message_card(summary, self._card_context())
            async with self.client_factory(self.config) as client:
                return await client.deliver(
                    card.to_payload(),
                    self.config.webhook_url,
                    self.config.max_retries,
                )
        except Exception as e:
            log.error("❌ Could not send Teams notification: %s", e, exc_info=e)
            return DeliveryOutcome.ABANDONED

    def _card_context(self) -> CardContext:
        elapsed = 0.0
        if self._started_at is not None:
            elapsed = self.clock() - self._started_at
        timestamp = datetime.now(ZoneInfo(self.config.timezone))

        return CardContext(
            project_name=self.config.project_name,
            timestamp=timestamp.strftime(TIMESTAMP_FORMAT),
            duration=format_duration(elapsed),
            ci_metadata=self.config.ci_metadata,
            report_url=self.config.report_url,
        )


def log_summary(summary: RunSummary) -> None:
    """Log the classified totals of a run."""
    log.info(
        "%s %s: total=%d passed=%d failed=%d timed_out=%d skipped=%d flaky=%d",
        summary.status.emoji,
        summary.status.text,
        summary.total,
        summary.count(Classification.PASSED),
        summary.count(Classification.FAILED),
        summary.count(Classification.TIMED_OUT),
        summary.count(Classification.SKIPPED),
        summary.count(Classification.FLAKY),
    )
