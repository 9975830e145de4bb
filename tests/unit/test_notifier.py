"""Tests for the run notifier."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from pydantic import SecretStr

from teams_notifier.config import NotifierConfig
from teams_notifier.delivery import DeliveryClient, DeliveryOutcome
from teams_notifier.models.summary import Classification
from teams_notifier.notifier import RunNotifier
from teams_notifier.testing.factories import TestFinishedEventFactory

WEBHOOK_URL = "https://example.webhook.office.com/webhookb2/abc"


@pytest.fixture
def client_mock() -> Mock:
    """Create mock delivery client."""
    client = Mock(spec=DeliveryClient)
    client.deliver = AsyncMock(return_value=DeliveryOutcome.DELIVERED)
    return client


@pytest.fixture
def config() -> NotifierConfig:
    """Create configuration with a webhook."""
    return NotifierConfig(
        webhook_url=SecretStr(WEBHOOK_URL), project_name="shop", max_retries=4
    )


def factory_for(client: Mock) -> Mock:
    """Wrap a client in a factory shaped like DeliveryClient.from_config."""

    @asynccontextmanager
    async def _factory(config: NotifierConfig) -> AsyncGenerator[Mock, None]:
        yield client

    return Mock(side_effect=_factory)


def test_records_attempts_in_store(config: NotifierConfig) -> None:
    """Appends each event to the store under its test identity."""
    notifier = RunNotifier(config=config)

    notifier.on_attempt_recorded(
        TestFinishedEventFactory.build(test_id="t1", status="failed")
    )
    notifier.on_attempt_recorded(
        TestFinishedEventFactory.build(test_id="t1", status="passed", retry_index=1)
    )

    summary = notifier.summary()
    assert len(notifier.store) == 1
    assert summary.count(Classification.FLAKY) == 1


async def test_skips_delivery_without_webhook(
    client_mock: Mock, caplog: pytest.LogCaptureFixture
) -> None:
    """Never creates a client when no webhook is configured."""
    factory = factory_for(client_mock)
    notifier = RunNotifier(config=NotifierConfig(), client_factory=factory)
    notifier.on_begin()
    notifier.on_attempt_recorded(TestFinishedEventFactory.build(status="failed"))

    with caplog.at_level(logging.DEBUG):
        outcome = await notifier.on_run_end("failed")

    assert outcome is None
    factory.assert_not_called()
    assert "no webhook URL configured" in caplog.text


async def test_missing_webhook_is_reported_once(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Only the configuration warns about a missing webhook."""
    with caplog.at_level(logging.INFO):
        notifier = RunNotifier(config=NotifierConfig.from_environ({}, tmp_path))
        await notifier.on_run_end()

    skip_records = [r for r in caplog.records if "webhook" in r.getMessage().lower()]
    assert len(skip_records) == 1
    assert skip_records[0].levelno == logging.WARNING


async def test_delivers_card_with_configured_budget(
    config: NotifierConfig, client_mock: Mock
) -> None:
    """Builds the card and delivers it with the configured attempt budget."""
    factory = factory_for(client_mock)
    notifier = RunNotifier(config=config, client_factory=factory)
    notifier.on_begin()
    notifier.on_attempt_recorded(
        TestFinishedEventFactory.build(test_id="t1", title="login", status="passed")
    )

    outcome = await notifier.on_run_end("passed")

    assert outcome is DeliveryOutcome.DELIVERED
    factory.assert_called_once_with(config)
    payload, endpoint, max_retries = client_mock.deliver.await_args.args
    assert endpoint.get_secret_value() == WEBHOOK_URL
    assert max_retries == 4
    assert payload["themeColor"] == "28a745"
    assert payload["sections"][0]["activityTitle"] == (
        "✅ shop - Test Execution Complete"
    )


async def test_reports_duration_since_begin(
    config: NotifierConfig, client_mock: Mock
) -> None:
    """Shows the time elapsed between begin and end on the card."""
    clock = Mock(side_effect=[100.0, 225.0])
    notifier = RunNotifier(
        config=config, client_factory=factory_for(client_mock), clock=clock
    )
    notifier.on_begin()

    await notifier.on_run_end()

    payload = client_mock.deliver.await_args.args[0]
    assert payload["sections"][0]["activitySubtitle"].endswith("Duration: 2m 5s")


async def test_returns_abandoned_outcome(
    config: NotifierConfig, client_mock: Mock
) -> None:
    """Passes through an abandoned delivery."""
    client_mock.deliver.return_value = DeliveryOutcome.ABANDONED
    notifier = RunNotifier(config=config, client_factory=factory_for(client_mock))

    assert await notifier.on_run_end() is DeliveryOutcome.ABANDONED


async def test_unexpected_errors_do_not_propagate(
    config: NotifierConfig, client_mock: Mock, caplog: pytest.LogCaptureFixture
) -> None:
    """Logs unexpected failures and reports the notification as abandoned."""
    client_mock.deliver.side_effect = RuntimeError("session exploded")
    notifier = RunNotifier(config=config, client_factory=factory_for(client_mock))

    with caplog.at_level(logging.ERROR):
        outcome = await notifier.on_run_end()

    assert outcome is DeliveryOutcome.ABANDONED
    assert "session exploded" in caplog.text
