"""Tests for notifier configuration."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from teams_notifier.config import NotifierConfig
from teams_notifier.models.card import Fact


def test_from_environ(tmp_path: Path) -> None:
    """Reads webhook, report link, timezone, CI metadata and project name."""
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "shop"\n')
    environ = {
        "TEAMS_WEBHOOK_URL": "https://example.webhook.office.com/webhookb2/abc",
        "TEST_REPORT_URL": "https://ci.example.com/report",
        "TEAMS_NOTIFIER_TIMEZONE": "Asia/Kolkata",
        "GITLAB_CI": "true",
        "CI_COMMIT_BRANCH": "main",
    }

    config = NotifierConfig.from_environ(environ, tmp_path)

    assert config.webhook_url is not None
    assert (
        config.webhook_url.get_secret_value()
        == "https://example.webhook.office.com/webhookb2/abc"
    )
    assert config.report_url == "https://ci.example.com/report"
    assert config.timezone == "Asia/Kolkata"
    assert config.project_name == "shop"
    assert config.ci_metadata == [Fact(name="Branch:", value="main")]
    assert config.max_retries == 3
    assert config.request_timeout == 30.0


@pytest.mark.parametrize("environ", [{}, {"TEAMS_WEBHOOK_URL": ""}])
def test_missing_webhook_is_logged(
    environ: dict[str, str], tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Leaves the webhook unset and warns once."""
    with caplog.at_level(logging.WARNING):
        config = NotifierConfig.from_environ(environ, tmp_path)

    assert config.webhook_url is None
    assert config.report_url is None
    assert config.timezone == "UTC"
    assert caplog.text.count("TEAMS_WEBHOOK_URL environment variable is not set") == 1


def test_webhook_is_not_exposed_in_repr() -> None:
    """Masks the webhook URL, which embeds credentials."""
    config = NotifierConfig.model_validate({"webhook_url": "https://secret.example"})

    assert "secret.example" not in repr(config)


def test_rejects_zero_retries() -> None:
    """Requires at least one delivery attempt."""
    with pytest.raises(ValidationError):
        NotifierConfig(max_retries=0)


@pytest.mark.parametrize("timezone", ["Asia/Kolkatta", "../etc/passwd", ""])
def test_unknown_timezone_falls_back_to_utc(
    timezone: str, caplog: pytest.LogCaptureFixture
) -> None:
    """Replaces an unknown timezone with UTC and warns."""
    with caplog.at_level(logging.WARNING):
        config = NotifierConfig(timezone=timezone)

    assert config.timezone == "UTC"
    assert "Unknown timezone" in caplog.text


def test_known_timezone_is_kept() -> None:
    """Keeps a valid IANA zone name."""
    assert NotifierConfig(timezone="Asia/Kolkata").timezone == "Asia/Kolkata"


def test_from_environ_with_unknown_timezone(tmp_path: Path) -> None:
    """Falls back to UTC for a misspelled TEAMS_NOTIFIER_TIMEZONE."""
    config = NotifierConfig.from_environ(
        {
            "TEAMS_WEBHOOK_URL": "https://example.webhook.office.com/x",
            "TEAMS_NOTIFIER_TIMEZONE": "Asia/Kolkatta",
        },
        tmp_path,
    )

    assert config.timezone == "UTC"
