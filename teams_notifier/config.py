"""Notifier configuration, built once at process start."""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, SecretStr, field_validator

from teams_notifier.ci.loading import collect_ci_metadata
from teams_notifier.models.card import Fact
from teams_notifier.project import discover_project_name

log = logging.getLogger(__name__)

WEBHOOK_URL_VAR = "TEAMS_WEBHOOK_URL"
REPORT_URL_VAR = "TEST_REPORT_URL"
TIMEZONE_VAR = "TEAMS_NOTIFIER_TIMEZONE"
DEFAULT_TIMEZONE = "UTC"


class NotifierConfig(BaseModel):
    """Configuration for the notifier and its delivery client."""

    webhook_url: SecretStr | None = None
    project_name: str = "Test Run"
    report_url: str | None = None
    ci_metadata: Sequence[Fact] = ()
    timezone: str = DEFAULT_TIMEZONE
    max_retries: int = Field(default=3, ge=1)
    request_timeout: float = Field(default=30.0, gt=0)
    base_backoff: float = Field(default=1.0, ge=0)
    max_backoff: float = Field(default=5.0, ge=0)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        """Fall back to UTC for zones the tz database does not know."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            log.warning(
                "⚠️ Unknown timezone %r, using %s for timestamps",
                value,
                DEFAULT_TIMEZONE,
            )
            return DEFAULT_TIMEZONE
        return value

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str], cwd: Path | None = None
    ) -> "NotifierConfig":
        """Read webhook, report link, CI metadata and project name."""
        webhook_url = environ.get(WEBHOOK_URL_VAR) or None
        if webhook_url is None:
            log.warning(
                "⚠️ %s environment variable is not set. "
                "Teams notifications will be skipped.",
                WEBHOOK_URL_VAR,
            )

        return cls(
            webhook_url=SecretStr(webhook_url) if webhook_url else None,
            project_name=discover_project_name(cwd or Path.cwd()),
            report_url=environ.get(REPORT_URL_VAR) or None,
            ci_metadata=collect_ci_metadata(environ),
            timezone=environ.get(TIMEZONE_VAR) or DEFAULT_TIMEZONE,
        )
