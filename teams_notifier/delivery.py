"""Webhook delivery with bounded retries and exponential backoff."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import aiohttp
from pydantic import SecretStr
from yarl import URL

from teams_notifier.config import NotifierConfig

log = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_BASE_BACKOFF = 1.0
DEFAULT_MAX_BACKOFF = 5.0


class DeliveryOutcome(StrEnum):
    """Terminal state of a delivery."""

    DELIVERED = "delivered"
    ABANDONED = "abandoned"


class _Retryable(Exception):
    """Internal marker for a failed attempt worth retrying."""


def backoff_delay(
    attempt: int,
    base: float = DEFAULT_BASE_BACKOFF,
    cap: float = DEFAULT_MAX_BACKOFF,
) -> float:
    """Seconds to wait after the given failed attempt (1-based)."""
    return min(base * 2 ** (attempt - 1), cap)


@dataclass(frozen=True, kw_only=True)
class DeliveryClient:
    """Posts a payload to a webhook, retrying transient failures.

    Client errors (4xx) are never retried since resending the same payload
    with the same credentials cannot succeed. Server errors (5xx) and
    transport failures are retried up to the attempt budget.
    """

    session: aiohttp.ClientSession = field(repr=False)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    base_backoff: float = DEFAULT_BASE_BACKOFF
    max_backoff: float = DEFAULT_MAX_BACKOFF
    sleep: Callable[[float], Awaitable[None]] = field(
        default=asyncio.sleep, repr=False
    )

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: NotifierConfig
    ) -> AsyncGenerator["DeliveryClient", None]:
        """Create client with managed session lifecycle."""
        async with aiohttp.ClientSession() as session:
            yield cls(
                session=session,
                request_timeout=config.request_timeout,
                base_backoff=config.base_backoff,
                max_backoff=config.max_backoff,
            )

    async def deliver(
        self,
        payload: Mapping[str, Any],
        endpoint: SecretStr,
        max_retries: int,
    ) -> DeliveryOutcome:
        """Send the payload, returning whether it was delivered or abandoned.

        Never raises for delivery failures; every outcome is logged.
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")

        url = endpoint.get_secret_value()
        host = URL(url).host or "<unknown host>"

        for attempt in range(1, max_retries + 1):
            log.info(
                "📤 Sending Teams notification (attempt %d/%d) to %s",
                attempt,
                max_retries,
                host,
            )
            try:
                if await self._send(url, payload):
                    return DeliveryOutcome.DELIVERED
                return DeliveryOutcome.ABANDONED
            except _Retryable:
                pass

            if attempt < max_retries:
                delay = backoff_delay(attempt, self.base_backoff, self.max_backoff)
                log.info("⏳ Waiting %.1fs before retry...", delay)
                await self.sleep(delay)

        log.error(
            "❌ Failed to send Teams notification after %d attempts", max_retries
        )
        return DeliveryOutcome.ABANDONED

    async def _send(self, url: str, payload: Mapping[str, Any]) -> bool:
        """Perform one POST.

        Returns True when delivered, False when rejected for good, and raises
        _Retryable for server errors and transport failures.
        """
        try:
            async with self.session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            ) as response:
                status = response.status
                if 200 <= status < 300:
                    log.info(
                        "✅ Teams notification sent successfully (%d %s)",
                        status,
                        response.reason,
                    )
                    return True
                text = await response.text(errors="replace")
        except TimeoutError as e:
            log.error(
                "⏱️ Request timeout - the webhook endpoint did not respond "
                "within %.0f seconds",
                self.request_timeout,
            )
            raise _Retryable from e
        except aiohttp.ClientConnectorError as e:
            log.error(
                "🌐 Network error - cannot reach the webhook endpoint: %s (%s)",
                e,
                type(e).__name__,
            )
            raise _Retryable from e
        except (aiohttp.ClientError, OSError) as e:
            log.error(
                "❌ Error sending Teams notification: %s (%s)", e, type(e).__name__
            )
            raise _Retryable from e

        if status >= 500:
            log.error("❌ Teams webhook server error (%d): %s", status, text)
            raise _Retryable

        log.error("❌ Teams webhook rejected the notification (%d): %s", status, text)
        log.error("⚠️ Client error detected - not retrying")
        return False
