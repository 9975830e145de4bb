"""CI providers registered under the teams_notifier.ci entry point group."""

import logging
from collections.abc import Mapping, Sequence
from functools import cache
from importlib.metadata import entry_points
from typing import Any

from teams_notifier.ci.base import CIProvider
from teams_notifier.models.card import Fact

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "teams_notifier.ci"

# Facts are shown in this order when several systems are detected.
DEFAULT_CI_PROVIDERS = ("github-actions", "jenkins", "gitlab-ci")


class UnknownCIProviderError(LookupError):
    """Raised when metadata is requested from an unregistered CI system."""


@cache
def registered_ci_providers() -> Mapping[str, CIProvider[Any]]:
    """Return every installed CI provider keyed by its entry point name."""
    return {
        entry.name: entry.load() for entry in entry_points(group=ENTRY_POINT_GROUP)
    }


def collect_ci_metadata(
    environ: Mapping[str, str],
    keys: Sequence[str] = DEFAULT_CI_PROVIDERS,
) -> Sequence[Fact]:
    """Collect build facts from each detected CI system, in the order of keys.

    Raises:
        UnknownCIProviderError: If a key names no installed provider

    """
    providers = registered_ci_providers()
    if missing := [key for key in keys if key not in providers]:
        raise UnknownCIProviderError(
            f"Unknown CI system(s) {missing}; installed: {sorted(providers)}"
        )

    facts: list[Fact] = []
    for key in keys:
        if providers[key].detect(environ):
            log.info("Detected CI system: %s", key)
            facts.extend(providers[key].metadata(environ))
    return facts
