"""Render a run summary as a Teams MessageCard."""

from collections.abc import Sequence
from dataclasses import dataclass

from teams_notifier.models.card import (
    Fact,
    MessageCard,
    OpenUriAction,
    OpenUriTarget,
    Section,
)
from teams_notifier.models.summary import Classification, RunSummary

MAX_FAILED_TESTS_DISPLAY = 10
MAX_FLAKY_TESTS_DISPLAY = 5
ERROR_TRUNCATE_LENGTH = 200


@dataclass(frozen=True, kw_only=True)
class CardContext:
    """Run context shown alongside the summary."""

    project_name: str
    timestamp: str
    duration: str
    ci_metadata: Sequence[Fact] = ()
    report_url: str | None = None


def build_message_card(summary: RunSummary, context: CardContext) -> MessageCard:
    """Build the card: totals, environment, failed and flaky tests, report link."""
    status = summary.status
    sections = [
        Section(
            activity_title=(
                f"{status.emoji} {context.project_name} - Test Execution Complete"
            ),
            activity_subtitle=(
                f"Executed on {context.timestamp} | Duration: {context.duration}"
            ),
            facts=[
                Fact(name="📊 Total Tests:", value=str(summary.total)),
                Fact(
                    name="✅ Passed:",
                    value=str(summary.count(Classification.PASSED)),
                ),
                Fact(name="❌ Failed:", value=str(summary.total_failed)),
                Fact(
                    name="⏭️ Skipped:",
                    value=str(summary.count(Classification.SKIPPED)),
                ),
                Fact(
                    name="⚠️ Flaky:",
                    value=str(summary.count(Classification.FLAKY)),
                ),
                Fact(name="📈 Pass Rate:", value=f"{summary.pass_rate:.1f}%"),
            ],
        )
    ]

    if context.ci_metadata:
        sections.append(
            Section(activity_title="🔧 Environment", facts=context.ci_metadata)
        )

    if failed := summary.failed_tests:
        sections.append(
            Section(
                activity_title=f"❌ Failed Tests ({len(failed)})",
                facts=[
                    Fact(
                        name=f"{index}. {test.title}",
                        value=truncate_error(test.error, ERROR_TRUNCATE_LENGTH),
                    )
                    for index, test in enumerate(
                        failed[:MAX_FAILED_TESTS_DISPLAY], start=1
                    )
                ],
            )
        )
        if len(failed) > MAX_FAILED_TESTS_DISPLAY:
            hidden = len(failed) - MAX_FAILED_TESTS_DISPLAY
            sections.append(
                Section(
                    text=(
                        f"_... and {hidden} more failed tests. "
                        "Check the full report for details._"
                    )
                )
            )

    if flaky := summary.flaky_tests:
        sections.append(
            Section(
                activity_title=f"⚠️ Flaky Tests ({len(flaky)})",
                facts=[
                    Fact(
                        name=f"{index}. {test.title}",
                        value=f"Passed after {test.attempts} attempts",
                    )
                    for index, test in enumerate(
                        flaky[:MAX_FLAKY_TESTS_DISPLAY], start=1
                    )
                ],
            )
        )

    actions = None
    if context.report_url:
        actions = [
            OpenUriAction(
                name="📊 View Report",
                targets=[OpenUriTarget(uri=context.report_url)],
            )
        ]

    return MessageCard(
        summary=f"Test Results - {status.text}",
        theme_color=status.theme_color,
        sections=sections,
        potential_action=actions,
    )


def truncate_error(error: str, max_length: int) -> str:
    """Truncate text to max_length characters, ending with an ellipsis."""
    if len(error) <= max_length:
        return error
    return error[: max_length - 3] + "..."


def format_duration(seconds: float) -> str:
    """Format a duration as e.g. "1h 2m 3s", "2m 3s" or "3s"."""
    total = int(seconds)
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)

    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
