"""Pydantic models for the Teams MessageCard payload."""

from collections.abc import Sequence
from typing import Any, Literal

from pydantic import ConfigDict, Field

from teams_notifier.models.base import Model


class CardModel(Model):
    """Card element that accepts both field names and wire aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Fact(CardModel):
    """A name/value pair rendered as a row in a card section."""

    name: str
    value: str


class Section(CardModel):
    """A block of a MessageCard."""

    activity_title: str | None = Field(default=None, alias="activityTitle")
    activity_subtitle: str | None = Field(default=None, alias="activitySubtitle")
    text: str | None = None
    facts: Sequence[Fact] | None = None
    markdown: bool = True


class OpenUriTarget(CardModel):
    """Target of an OpenUri action."""

    os: str = "default"
    uri: str


class OpenUriAction(CardModel):
    """Button opening a link from the card."""

    type: Literal["OpenUri"] = Field(default="OpenUri", alias="@type")
    name: str
    targets: Sequence[OpenUriTarget]


class MessageCard(CardModel):
    """Legacy actionable message card accepted by Teams incoming webhooks."""

    type: Literal["MessageCard"] = Field(default="MessageCard", alias="@type")
    context: str = Field(default="https://schema.org/extensions", alias="@context")
    summary: str
    theme_color: str = Field(..., alias="themeColor")
    sections: Sequence[Section]
    potential_action: Sequence[OpenUriAction] | None = Field(
        default=None, alias="potentialAction"
    )

    def to_payload(self) -> dict[str, Any]:
        """Render the card as the JSON body sent to the webhook."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
