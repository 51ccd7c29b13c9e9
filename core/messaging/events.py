"""Webhook payload models for chat platform events."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Message body of a ``message`` event."""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    text: str | None = None


class ChatEvent(BaseModel):
    """One webhook event; only the fields the bot reacts to are modeled."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: str
    reply_token: str | None = Field(default=None, alias="replyToken")
    message: ChatMessage | None = None

    @property
    def is_image(self) -> bool:
        return self.type == "message" and self.message is not None and self.message.type == "image"

    @property
    def is_text(self) -> bool:
        return self.type == "message" and self.message is not None and self.message.type == "text"


class WebhookPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    events: list[ChatEvent] = Field(default_factory=list)
