"""Interfaces for the external services around the summary pipeline."""

from __future__ import annotations

from typing import Protocol


class ImageSource(Protocol):
    """Fetches the raw bytes of an image message."""

    async def fetch_image(self, message_id: str) -> bytes:
        """Return image bytes; transport failures raise CollaboratorError."""


class OcrEngine(Protocol):
    """Recognizes text in an image."""

    async def extract_text(self, image: bytes) -> str | None:
        """Return the full recognized text, or None when nothing was found."""


class ReplyChannel(Protocol):
    """Delivers a text reply to the original requester."""

    async def reply(self, reply_token: str, text: str) -> None:
        """Send ``text``; delivery failures raise CollaboratorError."""
