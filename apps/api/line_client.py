"""LINE Messaging API adapter used as image source and reply channel."""

from __future__ import annotations

import base64
import hashlib
import hmac

import httpx

from core.utils.errors import CollaboratorError

_API_BASE = "https://api.line.me"
_DATA_API_BASE = "https://api-data.line.me"


class LineMessagingClient:
    """Fetch message content and send replies over the LINE HTTP API."""

    def __init__(
        self,
        access_token: str,
        *,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._access_token = access_token
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def fetch_image(self, message_id: str) -> bytes:
        url = f"{_DATA_API_BASE}/v2/bot/message/{message_id}/content"
        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"image fetch failed: {exc}", service="line_content") from exc
        return response.content

    async def reply(self, reply_token: str, text: str) -> None:
        payload = {
            "replyToken": reply_token,
            "messages": [{"type": "text", "text": text}],
        }
        try:
            async with self._client() as client:
                response = await client.post(f"{_API_BASE}/v2/bot/message/reply", json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise CollaboratorError(f"reply failed: {exc}", service="line_reply") from exc

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"Authorization": f"Bearer {self._access_token}"},
            timeout=self._timeout_seconds,
            transport=self._transport,
        )


def signature_for(body: bytes, channel_secret: str) -> str:
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(body: bytes, signature: str | None, channel_secret: str) -> bool:
    """Check ``X-Line-Signature`` against the raw request body."""

    if not signature:
        return False
    return hmac.compare_digest(signature_for(body, channel_secret), signature)
