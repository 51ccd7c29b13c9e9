"""Google Cloud Vision text detection adapter."""

from __future__ import annotations

import asyncio
import json
import threading

from google.cloud import vision
from google.oauth2 import service_account

from core.utils.errors import CollaboratorError


class VisionOcrEngine:
    """Full-text OCR through ``ImageAnnotatorClient.text_detection``.

    The client is created on first use so the app can start without
    credentials configured.
    """

    def __init__(self, credentials_json: str | None = None) -> None:
        self._credentials_json = credentials_json
        self._client: vision.ImageAnnotatorClient | None = None
        self._client_lock = threading.Lock()

    async def extract_text(self, image: bytes) -> str | None:
        return await asyncio.to_thread(self._detect_text, image)

    def _detect_text(self, image: bytes) -> str | None:
        try:
            response = self._get_client().text_detection(image=vision.Image(content=image))
        except Exception as exc:  # noqa: BLE001
            raise CollaboratorError(f"text detection failed: {exc}", service="vision") from exc

        if response.error.message:
            raise CollaboratorError(
                f"text detection failed: {response.error.message}", service="vision"
            )
        if not response.full_text_annotation.text:
            return None
        return response.full_text_annotation.text

    def _get_client(self) -> vision.ImageAnnotatorClient:
        with self._client_lock:
            if self._client is None:
                if self._credentials_json:
                    info = json.loads(self._credentials_json)
                    credentials = service_account.Credentials.from_service_account_info(info)
                    self._client = vision.ImageAnnotatorClient(credentials=credentials)
                else:
                    self._client = vision.ImageAnnotatorClient()
            return self._client
