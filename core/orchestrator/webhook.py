"""Dispatch chat webhook events through the summary pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.messaging.base import ImageSource, OcrEngine, ReplyChannel
from core.messaging.events import ChatEvent
from core.orchestrator.pipeline import HELP_MESSAGE, handle_text_message, summarize_transcript
from core.report.layout import ReportLayout
from core.targets.store import TargetStore
from core.utils.errors import CollaboratorError

logger = logging.getLogger("salesbot.pipeline")

NO_DATA_MESSAGE = "ไม่พบข้อมูลในภาพค่ะ"
PROCESSING_ERROR_MESSAGE = CollaboratorError.user_message


@dataclass(frozen=True)
class Collaborators:
    image_source: ImageSource
    ocr_engine: OcrEngine
    reply_channel: ReplyChannel


async def handle_event(
    event: ChatEvent,
    *,
    collaborators: Collaborators,
    store: TargetStore,
    layout: ReportLayout,
    report_date: str,
) -> str | None:
    """Build and deliver the reply for one event; returns the reply text."""

    if not event.reply_token:
        return None

    text = await build_reply(
        event,
        collaborators=collaborators,
        store=store,
        layout=layout,
        report_date=report_date,
    )

    try:
        await collaborators.reply_channel.reply(event.reply_token, text)
    except CollaboratorError as exc:
        logger.error("reply delivery failed: service=%s error=%s", exc.service, exc)
    return text


async def build_reply(
    event: ChatEvent,
    *,
    collaborators: Collaborators,
    store: TargetStore,
    layout: ReportLayout,
    report_date: str,
) -> str:
    if event.is_image and event.message is not None:
        try:
            transcript = await _recognize(event.message.id, collaborators)
            result = summarize_transcript(transcript, store, layout, report_date)
        except Exception:  # noqa: BLE001
            logger.exception("image processing failed: message_id=%s", event.message.id)
            return PROCESSING_ERROR_MESSAGE
        return result.message or NO_DATA_MESSAGE

    if event.is_text and event.message is not None:
        return handle_text_message(event.message.text or "", store)

    return HELP_MESSAGE


async def _recognize(message_id: str, collaborators: Collaborators) -> str:
    try:
        image = await collaborators.image_source.fetch_image(message_id)
        text = await collaborators.ocr_engine.extract_text(image)
    except CollaboratorError as exc:
        logger.warning("no OCR text available: service=%s error=%s", exc.service, exc)
        return ""
    return text or ""
