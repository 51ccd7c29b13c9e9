"""Orchestration pipeline for transcript summaries and target commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo

from core.ocr.models import SalesRow
from core.ocr.parser import parse_sales_table
from core.report.formatter import render_report
from core.report.layout import ReportLayout
from core.targets.store import TargetStore
from core.utils.errors import InvalidCommandError, TableParseError

logger = logging.getLogger("salesbot.pipeline")

DEFAULT_TIMEZONE = "Asia/Bangkok"
STORE_ERROR_MESSAGE = "บันทึกเป้าไม่สำเร็จ กรุณาลองใหม่อีกครั้งค่ะ"
HELP_MESSAGE = (
    "กรุณาส่งภาพตารางยอดค่ะ\n"
    "ตั้งเป้ารายวันด้วยคำสั่ง: SET HW=5000 DW=4000"
)


@dataclass(frozen=True)
class SummaryResult:
    """Reply text plus the rows it was built from (empty on parse failure)."""

    ok: bool
    message: str
    rows: list[SalesRow] = field(default_factory=list)


def report_date_label(timezone: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> str:
    """Display-only report date, e.g. ``19/10/2026``."""

    current = now or datetime.now(ZoneInfo(timezone))
    return current.strftime("%d/%m/%Y")


def summarize_transcript(
    text: str,
    store: TargetStore,
    layout: ReportLayout,
    report_date: str,
) -> SummaryResult:
    """Execute parse -> merge targets -> format for one OCR transcript."""

    try:
        rows = parse_sales_table(text, layout)
    except TableParseError as exc:
        logger.info("transcript rejected: %s", exc)
        return SummaryResult(ok=False, message=exc.user_message)

    logger.info("parsed %d rows: %s", len(rows), ",".join(row.code for row in rows))
    report = render_report(rows, store.read(), report_date, layout)
    return SummaryResult(ok=True, message=report, rows=rows)


def handle_text_message(text: str, store: TargetStore) -> str:
    """Reply to a chat text: apply a SET command or explain usage."""

    try:
        confirmation = store.apply_command(text.rstrip("\r\n"))
    except InvalidCommandError as exc:
        logger.info("rejected target command: pairs=%s", exc.rejected_pairs)
        return exc.user_message
    except OSError as exc:
        logger.error("target store write failed: path=%s error=%s", store.path, exc)
        return STORE_ERROR_MESSAGE

    if confirmation is None:
        return HELP_MESSAGE
    return confirmation
