"""Transcript -> rows composition of the parsing stages."""

from __future__ import annotations

from core.ocr.models import SalesRow
from core.ocr.segmenter import segment_rows
from core.ocr.tokens import build_tokens, locate_header
from core.report.layout import ReportLayout


def parse_sales_table(text: str, layout: ReportLayout) -> list[SalesRow]:
    """Run token building, header location and row segmentation in order."""

    tokens = build_tokens(text)
    data_region = locate_header(tokens, layout.header_anchor, layout.header_width)
    return segment_rows(data_region, layout.known_codes)
