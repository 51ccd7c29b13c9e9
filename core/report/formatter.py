"""Render grouped daily sales reports from parsed rows and targets."""

from __future__ import annotations

from collections.abc import Mapping

from core.ocr.models import SalesRow
from core.report.layout import ReportGroup, ReportLayout
from core.report.numbers import Number, format_diff, format_number, parse_amount

UNCERTAIN_MARKER = " (อ่านไม่ชัด)"


def render_report(
    rows: list[SalesRow],
    targets: Mapping[str, Number],
    report_date: str,
    layout: ReportLayout,
) -> str:
    """Render both group blocks joined by the layout separator."""

    rows_by_code: dict[str, SalesRow] = {}
    for row in rows:
        rows_by_code.setdefault(row.code, row)

    blocks = [
        _render_group(group, rows_by_code, targets, report_date, layout.top3_template)
        for group in layout.groups
    ]
    return f"\n\n{layout.separator}\n\n".join(blocks)


def render_department(code: str, row: SalesRow, target: Number) -> str:
    """Three lines: target, actual and the signed difference."""

    parsed = parse_amount(row.pos_plus_so)
    actual: Number = parsed if parsed is not None else 0
    diff = actual - target

    actual_line = f"{code} ทำได้ : {format_number(actual)}"
    if parsed is None:
        actual_line += UNCERTAIN_MARKER

    return "\n".join(
        [
            f"{code} เป้ารายวัน : {format_number(target)}",
            actual_line,
            f"Diff : {format_diff(diff)}",
        ]
    )


def _render_group(
    group: ReportGroup,
    rows_by_code: Mapping[str, SalesRow],
    targets: Mapping[str, Number],
    report_date: str,
    top3_template: str,
) -> str:
    sections = [f"📊 {group.title} วันที่ {report_date}"]
    for code in group.codes:
        row = rows_by_code.get(code)
        if row is None:
            continue
        sections.append(render_department(code, row, targets.get(code, 0)))
    sections.append(top3_template)
    return "\n\n".join(sections)
