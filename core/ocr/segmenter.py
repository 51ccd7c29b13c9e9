"""Split a flat token region into fixed-width department rows."""

from __future__ import annotations

from collections.abc import Collection

from core.ocr.models import SalesRow
from core.utils.errors import NoDataStartError


def segment_rows(tokens: list[str], known_codes: Collection[str]) -> list[SalesRow]:
    """Group tokens into rows, starting a new row at every known code.

    Tokens before the first known code are discarded. A row keeps at most the
    code, rank and amount; stray tokens after the third are dropped.
    """

    start = _first_code_index(tokens, known_codes)
    if start is None:
        raise NoDataStartError(scanned_tokens=len(tokens))

    rows: list[SalesRow] = []
    buffer: list[str] = []
    for token in tokens[start:]:
        if token in known_codes and buffer:
            rows.append(SalesRow.from_buffer(buffer))
            buffer = []
        buffer.append(token)

    if buffer:
        rows.append(SalesRow.from_buffer(buffer))
    return rows


def _first_code_index(tokens: list[str], known_codes: Collection[str]) -> int | None:
    for index, token in enumerate(tokens):
        if token in known_codes:
            return index
    return None
