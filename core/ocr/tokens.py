"""Token stream building and header location for OCR transcripts."""

from __future__ import annotations

from core.utils.errors import HeaderNotFoundError


def build_tokens(text: str) -> list[str]:
    """Split raw OCR text on whitespace runs, keeping order and dropping blanks."""

    return [piece for piece in (part.strip() for part in text.split()) if piece]


def find_header_index(tokens: list[str], anchor: str) -> int | None:
    needle = anchor.upper()
    for index, token in enumerate(tokens):
        if needle in token.upper():
            return index
    return None


def locate_header(tokens: list[str], anchor: str, header_width: int = 3) -> list[str]:
    """Return the data region that follows the header labels.

    The header is matched by content, not position, so leading page titles or
    border noise before the table are skipped along with the header itself.
    """

    header_index = find_header_index(tokens, anchor)
    if header_index is None:
        raise HeaderNotFoundError(anchor)
    return tokens[header_index + header_width :]
