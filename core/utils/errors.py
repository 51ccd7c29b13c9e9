"""Custom exceptions for core logic."""

from __future__ import annotations

HEADER_NOT_FOUND_MESSAGE = "ไม่พบหัวตาราง"
NO_DATA_START_MESSAGE = "ไม่พบข้อมูลแผนก"
INVALID_COMMAND_MESSAGE = "คำสั่งไม่ถูกต้อง ตัวอย่าง: SET HW=5000 DW=4000"


class SalesbotError(Exception):
    """Base error carrying the text shown to the chat user."""

    user_message = "เกิดข้อผิดพลาด"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)


class TableParseError(SalesbotError):
    """Raised when a transcript cannot be turned into sales rows."""


class HeaderNotFoundError(TableParseError):
    """Raised when no token contains the table header anchor."""

    user_message = HEADER_NOT_FOUND_MESSAGE

    def __init__(self, anchor: str) -> None:
        super().__init__(f"Header anchor not found: {anchor}")
        self.anchor = anchor


class NoDataStartError(TableParseError):
    """Raised when no known department code follows the header."""

    user_message = NO_DATA_START_MESSAGE

    def __init__(self, *, scanned_tokens: int) -> None:
        super().__init__(f"No department code among {scanned_tokens} tokens after header")
        self.scanned_tokens = scanned_tokens


class InvalidCommandError(SalesbotError):
    """Raised when a SET command carries no valid key=value pair."""

    user_message = INVALID_COMMAND_MESSAGE

    def __init__(self, command: str, *, rejected_pairs: list[str]) -> None:
        super().__init__(f"Invalid target command: {command!r}")
        self.command = command
        self.rejected_pairs = rejected_pairs


class CollaboratorError(SalesbotError):
    """Raised when an external service (image source, OCR, reply) fails."""

    user_message = "เกิดข้อผิดพลาดในการประมวลผลภาพค่ะ"

    def __init__(self, message: str, *, service: str) -> None:
        super().__init__(message)
        self.service = service
