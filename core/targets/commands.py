"""Parsing for free-text ``SET key=value`` target commands."""

from __future__ import annotations

from dataclasses import dataclass, field

from core.report.numbers import Number, normalize_number, parse_number

COMMAND_PREFIX = "SET "


@dataclass
class SetCommand:
    """Accepted updates and the raw pairs that were skipped."""

    updates: dict[str, Number] = field(default_factory=dict)
    rejected: list[str] = field(default_factory=list)


def is_set_command(text: str) -> bool:
    return text.startswith(COMMAND_PREFIX)


def parse_set_command(text: str) -> SetCommand | None:
    """Parse ``SET A=100 B=200``; None when the text is not a command at all."""

    if not is_set_command(text):
        return None

    command = SetCommand()
    for pair in text[len(COMMAND_PREFIX) :].split():
        key, sep, raw_value = pair.partition("=")
        value = parse_number(raw_value) if sep and key else None
        if value is None or value < 0:
            command.rejected.append(pair)
            continue
        command.updates[key] = normalize_number(value)
    return command
