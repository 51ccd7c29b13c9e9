"""Local JSON store for per-department daily sales targets."""

from __future__ import annotations

import json
import logging
import math
import threading
from pathlib import Path

from core.report.numbers import Number, format_number
from core.targets.commands import parse_set_command
from core.utils.errors import InvalidCommandError

logger = logging.getLogger("salesbot.targets")

SUCCESS_MESSAGE = "บันทึกเป้ารายวันเรียบร้อย"


class TargetStore:
    """Persist the department -> target mapping in a single JSON file.

    The file is always read and written whole. Updates hold an in-process lock
    across read-modify-write and land through a temp file + replace.
    """

    def __init__(self, store_path: Path) -> None:
        self._store_path = store_path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._store_path

    def read(self) -> dict[str, Number]:
        """Return persisted targets; missing or corrupt stores read as empty."""

        with self._lock:
            return self._read_data()

    def apply_command(self, text: str) -> str | None:
        """Apply a ``SET`` command and return the confirmation text.

        Returns None when ``text`` is not a command. Raises InvalidCommandError
        when no pair carried a usable value; the store is left untouched then.
        """

        command = parse_set_command(text)
        if command is None:
            return None
        if not command.updates:
            raise InvalidCommandError(text, rejected_pairs=command.rejected)

        with self._lock:
            data = self._read_data()
            data.update(command.updates)
            self._write_data(data)

        logger.info(
            "targets updated: keys=%s skipped=%d",
            ",".join(sorted(command.updates)),
            len(command.rejected),
        )
        return render_targets(data, title=SUCCESS_MESSAGE)

    def _read_data(self) -> dict[str, Number]:
        if not self._store_path.exists():
            return {}

        try:
            raw = json.loads(self._store_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("ignoring unreadable target store %s: %s", self._store_path, exc)
            return {}

        if not isinstance(raw, dict):
            logger.warning("ignoring target store without a JSON object: %s", self._store_path)
            return {}

        targets: dict[str, Number] = {}
        for key, value in raw.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if not math.isfinite(value):
                continue
            targets[str(key)] = value
        return targets

    def _write_data(self, data: dict[str, Number]) -> None:
        self._store_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._store_path.with_suffix(f"{self._store_path.suffix}.tmp")

        temp_path.write_text(
            json.dumps(
                {key: data[key] for key in sorted(data)},
                ensure_ascii=False,
                indent=2,
            ),
            encoding="utf-8",
        )
        temp_path.replace(self._store_path)


def render_targets(targets: dict[str, Number], *, title: str) -> str:
    """One ``CODE : value`` line per key, sorted by code."""

    lines = [title]
    if not targets:
        lines.append("(ยังไม่มีการตั้งเป้า)")
    for key in sorted(targets):
        lines.append(f"{key} : {format_number(targets[key])}")
    return "\n".join(lines)
