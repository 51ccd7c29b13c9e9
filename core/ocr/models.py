"""Data models for rows reconstructed from an OCR transcript."""

from __future__ import annotations

from dataclasses import dataclass

PAD_VALUE = "0"


@dataclass(frozen=True)
class SalesRow:
    """One department row: ``[code, rank, posPlusSO]`` as raw strings."""

    code: str
    rank: str = PAD_VALUE
    pos_plus_so: str = PAD_VALUE

    @classmethod
    def from_buffer(cls, buffer: list[str]) -> SalesRow:
        """Materialize a row from buffered tokens, padding or dropping extras."""

        padded = (buffer + [PAD_VALUE] * 3)[:3]
        return cls(code=padded[0], rank=padded[1], pos_plus_so=padded[2])

    def as_list(self) -> list[str]:
        return [self.code, self.rank, self.pos_plus_so]
