"""Report layout models and YAML loading."""

from __future__ import annotations

from pathlib import Path

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class ReportGroup(BaseModel):
    """One rendered block of departments, in display order."""

    model_config = ConfigDict(extra="forbid")

    title: str
    codes: list[str] = Field(min_length=1)


class ReportLayout(BaseModel):
    """Table parsing parameters plus the two report groups."""

    model_config = ConfigDict(extra="forbid")

    header_anchor: str = Field(min_length=1)
    header_width: int = Field(default=3, ge=0)
    group_1: ReportGroup
    group_2: ReportGroup
    extra_codes: list[str] = Field(default_factory=list)
    separator: str = "------------------------------"
    top3_template: str

    @model_validator(mode="after")
    def _groups_are_disjoint(self) -> ReportLayout:
        overlap = set(self.group_1.codes) & set(self.group_2.codes)
        if overlap:
            raise ValueError(f"Report groups share codes: {sorted(overlap)}")
        return self

    @property
    def known_codes(self) -> frozenset[str]:
        return frozenset(self.group_1.codes) | frozenset(self.group_2.codes) | frozenset(
            self.extra_codes
        )

    @property
    def groups(self) -> tuple[ReportGroup, ReportGroup]:
        return self.group_1, self.group_2


def load_layout(path: Path | None = None) -> ReportLayout:
    """Load and validate report layout from YAML."""

    layout_path = path or Path(__file__).with_name("layout.yaml")

    try:
        raw = yaml.safe_load(layout_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ValueError(f"Layout file not found: {layout_path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in layout file: {layout_path}") from exc

    if not isinstance(raw, dict):
        raise ValueError(f"Layout file must contain a mapping: {layout_path}")

    try:
        return ReportLayout.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid layout schema: {layout_path}") from exc
