from __future__ import annotations

from pathlib import Path

import pytest

from core.report.layout import load_layout

_VALID_LAYOUT = """
header_anchor: OMCH
header_width: 3
group_1:
  title: G1
  codes: [HW, DW]
group_2:
  title: G2
  codes: [PA]
extra_codes: [SV]
top3_template: "Top 3"
"""


def test_load_default_layout() -> None:
    layout = load_layout()

    assert layout.header_anchor == "OMCH"
    assert layout.header_width == 3
    assert layout.group_1.codes == ["HW", "DW", "DH", "BM", "BR", "GG"]
    assert {"HW", "DW", "PA", "PB"}.issubset(layout.known_codes)
    assert not set(layout.group_1.codes) & set(layout.group_2.codes)


def test_load_layout_from_custom_file(tmp_path: Path) -> None:
    path = tmp_path / "layout.yaml"
    path.write_text(_VALID_LAYOUT, encoding="utf-8")

    layout = load_layout(path)

    assert layout.known_codes == frozenset({"HW", "DW", "PA", "SV"})
    assert layout.groups[1].title == "G2"


def test_load_layout_rejects_overlapping_groups(tmp_path: Path) -> None:
    path = tmp_path / "layout.yaml"
    path.write_text(_VALID_LAYOUT.replace("codes: [PA]", "codes: [PA, HW]"), encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid layout schema"):
        load_layout(path)


def test_load_layout_rejects_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "layout.yaml"
    path.write_text(_VALID_LAYOUT + "unexpected: 1\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid layout schema"):
        load_layout(path)


def test_load_layout_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Layout file not found"):
        load_layout(tmp_path / "missing.yaml")


def test_load_layout_requires_mapping(tmp_path: Path) -> None:
    path = tmp_path / "layout.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_layout(path)
