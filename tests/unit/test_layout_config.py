"""
Unit tests for layout loading and validation.
"""
from __future__ import annotations

import json

import pytest

from apps.renderer.document import layout_path, load_layout
from packages.shared import settings
from packages.shared.errors import ConfigValidationError
from packages.shared.models import PageName, SendConfig
from packages.shared.schema_validator import validate_layout


def _bundled_layout() -> dict:
    with open(settings.CONFIG_DIR / "layout.json", "r", encoding="utf-8") as f:
        return json.load(f)


def _write_layout(tmp_path, data) -> None:
    (tmp_path / "layout.json").write_text(json.dumps(data), encoding="utf-8")


def test_bundled_layout_is_valid():
    valid, problems = validate_layout(_bundled_layout())
    assert valid, problems


def test_load_bundled_layout():
    layout = load_layout(SendConfig())
    assert layout.pages_front == [PageName.COVER_PAGE, PageName.THRESHOLD_4COLS]
    assert layout.back_pages("meows") == [PageName.BLANK_CHART_MEOWS]
    assert layout.back_pages("news2") == [PageName.BLANK_CHART_NEWS2]
    assert layout.chart("meows") is layout.meows
    assert layout.chart("") is layout.news2


def test_customer_page_lists_override_layout():
    send_config = SendConfig(bcp={"pages_front": ["cover_page", "threshold_5cols"]})
    layout = load_layout(send_config)
    assert layout.pages_front == [PageName.COVER_PAGE, PageName.THRESHOLD_5COLS]


def test_non_list_override_is_ignored():
    layout = load_layout(SendConfig(bcp={"pages_front": "threshold_5cols"}))
    assert layout.pages_front == [PageName.COVER_PAGE, PageName.THRESHOLD_4COLS]


def test_customer_directory_layout_preferred(tmp_path):
    (tmp_path / "ACME").mkdir()
    (tmp_path / "ACME" / "layout.json").write_text("{}", encoding="utf-8")
    assert layout_path("ACME", tmp_path) == tmp_path / "ACME" / "layout.json"
    assert layout_path("OTHER", tmp_path) == tmp_path / "layout.json"


def test_schema_failure_raises(tmp_path):
    data = _bundled_layout()
    del data["news2"]["col1"]
    _write_layout(tmp_path, data)
    with pytest.raises(ConfigValidationError) as exc_info:
        load_layout(SendConfig(), "DEV", tmp_path)
    assert exc_info.value.problems


def test_unknown_section_name_raises(tmp_path):
    data = _bundled_layout()
    data["news2"]["sections"].append({"name": "pulse_pressure", "bottom": 660})
    _write_layout(tmp_path, data)
    with pytest.raises(ConfigValidationError):
        load_layout(SendConfig(), "DEV", tmp_path)


def test_unknown_display_map_raises(tmp_path):
    data = _bundled_layout()
    data["news2"]["sections"].append({"name": "spo2", "bottom": 660, "display": "nope"})
    _write_layout(tmp_path, data)
    with pytest.raises(ConfigValidationError):
        load_layout(SendConfig(), "DEV", tmp_path)


def test_listed_page_must_be_defined(tmp_path):
    data = _bundled_layout()
    del data["threshold_4cols"]
    _write_layout(tmp_path, data)
    with pytest.raises(ConfigValidationError):
        load_layout(SendConfig(), "DEV", tmp_path)


def test_unreadable_layout_raises(tmp_path):
    (tmp_path / "layout.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigValidationError):
        load_layout(SendConfig(), "DEV", tmp_path)


def test_candle_bounds_must_be_ordered(tmp_path):
    data = _bundled_layout()
    for section in data["news2"]["sections"]:
        if section.get("name") == "blood_pressure":
            section["candle"]["mid"] = 250
    _write_layout(tmp_path, data)
    with pytest.raises(ConfigValidationError):
        load_layout(SendConfig(), "DEV", tmp_path)


def test_schema_messages_name_the_location():
    data = _bundled_layout()
    data["news2"]["sections"][1]["rows"] = -1
    valid, problems = validate_layout(data)
    assert not valid
    assert problems[0].startswith("$.news2.sections[1].rows:")
