"""
Unit tests for the reportlab drawing surface, read back through pypdf.
"""
from __future__ import annotations

import logging
from io import BytesIO

import pytest
from pypdf import PdfReader

from apps.renderer.chart_page import ChartPageRenderer
from apps.renderer.document import load_layout
from apps.renderer.geometry import ChartGeometry
from apps.renderer.pagination import ChartModel
from apps.renderer.surface import DrawingSurface
from packages.shared import settings
from packages.shared.errors import ResourceLoadError
from packages.shared.models import ObservationSet, SendConfig, parse_chart_request


@pytest.fixture(scope="module")
def layout():
    return load_layout(SendConfig())


@pytest.fixture
def surface(layout, tmp_path):
    surface = DrawingSurface(layout, font_dir=tmp_path)
    surface.begin_page()
    return surface


def _content(surface: DrawingSurface) -> str:
    reader = PdfReader(BytesIO(surface.finish()))
    return reader.pages[0].get_contents().get_data().decode("latin-1")


def test_nimbus_text_strokes_halo_before_fill(surface):
    surface.nimbus_text("37.5", 100, 200, 20, "normal", 8, "#ff0000")
    stream = _content(surface)

    assert stream.count("(37.5) Tj") == 2
    stroke_mode = stream.index("1 Tr")
    first_draw = stream.index("(37.5) Tj")
    fill_mode = stream.index("0 Tr")
    second_draw = stream.index("(37.5) Tj", first_draw + 1)
    assert stream.index("1 1 1 RG") < stroke_mode
    assert stream.index("2 w") < stroke_mode
    assert stroke_mode < first_draw < fill_mode
    assert fill_mode < stream.index("1 0 0 rg") < second_draw


def test_vertical_text_draws_background_and_message(surface):
    surface.vertical_text("Refused", 50, 56, 12, 100, 300, 2, "#eeeeee", ("centre",))
    stream = _content(surface)
    assert "(Refused) Tj" in stream
    assert stream.index(" re") < stream.index("(Refused) Tj")


def test_text_uses_layout_font(surface):
    assert surface.font("sans-bold") == "Helvetica-Bold"
    assert surface.font("no-such-font") == "Helvetica"
    surface.text("Name", 10, 10, font="bold", size=9)
    assert "(Name) Tj" in _content(surface)


def test_missing_svg_raises(surface, tmp_path):
    with pytest.raises(ResourceLoadError):
        surface.svg(tmp_path / "missing.svg", 0, 0, 12, 12)


def test_unreadable_svg_raises(surface, tmp_path):
    broken = tmp_path / "broken.svg"
    broken.write_text("not svg at all", encoding="utf-8")
    with pytest.raises(ResourceLoadError):
        surface.svg(broken, 0, 0, 12, 12)


def test_position_svg_is_drawn(surface):
    surface.svg(settings.CONFIG_DIR / "positions" / "sitting.svg", 10, 10, 12, 12)
    assert _content(surface).count(" cm") >= 3


def test_unknown_patient_position_still_draws_blood_pressure(layout, surface, sample_body, caplog):
    for observation_set in sample_body["observation_sets"]:
        if observation_set["record_time"] != "2019-02-07T00:24:00.000Z":
            continue
        for observation in observation_set["observations"]:
            metadata = observation.get("observation_metadata") or {}
            if "patient_position" in metadata:
                metadata["patient_position"] = "kneeling"
    chart = ChartModel(parse_chart_request(sample_body))
    entry = next(
        entry
        for page in chart.pages
        for entry in page.entries
        if isinstance(entry.payload, ObservationSet)
        and entry.payload.record_time.strftime("%m-%d %H:%M") == "02-07 00:24"
    )
    renderer = ChartPageRenderer(surface, layout.news2, ChartGeometry(layout.news2))

    with caplog.at_level(logging.ERROR, logger="apps.renderer.chart_page"):
        renderer.render_column(entry, renderer.geometry.columns[3])

    assert "Patient position icon skipped" in caplog.text
    assert "kneeling.svg" in caplog.text
    stream = _content(surface)
    assert stream.count("(130) Tj") == 2
    assert stream.count("(86) Tj") == 2
