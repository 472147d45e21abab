"""
Unit tests for document assembly and page selection.
"""
from __future__ import annotations

import pytest

from apps.renderer.document import DocumentGenerator, load_layout, page_range, pdf_filename
from apps.renderer.pagination import ChartModel
from packages.shared.models import parse_chart_request
from packages.shared.models.request import PageRange


class RecordingSurface:
    width = 595.0
    height = 842.0

    def __init__(self):
        self.calls: list[tuple[str, tuple, dict]] = []

    def __getattr__(self, name):
        def record(*args, **kwargs):
            self.calls.append((name, args, kwargs))
        return record

    def string_width(self, text, font, size):
        return len(text) * size * 0.5

    def finish(self) -> bytes:
        return b"%PDF-recorded"

    def named(self, name):
        return [call for call in self.calls if call[0] == name]


@pytest.mark.parametrize(
    "pages, expected",
    [
        (None, (0, 8)),
        (PageRange(first=2), (2, 2)),
        (PageRange(first=3, last=5), (3, 5)),
        (PageRange(first=-1), (6, 6)),
        (PageRange(first=2, last=-2), (2, 5)),
    ],
)
def test_page_range(pages, expected):
    assert page_range(7, pages) == expected


@pytest.fixture
def generator(sample_request):
    layout = load_layout(sample_request.send_config)
    return DocumentGenerator(layout, ChartModel(sample_request, "DEV"), RecordingSurface())


def test_total_pages(generator):
    # Cover and threshold pages, four chart pages and one blank chart.
    assert generator.total_pages == 7


def test_whole_document(generator):
    assert generator.create_document(0, 8) == b"%PDF-recorded"
    surface = generator.surface
    assert len(surface.named("begin_page")) == 7
    backgrounds = [str(args[0]) for _, args, _ in surface.named("background")]
    assert [b.rsplit("/", 1)[-1] for b in backgrounds] == [
        "meows_chart.svg", "news2_chart.svg", "news2_chart.svg", "news2_chart.svg", "news2_chart.svg",
    ]


def test_page_subset(generator):
    generator.create_document(3, 4)
    surface = generator.surface
    assert len(surface.named("begin_page")) == 2
    page_numbers = [
        args[0] for _, args, kwargs in surface.named("text")
        if kwargs.get("align") == "right" and args[0] in {"3", "4"}
    ]
    assert page_numbers == ["3", "4"]


def test_range_past_the_end_draws_nothing(generator):
    generator.create_document(20, 30)
    assert generator.surface.named("begin_page") == []


def test_meows_back_pages_follow_last_chart(sample_body):
    sample_body["encounter"]["score_system_history"] = []
    for obs_set in sample_body["observation_sets"]:
        obs_set["score_system"] = "meows"
    request = parse_chart_request(sample_body)
    generator = DocumentGenerator(load_layout(request.send_config), ChartModel(request), RecordingSurface())
    last = generator.total_pages
    generator.create_document(last, last)
    (_, args, _), = generator.surface.named("background")
    assert str(args[0]).endswith("meows_chart.svg")


def test_pdf_filename_is_url_encoded(sample_request):
    assert pdf_filename(ChartModel(sample_request)) == "MRN%2F0012345-1234.pdf"
