"""
Unit tests for splitting the timeline into chart pages.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from apps.renderer.pagination import PAGE_LENGTH, ChartModel, paginate
from packages.shared.models import (
    ChartField,
    GapMarker,
    ObservationSet,
    Reading,
    Sentinel,
    TimelineEntry,
)

MISSING = Sentinel.MISSING
REFUSED = Sentinel.REFUSED
SSC = Sentinel.SCORE_SYSTEM_CHANGE
NO = Sentinel.NO_READINGS_FOR_24_HOURS

T0 = datetime(2019, 2, 1, 8, 0, tzinfo=timezone.utc)


def _entry(hours, system="news2"):
    return TimelineEntry.of(
        ObservationSet(record_time=T0 + timedelta(hours=hours), readings={}, score_system=system, spo2_scale=1)
    )


def _temperatures(page):
    return [v.observation_value if isinstance(v, Reading) else v for v in page.temperature]


def test_pages_hold_at_most_page_length_entries():
    pages = paginate([_entry(h) for h in range(PAGE_LENGTH * 2 + 1)])
    assert [len(p) for p in pages] == [12, 12, 1]


def test_score_system_change_starts_new_page():
    timeline = [_entry(0, "meows"), _entry(1, "meows"), _entry(2, "news2"), _entry(3, "news2")]
    pages = paginate(timeline)
    assert [len(p) for p in pages] == [2, 2]
    assert [p.score_system for p in pages] == ["meows", "news2"]


def test_gap_entries_never_break_a_page():
    timeline = [_entry(0, "meows"), TimelineEntry.of(GapMarker()), _entry(30, "meows")]
    pages = paginate(timeline)
    assert len(pages) == 1
    assert pages[0].score_system == "meows"


def test_page_without_score_system_defaults_to_news2():
    pages = paginate([TimelineEntry.of(GapMarker())])
    assert pages[0].score_system == "news2"


def test_empty_timeline_has_no_pages():
    assert paginate([]) == []


class TestSampleChart:
    def test_page_sizes(self, sample_request):
        chart = ChartModel(sample_request, "DEV")
        assert [len(p) for p in chart.pages] == [2, 12, 12, 2]
        assert chart.page_count == 4
        assert [p.score_system for p in chart.pages] == ["meows", "news2", "news2", "news2"]

    def test_dates(self, sample_request):
        pages = ChartModel(sample_request).pages
        assert pages[0].dates == ["31 Jan 19", "1 Feb 19"]
        assert pages[1].dates == [
            "2 Feb 19", "3 Feb 19", "3 Feb 19", "4 Feb 19", "4 Feb 19", "4 Feb 19",
            NO, "", "6 Feb 19", "7 Feb 19", "7 Feb 19", "",
        ]
        assert pages[2].dates == [
            "7 Feb 19", NO, "9 Feb 19", "9 Feb 19", "", "10 Feb 19",
            "", "11 Feb 19", "11 Feb 19", "12 Feb 19", "13 Feb 19", "14 Feb 19",
        ]
        assert pages[3].dates == [NO, "15 Apr 19"]

    def test_times_are_local(self, sample_request):
        pages = ChartModel(sample_request).pages
        assert pages[0].times == ["15:56", "10:50"]
        assert pages[1].times == [
            "05:51", "00:48", "16:24", "04:38", "12:00", "23:36", NO, "", "06:43", "00:20", "00:24", "",
        ]
        assert pages[2].times == [
            "13:17", NO, "11:54", "21:26", "", "07:57", "", "05:14", "21:13", "06:58", "04:12", "01:55",
        ]
        # British Summer Time by April.
        assert pages[3].times == [NO, "02:26"]

    def test_blood_pressure(self, sample_request):
        pages = ChartModel(sample_request).pages
        assert pages[0].bp == [(114, MISSING), (129, 74)]
        assert pages[1].bp == [
            (REFUSED, REFUSED), (112, 70), (122, 78), (MISSING, MISSING), (SSC, SSC), (110, 52),
            (NO, NO), (SSC, SSC), (MISSING, MISSING), (SSC, SSC), (130, 86), (SSC, SSC),
        ]
        assert pages[2].bp == [
            (123, 74), (NO, NO), (114, MISSING), (MISSING, MISSING), (SSC, SSC), (120, 69),
            (SSC, SSC), (MISSING, MISSING), (REFUSED, 80), (128, 76), (129, 73), (128, MISSING),
        ]
        assert pages[3].bp == [(NO, NO), (REFUSED, 62)]

    def test_temperature(self, sample_request):
        pages = ChartModel(sample_request).pages
        assert _temperatures(pages[0]) == [37.1, 37.5]
        assert _temperatures(pages[1]) == [37.4, 36.9, 37.1, 37.3, SSC, 36.8, NO, SSC, MISSING, SSC, 36.6, SSC]
        assert _temperatures(pages[2]) == [37, NO, 37, MISSING, SSC, 37, SSC, MISSING, 36.6, 36.9, 36.6, 37]
        assert _temperatures(pages[3]) == [NO, 37.3]

    def test_spo2_scales(self, sample_request):
        pages = ChartModel(sample_request).pages
        assert pages[0].spo2_scales == [None, 1]

    def test_gap_rows_show_sentinel_everywhere(self, sample_request):
        gap = ChartModel(sample_request).pages[3].entries[0]
        assert gap.reading(ChartField.HEART_RATE) is NO
        assert gap.reading(ChartField.BLOOD_PRESSURE) is NO
        assert gap.initials == ""
