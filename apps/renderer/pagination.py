"""
Split a timeline into chart pages.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from packages.shared import settings
from packages.shared.models import (
    ChartField,
    ChartRequest,
    EncounterJson,
    PatientModel,
    ScoreSystem,
    TimelineEntry,
)

from .timeline import timeline_for_request

logger = logging.getLogger(__name__)

PAGE_LENGTH = 12


@dataclass(frozen=True)
class Page:
    entries: tuple[TimelineEntry, ...]
    score_system: str = ScoreSystem.NEWS2.value

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def dates(self) -> list:
        return [e.date for e in self.entries]

    @property
    def times(self) -> list:
        return [e.time for e in self.entries]

    @property
    def bp(self) -> list[tuple]:
        return [e.bp for e in self.entries]

    @property
    def temperature(self) -> list:
        return [e.reading(ChartField.TEMPERATURE) for e in self.entries]

    @property
    def spo2_scales(self) -> list:
        return [e.spo2_scale for e in self.entries]


def paginate(timeline: Iterable[TimelineEntry], page_length: int = PAGE_LENGTH) -> list[Page]:
    """Cut the timeline into pages of at most ``page_length`` entries.

    A page also ends before any entry whose score system differs from the one
    already established, so every page is drawn with a single chart layout.
    Entries without a score system (gaps) never force a break.
    """
    pages: list[Page] = []
    current: list[TimelineEntry] = []
    established = ""

    def close() -> None:
        if current:
            pages.append(Page(tuple(current), established or ScoreSystem.NEWS2.value))
            current.clear()

    for entry in timeline:
        system = entry.score_system
        if system and established and system != established:
            close()
        if system:
            established = system
        current.append(entry)
        if len(current) == page_length:
            close()
    close()
    return pages


class ChartModel:
    """Patient display values plus the paginated timeline for one request."""

    def __init__(self, request: ChartRequest, customer_code: str | None = None):
        self.patient = PatientModel(
            request.patient,
            request.encounter,
            request.location,
            request.send_config,
            customer_code or settings.CUSTOMER_CODE,
        )
        self.encounter: EncounterJson = request.encounter
        self.timeline = timeline_for_request(request)
        self.pages = paginate(self.timeline)
        logger.info(f"Charting {len(self.timeline)} timeline entries on {len(self.pages)} pages")

    @property
    def page_count(self) -> int:
        return len(self.pages)
