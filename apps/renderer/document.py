"""
Document generation: front pages, chart pages and back pages in one PDF.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from pydantic import ValidationError

from packages.shared import settings
from packages.shared.errors import ConfigValidationError
from packages.shared.models import ChartRequest, LayoutConfig, PageName, ScoreSystem, SendConfig
from packages.shared.models.request import PageRange
from packages.shared.schema_validator import validate_layout

from .chart_page import ChartPageRenderer
from .fields import FieldRenderer
from .geometry import ChartGeometry
from .pagination import ChartModel, Page
from .surface import DrawingSurface

logger = logging.getLogger(__name__)

PAGE_LIST_OVERRIDES = ("pages_front", "pages_back_news2", "pages_back_meows")


def layout_path(customer_code: str | None = None, config_dir: Path | None = None) -> Path:
    config_dir = config_dir or settings.CONFIG_DIR
    customer = config_dir / (customer_code or settings.CUSTOMER_CODE) / "layout.json"
    if customer.is_file():
        return customer
    return config_dir / "layout.json"


def load_layout(
    send_config: SendConfig,
    customer_code: str | None = None,
    config_dir: Path | None = None,
) -> LayoutConfig:
    """Read, override and validate the layout for a customer.

    The customer's ``bcp`` settings may replace the front and back page lists.
    """
    path = layout_path(customer_code, config_dir)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigValidationError(str(path), [str(exc)]) from exc

    for name in PAGE_LIST_OVERRIDES:
        override = send_config.bcp_list(name)
        if override is not None:
            logger.info(f"Customer override for {name}: {override}")
            raw[name] = override

    valid, problems = validate_layout(raw)
    if not valid:
        raise ConfigValidationError(str(path), problems)
    try:
        return LayoutConfig.model_validate(raw)
    except ValidationError as exc:
        problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise ConfigValidationError(str(path), problems) from exc


def page_range(total_pages: int, pages: Optional[PageRange]) -> tuple[int, int]:
    """Inclusive (first, last) page numbers to draw; negative numbers count back from the end."""
    if pages is None:
        return 0, total_pages + 1
    first = pages.first
    last = pages.last if pages.last is not None else first
    if first < 0:
        first = total_pages + first
    if last < 0:
        last = total_pages + last
    return first, last


def pdf_filename(chart: ChartModel) -> str:
    return quote(f"{chart.patient.hospital_number}-{chart.patient.epr_encounter_id}.pdf", safe="")


class DocumentGenerator:
    """Draws a chart document page by page, skipping pages outside the requested range."""

    def __init__(self, layout: LayoutConfig, chart: ChartModel, surface: Optional[DrawingSurface] = None):
        self.layout = layout
        self.chart = chart
        self.surface = surface or DrawingSurface(layout)
        self.fields = FieldRenderer(self.surface, chart.patient)
        self.renderers = {
            ScoreSystem.NEWS2.value: ChartPageRenderer(self.surface, layout.news2, ChartGeometry(layout.news2)),
            ScoreSystem.MEOWS.value: ChartPageRenderer(self.surface, layout.meows, ChartGeometry(layout.meows)),
        }
        self.current_page = 1
        self.first_page = 1
        self.last_page = 999999

    @property
    def total_pages(self) -> int:
        layout = self.layout
        return len(layout.pages_front) + len(layout.pages_back_news2) + self.chart.page_count

    def is_page_in_range(self) -> bool:
        return self.first_page <= self.current_page <= self.last_page

    def create_document(self, first: int, last: int) -> bytes:
        self.current_page = 1
        self.first_page = first
        self.last_page = last
        self.chart.patient.page_number_callback = lambda: self.current_page

        self.create_pages_without_obs(self.layout.pages_front)
        last_score_system = self.create_obs_pages()
        self.create_pages_without_obs(self.layout.back_pages(last_score_system))
        logger.info(f"Drew {self.surface.page_count} of {self.current_page - 1} pages")
        return self.surface.finish()

    def create_pages_without_obs(self, pages: list[PageName]) -> None:
        for name in pages:
            if self.is_page_in_range():
                self.add_basic_page(name)
            self.current_page += 1

    def create_obs_pages(self) -> str:
        first_obs_page = self.current_page
        last_score_system = ScoreSystem.NEWS2.value
        for page in self.chart.pages:
            logger.info(
                f"Observation page {self.current_page - first_obs_page + 1} of {self.chart.page_count}"
            )
            if self.is_page_in_range():
                self.add_chart_page(page)
            last_score_system = page.score_system
            self.current_page += 1
        return last_score_system

    def add_basic_page(self, name: PageName) -> None:
        self.surface.begin_page()
        self.fields.render_page(name.value, self.layout.basic_page(name))

    def add_chart_page(self, page: Page) -> None:
        chart = self.layout.chart(page.score_system)
        self.surface.begin_page()
        self.fields.render_page(page.score_system, chart)
        self.renderers.get(page.score_system, self.renderers[ScoreSystem.NEWS2.value]).render(page)


def generate_pdf(request: ChartRequest, customer_code: str | None = None) -> tuple[bytes, str]:
    """Render the whole (or the requested part of the) chart document.

    Returns the PDF bytes and the URL-encoded download filename.
    """
    customer_code = customer_code or settings.CUSTOMER_CODE
    logger.info(f"Customer code is {customer_code}")
    layout = load_layout(request.send_config, customer_code)
    chart = ChartModel(request, customer_code)
    generator = DocumentGenerator(layout, chart)
    first, last = page_range(generator.total_pages, request.pages)
    return generator.create_document(first, last), pdf_filename(chart)
