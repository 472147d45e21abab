"""
Chart page rendering: one column per timeline entry, one band per chart field.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from packages.shared import settings
from packages.shared.errors import InternalConsistencyError, ResourceLoadError
from packages.shared.models import (
    ChartPageConfig,
    EntryKind,
    MessageText,
    Reading,
    ReadingPair,
    SectionType,
    Sentinel,
    TimelineEntry,
)
from packages.shared.utils.formatting import format_number

from .geometry import ChartGeometry, ChartSection, ColumnInfo
from .pagination import Page

logger = logging.getLogger(__name__)

POINT_OFFSET = 3
POINT_RADIUS = 2
BAR_WIDTH = 2
POSITION_SHIFT = 4
POSITION_ICON_SIZE = 13
BOX_COLOUR = "#00ff00"
ALL_ALIGNMENTS = ("left", "centre", "right")

ScalarReading = Union[Reading, str, int, float]


class ChartPageRenderer:
    """Draws the readings of one page onto a chart for one score system."""

    def __init__(self, surface, chart: ChartPageConfig, geometry: Optional[ChartGeometry] = None):
        self.surface = surface
        self.chart = chart
        self.geometry = geometry or ChartGeometry(chart)

    def render(self, page: Page) -> None:
        geometry = self.geometry
        for index, entry in enumerate(page.entries):
            self.render_column(entry, geometry.columns[index])

    def render_column(self, entry: TimelineEntry, column: ColumnInfo) -> None:
        geometry = self.geometry
        sections = geometry.sections
        skip_sentinels = False

        if entry.kind in (EntryKind.NO_READINGS, EntryKind.SCORE_SYSTEM_CHANGE):
            self.draw_vertical_text(
                self.chart.message(entry.sentinel), column, geometry.full_message_top, column.bottom
            )
            sections = geometry.special_sections
            skip_sentinels = True

        for section in sections:
            reading = entry.reading(section.name)
            if reading is None:
                logger.warning(f"Undefined reading {section.name.value} column {column.index}")
                continue

            if isinstance(reading, Sentinel):
                if not skip_sentinels:
                    self.draw_symbol_message(section, column, reading)
                continue

            if section.type is SectionType.BLANK:
                pass
            elif section.type is SectionType.BANDS:
                self.plot_in_band(section, column, self._scalar(reading, section))
            elif section.type is SectionType.DOT:
                self.plot_dot(section, column, self._scalar(reading, section))
            elif section.type is SectionType.CANDLE:
                if not isinstance(reading, ReadingPair):
                    raise InternalConsistencyError(f"Section {section.name.value} expects a reading pair")
                self.plot_candle(section, column, reading)
            else:
                self.plot_cell_value(section, column, self._scalar(reading, section))

            if section.box:
                self.draw_box_outline(section, column)

    @staticmethod
    def _scalar(reading, section: ChartSection) -> ScalarReading:
        if isinstance(reading, (Reading, str, int, float)):
            return reading
        raise InternalConsistencyError(
            f"Section {section.name.value} expects a single reading, got {type(reading).__name__}"
        )

    # Value lookup

    def display_text(self, reading: ScalarReading, section: ChartSection) -> str:
        if isinstance(reading, str):
            display = reading
        elif isinstance(reading, (int, float)):
            display = format_number(reading)
        elif reading.observation_string is not None:
            display = reading.observation_string
        elif reading.observation_value is not None:
            value = reading.observation_value
            display = value if isinstance(value, str) else format_number(value)
        else:
            display = ""

        mapping = self._display_map(section)
        if display in mapping:
            return mapping[display].display_name
        if display.lower() in mapping:
            return mapping[display.lower()].display_name
        return display

    def numeric_value(self, reading: ScalarReading, section: ChartSection) -> float:
        if isinstance(reading, str):
            try:
                return float(reading)
            except ValueError:
                logger.warning(f"Non-numeric reading {reading!r} in section {section.name.value}")
                return 0.0

        if isinstance(reading, (int, float)):
            numeric = reading
            text = format_number(reading)
        else:
            value = reading.observation_value
            numeric = value if isinstance(value, (int, float)) else 0
            text = reading.observation_string or ""

        mapping = self._display_map(section)
        mapped = mapping.get(format_number(numeric)) or mapping.get(text) or mapping.get(text.lower())
        if mapped is not None:
            return mapped.value
        return numeric

    def _display_map(self, section: ChartSection) -> dict:
        if section.display is None:
            return {}
        return self.chart.display_maps.get(section.display, {})

    # Plots

    def plot_cell_value(self, section: ChartSection, column: ColumnInfo, reading: ScalarReading) -> None:
        display = self.display_text(reading, section)

        if section.bg_colours and isinstance(reading, Reading) and reading.observation_value is not None:
            key = reading.observation_value
            key = key if isinstance(key, str) else format_number(key)
            colour = section.bg_colours.get(key)
            if colour is None:
                logger.error(f"Missing background colour, section {section.name.value}, value {key}")
            else:
                self.surface.rect(
                    column.left, section.top, column.width, section.row_height,
                    fill=colour, stroke=section.border, line_width=section.border_width,
                )
        self.draw_nimbus_text(section, column, section.row_y(0), display)

    def plot_in_band(self, section: ChartSection, column: ColumnInfo, reading: ScalarReading) -> None:
        numeric = self.numeric_value(reading, section)
        display = self.display_text(reading, section)
        self.draw_nimbus_text(section, column, section.row_y(section.row(numeric)), display)

    def plot_dot(self, section: ChartSection, column: ColumnInfo, reading: ScalarReading) -> None:
        numeric = self.numeric_value(reading, section)
        display = self.display_text(reading, section)

        if numeric <= section.low:
            self.draw_triangle(display, "down", section.row_y(0), section, column)
        elif numeric >= section.high:
            self.draw_triangle(display, "up", section.row_y(section.rows - 1), section, column)
        else:
            y = section.point_y(numeric)
            self.surface.circle(column.centre, y, POINT_RADIUS, fill=section.colour)
            self.draw_nimbus_text(section, column, y - section.font_size / 2 - POINT_OFFSET, display)

    def plot_candle(self, section: ChartSection, column: ColumnInfo, pair: ReadingPair) -> None:
        """Vertical bar from the low to the high reading, labelled at each end."""
        high, low = pair.high, pair.low
        if section.candle is None:
            logger.error(f"{section.name.value} missing candle definition")
            return
        if isinstance(high, Sentinel):
            self.draw_symbol_message(section, column, high)
            return
        if isinstance(low, Sentinel):
            self.draw_symbol_message(section, column, low)
            return

        numeric_high = self.numeric_value(high, section)
        numeric_low = self.numeric_value(low, section)
        display_high = self.display_text(high, section)
        display_low = self.display_text(low, section)
        high_y = section.candle_y(numeric_high)
        low_y = section.candle_y(numeric_low)

        position = high.observation_metadata.patient_position if high.observation_metadata else None
        left_offset = -POSITION_SHIFT if position else 0
        centre = column.centre + left_offset
        surface = self.surface

        surface.line(centre, high_y, centre, low_y, colour=section.colour, line_width=1)
        text_high = section.row_y(section.rows - 1)
        text_low = section.row_y(0)
        if numeric_high < section.candle.high:
            surface.polygon(
                [(centre - BAR_WIDTH, high_y - BAR_WIDTH), (centre + BAR_WIDTH, high_y - BAR_WIDTH), (centre, high_y)],
                fill=section.colour, stroke=section.colour,
            )
            text_high = high_y - section.font_size / 2 - POINT_OFFSET
        if numeric_low > section.candle.low:
            surface.polygon(
                [(centre - BAR_WIDTH, low_y + BAR_WIDTH), (centre + BAR_WIDTH, low_y + BAR_WIDTH), (centre, low_y)],
                fill=section.colour, stroke=section.colour,
            )
            text_low = low_y + section.font_size / 2 + POINT_OFFSET

        if position:
            icon = settings.CONFIG_DIR / "positions" / f"{position}.svg"
            icon_y = (text_high + text_low) / 2
            try:
                surface.svg(icon, column.right - 15, icon_y - 6, POSITION_ICON_SIZE, POSITION_ICON_SIZE)
            except ResourceLoadError as exc:
                logger.error(f"Patient position icon skipped: {exc}")

        self.draw_nimbus_text(section, column, text_high, display_high, left_offset)
        self.draw_nimbus_text(section, column, text_low, display_low, left_offset)

    def draw_triangle(
        self, caption: str, direction: str, y: float, section: ChartSection, column: ColumnInfo
    ) -> None:
        centre = column.centre
        shift = BAR_WIDTH / 2
        if direction == "down":
            points = [(centre - BAR_WIDTH, y - shift), (centre + BAR_WIDTH, y - shift), (centre, y + shift)]
            text_offset = -section.font_size / 2 - POINT_OFFSET
        else:
            points = [(centre - BAR_WIDTH, y + shift), (centre + BAR_WIDTH, y + shift), (centre, y - shift)]
            text_offset = section.font_size / 2 + POINT_OFFSET
        self.surface.polygon(points, fill=section.colour, stroke=section.colour)
        self.draw_nimbus_text(section, column, y + text_offset, caption)

    # Messages and text

    def draw_symbol_message(self, section: ChartSection, column: ColumnInfo, reading: Sentinel) -> None:
        if reading in (
            Sentinel.REFUSED,
            Sentinel.SCORE_SYSTEM_CHANGE,
            Sentinel.MISSING,
            Sentinel.NO_READINGS_FOR_24_HOURS,
        ):
            self.draw_vertical_text(
                self.chart.message(reading), column, section.message_top, section.message_bottom, ("centre",)
            )
            return
        logger.error(f"Unexpected value {reading!r}")
        raise InternalConsistencyError(f"Unexpected value {reading!r}")

    def draw_vertical_text(
        self,
        message: MessageText,
        column: ColumnInfo,
        top: float,
        bottom: float,
        alignments: Iterable[str] = ALL_ALIGNMENTS,
    ) -> None:
        if not message.text:
            return
        self.surface.vertical_text(
            message.text,
            left=column.left,
            centre=column.centre,
            width=column.width,
            top=top,
            bottom=bottom,
            margin=column.row_height,
            bg_colour=message.bg_colour,
            alignments=tuple(alignments),
        )

    def draw_nimbus_text(
        self, section: ChartSection, column: ColumnInfo, y: float, text: str, left_offset: float = 0
    ) -> None:
        if not text:
            return
        self.surface.nimbus_text(
            text, column.left + left_offset, y, column.width, section.font, section.font_size, section.colour
        )

    def draw_box_outline(self, section: ChartSection, column: ColumnInfo) -> None:
        for row in range(section.rows):
            self.surface.rect(
                column.left,
                section.bottom - (row + 1) * section.row_height,
                column.width,
                section.row_height,
                stroke=BOX_COLOUR,
            )
