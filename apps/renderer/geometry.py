"""
Chart geometry: where each column and each value section sits on a chart page.

Coordinates are layout units with the origin at the top left of the page and y
growing downwards. Section rows are counted upwards from the section bottom.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from packages.shared.models import ChartField, ChartPageConfig, SectionConfig, SectionType
from packages.shared.models.layout import Candle


@dataclass(frozen=True)
class ColumnInfo:
    left: float
    right: float
    centre: float
    width: float
    row_height: float
    top: float
    bottom: float
    index: int


def chart_columns(chart: ChartPageConfig) -> list[ColumnInfo]:
    """Lay out the two column blocks of a chart, left block first."""
    columns: list[ColumnInfo] = []
    top = bottom = 0.0
    for block in (chart.col1, chart.col2):
        top = block.top if block.top is not None else top
        bottom = block.bottom if block.bottom is not None else bottom
        width = block.width / block.cells
        for index in range(block.cells):
            left = block.left + width * index
            right = left + width
            columns.append(
                ColumnInfo(
                    left=left,
                    right=right,
                    centre=(left + right) / 2,
                    width=width,
                    row_height=block.row_height,
                    top=top,
                    bottom=bottom,
                    index=index,
                )
            )
    return columns


@dataclass(frozen=True)
class ChartSection:
    """One named band of rows showing a single chart field."""
    name: ChartField
    type: SectionType
    bottom: float
    row_height: float
    range: tuple[float, ...] = ()
    row_count: int = 0
    low: float = 0
    high: float = 0
    candle: Optional[Candle] = None
    font: str = "normal"
    font_size: float = 8
    colour: str = "#000000"
    box: bool = False
    display: Optional[str] = None
    bg_colours: Optional[dict[str, str]] = None
    border: Optional[str] = None
    border_width: float = 0.5
    message_top: float = 0
    message_bottom: float = 0

    @classmethod
    def from_config(cls, config: SectionConfig, row_height: float) -> ChartSection:
        section_type = config.type
        row_count = config.rows
        if config.candle is not None:
            section_type = SectionType.CANDLE
            row_count = config.candle.low_rows + config.candle.high_rows + 2
        section = cls(
            name=config.name,
            type=section_type,
            bottom=config.bottom,
            row_height=row_height,
            range=tuple(config.range),
            row_count=row_count,
            low=config.low,
            high=config.high,
            candle=config.candle,
            font=config.font,
            font_size=config.font_size,
            colour=config.colour,
            box=config.box,
            display=config.display,
            bg_colours=config.bg_colours,
            border=config.border,
            border_width=config.border_width,
        )
        return replace(
            section,
            message_top=config.message_top if config.message_top is not None else section.top,
            message_bottom=config.message_bottom if config.message_bottom is not None else section.bottom,
        )

    @property
    def rows(self) -> int:
        if self.row_count:
            return self.row_count
        if self.range:
            return len(self.range)
        return 1

    @property
    def top(self) -> float:
        return self.bottom - self.rows * self.row_height

    def row(self, value: float) -> int:
        """Index of the first band boundary at or above ``value``."""
        for index, boundary in enumerate(self.range):
            if value <= boundary:
                return index
        return len(self.range)

    def row_y(self, row: int) -> float:
        return self.bottom - self.row_height * row - self.row_height / 2

    def point_y(self, value: float) -> float:
        height = self.row_height * (self.rows - 2)
        offset = (value - self.low) / (self.high - self.low) * height
        return self.bottom - self.row_height - offset

    def candle_y(self, value: float) -> float:
        # Two linear scales, low..mid over low_rows and mid..high over high_rows.
        if self.candle is None:
            return 0
        candle = self.candle
        row_height = self.row_height
        if value <= candle.low:
            offset = 0.0
        elif value >= candle.high:
            offset = row_height * (candle.low_rows + candle.high_rows)
        elif value > candle.mid:
            offset = (value - candle.mid) / (candle.high - candle.mid) * (row_height * candle.high_rows)
            offset += row_height * candle.low_rows
        else:
            offset = (value - candle.low) / (candle.mid - candle.low) * (row_height * candle.low_rows)
        return self.bottom - row_height - offset


SPECIAL_COLUMN_FIELDS = (ChartField.DATE, ChartField.TIME, ChartField.INITIALS)


class ChartGeometry:
    """Columns and sections for one chart scheme, with message bounds resolved."""

    def __init__(self, chart: ChartPageConfig):
        self.config = chart
        self.columns = chart_columns(chart)
        row_height = self.columns[0].row_height if self.columns else 10
        sections = [ChartSection.from_config(s, row_height) for s in chart.resolved_sections()]
        self.sections = self._unify_message_groups(sections, chart.message_groups)

        named = {s.name: s for s in self.sections}
        # top_section is never drawn; it marks where full column messages start.
        self.full_message_top = named[ChartField.TOP_SECTION].top
        self.special_sections = [s for s in self.sections if s.name in SPECIAL_COLUMN_FIELDS]

    @staticmethod
    def _unify_message_groups(
        sections: list[ChartSection], groups: list[list[ChartField]]
    ) -> list[ChartSection]:
        for group in groups:
            members = [s for s in sections if s.name in group]
            if not members:
                continue
            top = min(s.message_top for s in members)
            bottom = max(s.message_bottom for s in members)
            sections = [
                replace(s, message_top=top, message_bottom=bottom) if s.name in group else s
                for s in sections
            ]
        return sections

    def section(self, name: ChartField) -> ChartSection:
        for section in self.sections:
            if section.name is name:
                return section
        raise KeyError(name.value)
