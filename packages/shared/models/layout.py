"""
Layout configuration for chart documents.

A layout describes the page size, the fonts, which pages make up the front
and back of the document, and, for each chart scheme, where the columns and
value sections sit on the page. Field and section lists cascade: an entry
without a name sets new defaults for the entries that follow it.
"""
from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packages.shared.models.enums import (
    ChartField,
    FieldType,
    PageName,
    PatientField,
    ScoreSystem,
    SectionType,
    Sentinel,
)


class _LayoutModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Margins(_LayoutModel):
    top: float = 10
    bottom: float = 0
    left: float = 10
    right: float = 10


class PageSettings(_LayoutModel):
    size: str = "A4"
    landscape: bool = False
    margins: Margins = Field(default_factory=Margins)
    translate: tuple[float, float] = (0, 0)


class FontDefaults(_LayoutModel):
    normal: str = "Helvetica"
    bold: str = "Helvetica-Bold"
    italic: str = "Helvetica-Oblique"


class Grid(_LayoutModel):
    """Debug overlay used while positioning fields."""
    show: bool = False
    left: float = 0
    top: float = 0
    width: Optional[float] = None
    height: Optional[float] = None
    space: float = 50


class FieldConfig(_LayoutModel):
    name: Optional[PatientField] = None
    type: FieldType = FieldType.TEXT
    x: float = 100
    y: float = 100
    width: float = 200
    height: float = 10
    font: str = "normal"
    font_size: float = 10
    caption: Optional[str] = None
    caption_font: str = "normal"
    caption_size: float = 10
    text: str = ""
    align: str = "left"
    radius: float = 9
    colour: str = "#000000"
    # Table fields only.
    cellpadding: float = 2
    columns: list[float] = Field(default_factory=list)
    column_names: Optional[list[str]] = None
    rows: list[float] = Field(default_factory=list)
    row_defaults: list[FieldConfig] = Field(default_factory=list)
    cells: list[list[Union[str, FieldConfig]]] = Field(default_factory=list)
    border: Optional[str] = None

    @field_validator("type", mode="before")
    @classmethod
    def _empty_type_is_text(cls, value):
        return value or FieldType.TEXT


FieldConfig.model_rebuild()


def cascade(entries: list, base):
    """Resolve a cascading list: unnamed entries update the defaults for later entries.

    Only keys an entry sets explicitly override the running defaults.
    """
    defaults = base
    resolved = []
    for entry in entries:
        update = {key: getattr(entry, key) for key in entry.model_fields_set}
        combined = defaults.model_copy(update=update)
        if entry.name is None:
            defaults = combined
        else:
            resolved.append(combined)
    return resolved


class BasePage(_LayoutModel):
    background: Optional[str] = None
    grid: Optional[Grid] = None
    fields: list[FieldConfig] = Field(default_factory=list)

    def resolved_fields(self) -> list[FieldConfig]:
        return cascade(self.fields, FieldConfig())


class Column(_LayoutModel):
    left: float
    width: float
    top: Optional[float] = None
    bottom: Optional[float] = None
    row_height: float = 10
    cells: int = 6


class Candle(_LayoutModel):
    low: float
    mid: float
    high: float
    low_rows: int
    high_rows: int

    @model_validator(mode="after")
    def _ordered(self) -> Candle:
        if not self.low < self.mid < self.high:
            raise ValueError("candle requires low < mid < high")
        return self


class SectionConfig(_LayoutModel):
    name: Optional[ChartField] = None
    type: SectionType = SectionType.SIMPLE
    bottom: float = 0
    range: list[float] = Field(default_factory=list)
    rows: int = 0
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
    message_top: Optional[float] = None
    message_bottom: Optional[float] = None


class MessageText(_LayoutModel):
    text: Optional[str] = None
    bg_colour: str = "#ffffff"


class DisplayEntry(_LayoutModel):
    display_name: str
    value: float


class ChartPageConfig(BasePage):
    col1: Column
    col2: Column
    display_maps: dict[str, dict[str, DisplayEntry]] = Field(default_factory=dict)
    message_groups: list[list[ChartField]] = Field(default_factory=list)
    messages: dict[Sentinel, MessageText] = Field(default_factory=dict)
    sections: list[SectionConfig] = Field(default_factory=list)

    def resolved_sections(self) -> list[SectionConfig]:
        return cascade(self.sections, SectionConfig())

    def message(self, sentinel: Sentinel) -> MessageText:
        return self.messages.get(sentinel, MessageText())

    @model_validator(mode="after")
    def _references_resolve(self) -> ChartPageConfig:
        named = {s.name for s in self.sections if s.name is not None}
        if ChartField.TOP_SECTION not in named:
            raise ValueError("chart sections must include top_section")
        for group in self.message_groups:
            for name in group:
                if name not in named:
                    raise ValueError(f"message group names unknown section {name.value}")
        for section in self.sections:
            if section.display is not None and section.display not in self.display_maps:
                raise ValueError(f"section {section.name} uses unknown display map {section.display}")
        return self


class LayoutConfig(_LayoutModel):
    page: PageSettings = Field(default_factory=PageSettings)
    fonts: FontDefaults = Field(default_factory=FontDefaults)
    font_aliases: dict[str, str] = Field(default_factory=dict)
    pages_front: list[PageName] = Field(default_factory=list)
    pages_back_news2: list[PageName] = Field(default_factory=list)
    pages_back_meows: list[PageName] = Field(default_factory=list)
    cover_page: Optional[BasePage] = None
    threshold_4cols: Optional[BasePage] = None
    threshold_5cols: Optional[BasePage] = None
    blank_chart_news2: Optional[BasePage] = None
    blank_chart_meows: Optional[BasePage] = None
    news2: ChartPageConfig
    meows: ChartPageConfig

    def basic_page(self, name: PageName) -> BasePage:
        page = getattr(self, name.value)
        if page is None:
            raise KeyError(name.value)
        return page

    def chart(self, score_system: str) -> ChartPageConfig:
        if score_system == ScoreSystem.MEOWS.value:
            return self.meows
        return self.news2

    def back_pages(self, score_system: str) -> list[PageName]:
        if score_system == ScoreSystem.MEOWS.value:
            return self.pages_back_meows
        return self.pages_back_news2

    @model_validator(mode="after")
    def _pages_defined(self) -> LayoutConfig:
        for name in [*self.pages_front, *self.pages_back_news2, *self.pages_back_meows]:
            if getattr(self, name.value) is None:
                raise ValueError(f"page {name.value} is listed but not defined")
        return self
