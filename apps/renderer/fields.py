"""
Fields for non-chart pages: patient text, HTML blocks, tables and SVG images.
"""
from __future__ import annotations

import html
import logging
from pathlib import Path
from typing import Optional, Union

import lxml.html

from packages.shared import settings
from packages.shared.errors import ResourceLoadError
from packages.shared.models import BasePage, FieldConfig, FieldType, PatientField, PatientModel
from packages.shared.models.layout import Grid

logger = logging.getLogger(__name__)

LEADER_DASH = (1, 2)
GRID_DASH = (0.5, 2)
GRID_LABEL_SIZE = 8


def resolve_config_path(name: str) -> Path:
    path = Path(name)
    return path if path.is_absolute() else settings.CONFIG_DIR / path


def html_to_markup(source: str) -> str:
    """Convert the small HTML subset used in layouts to reportlab paragraph markup."""
    if not source.strip():
        return ""
    root = lxml.html.fragment_fromstring(source, create_parent="div")
    parts: list[str] = []

    def visit(node) -> None:
        tag = node.tag if isinstance(node.tag, str) else ""
        if tag in ("b", "strong"):
            parts.append("<b>")
            walk_children(node)
            parts.append("</b>")
        elif tag in ("i", "em"):
            parts.append("<i>")
            walk_children(node)
            parts.append("</i>")
        elif tag == "br":
            parts.append("<br/>")
        elif tag == "p":
            walk_children(node)
            parts.append("<br/>")
        elif tag == "ul":
            walk_children(node)
        elif tag == "li":
            parts.append("• ")
            walk_children(node)
            parts.append("<br/>")
        elif not tag:
            pass  # comment or processing instruction
        else:
            logger.info(f"unhandled tag <{tag}>")
        if node.tail:
            parts.append(html.escape(node.tail.strip("\n"), quote=False))

    def walk_children(node) -> None:
        if node.text:
            parts.append(html.escape(node.text.strip("\n"), quote=False))
        for child in node:
            visit(child)

    walk_children(root)
    markup = "".join(parts).strip()
    while markup.endswith("<br/>"):
        markup = markup[: -len("<br/>")].rstrip()
    return markup


def table_cell_box(field: FieldConfig, rows: list[float], col: int, row: int) -> tuple[float, float, float, float]:
    """(left, top, width, height) of a table cell, relative to the table origin."""
    pad = field.cellpadding
    left = (pad if col == 0 else field.columns[col - 1]) + pad
    right = field.width - pad if col >= len(field.columns) else field.columns[col]
    width = right - left - pad

    top = (0 if row == 0 else rows[row - 1]) + pad
    bottom = field.height - pad if row >= len(rows) else rows[row]
    height = bottom - top - 2 * pad
    return left, top, width, height


def extend_rows(rows: list[float], count: int) -> list[float]:
    """Extrapolate row offsets until there is one per table row."""
    rows = list(rows)
    if not rows or count <= len(rows):
        return rows
    if len(rows) == 1:
        rows.append(2 * rows[0])
    while count > len(rows):
        rows.append(2 * rows[-1] - rows[-2])
    return rows


class FieldRenderer:
    def __init__(self, surface, patient: PatientModel):
        self.surface = surface
        self.patient = patient

    def render_page(self, name: str, page: BasePage) -> None:
        logger.info(f"Processing page {name}")
        if page.background:
            try:
                self.surface.background(resolve_config_path(page.background))
            except ResourceLoadError as exc:
                logger.error(f"Background for page {name} skipped: {exc}")
        self.draw_grid(page.grid)

        for field in page.resolved_fields():
            value = self.patient.get_field(field.name)
            if field.type is FieldType.HTML:
                self.plot_html(value, field)
            elif field.type is FieldType.TABLE:
                self.plot_table(field)
            elif field.type is FieldType.SVG:
                self.plot_svg(value, field)
            else:
                self.plot_text(value, field)

    def plot_text(self, text: Optional[str], field: FieldConfig) -> None:
        if not text and field.name is PatientField.TEXT:
            text = field.text
        if not text:
            return

        align = "right" if field.caption is not None else field.align
        self.surface.text(
            text, field.x, field.y, font=field.font, size=field.font_size,
            colour=field.colour, width=field.width, align=align,
        )
        if field.caption is None:
            return

        text_width = self.surface.string_width(" " + text, field.font, field.font_size)
        caption_width = self.surface.string_width(field.caption + " ", field.caption_font, field.caption_size)
        self.surface.text(
            field.caption, field.x, field.y, font=field.caption_font,
            size=field.caption_size, colour=field.colour,
        )
        self.surface.line(
            field.x + caption_width, field.y,
            int(field.x + field.width - text_width), field.y,
            colour=field.colour, line_width=1, dash=LEADER_DASH,
        )

    def plot_html(self, source: str, field: FieldConfig) -> None:
        markup = html_to_markup(source or field.text)
        if not markup:
            return
        self.surface.paragraph(markup, field.x, field.y, field.width or 150, field.font, field.font_size)

    def plot_svg(self, filename: str, field: FieldConfig) -> None:
        try:
            self.surface.svg(filename, field.x, field.y, field.width, field.height)
        except ResourceLoadError as exc:
            logger.error(f"Failed to load {field.name.value}: {exc}")

    def plot_table(self, field: FieldConfig) -> None:
        self.draw_table_box(field)

        cells: list[list[Union[str, FieldConfig]]]
        row_defaults = list(field.row_defaults)
        if field.column_names:
            if field.name is not PatientField.NURSE_CONCERN:
                logger.error("Table output only supported for nurse_concern")
                return
            cells = [
                [str(getattr(concern, column, "") or "") for column in field.column_names]
                for concern in self.patient.nurse_concern
            ]
            row_defaults = []
        else:
            cells = field.cells

        rows = extend_rows(field.rows, len(cells))
        for row_index, row in enumerate(cells):
            row_default = row_defaults[row_index] if row_index < len(row_defaults) else None
            for col_index, cell in enumerate(row):
                self.plot_table_cell(cell, field, rows, row_index, col_index, row_default)

    def draw_table_box(self, field: FieldConfig) -> None:
        if field.border is None:
            return
        surface = self.surface
        surface.rounded_rect(field.x, field.y, field.width, field.height, field.radius, field.border)
        for column in field.columns:
            surface.line(field.x + column, field.y, field.x + column, field.y + field.height,
                         colour=field.border, line_width=0.5)
        for row in field.rows:
            surface.line(field.x + field.cellpadding, field.y + row,
                         field.x + field.width - field.cellpadding, field.y + row,
                         colour=field.border, line_width=0.5)

    def plot_table_cell(
        self,
        cell: Union[str, FieldConfig],
        table: FieldConfig,
        rows: list[float],
        row_index: int,
        col_index: int,
        row_default: Optional[FieldConfig],
    ) -> None:
        left, top, width, height = table_cell_box(table, rows, col_index, row_index)

        update: dict = {"name": None, "type": FieldType.TEXT, "caption": None, "x": 0, "y": 0}
        if row_default is not None:
            update.update({k: getattr(row_default, k) for k in row_default.model_fields_set})
        update.update(width=width, height=height)
        if isinstance(cell, str):
            update["text"] = cell
        else:
            update.update({k: getattr(cell, k) for k in cell.model_fields_set})
        cell_field = table.model_copy(update=update)

        cell_field = cell_field.model_copy(
            update={
                "x": left + table.x + cell_field.x,
                "y": top + table.y + table.font_size + cell_field.y,
                "width": cell_field.width - cell_field.x,
                "height": cell_field.height - cell_field.y,
            }
        )
        text = cell_field.text if cell_field.name is None else self.patient.get_field(cell_field.name)
        if cell_field.type is FieldType.HTML:
            self.plot_html(text, cell_field)
        elif text:
            self.surface.text(
                text, cell_field.x, cell_field.y, font=cell_field.font, size=cell_field.font_size,
                colour=cell_field.colour, width=cell_field.width, align=cell_field.align,
            )

    def draw_grid(self, grid: Optional[Grid]) -> None:
        """Dashed positioning grid with coordinates, for layout work."""
        if grid is None or not grid.show:
            return
        surface = self.surface
        width = grid.width if grid.width is not None else surface.width - grid.left
        height = grid.height if grid.height is not None else surface.height - grid.top - 10
        left, top = grid.left, grid.top
        right, bottom = left + width, top + height

        surface.polygon([(left, top), (left, bottom), (right, bottom), (right, top)], fill=None, stroke="#000000")
        x = left + grid.space
        while x < right:
            surface.line(x, top, x, bottom, dash=GRID_DASH)
            surface.text(f"{x:g}", x - 10, top + 20, size=GRID_LABEL_SIZE, width=20, align="centre")
            x += grid.space
        y = top + grid.space
        while y < bottom:
            surface.line(left, y, right, y, dash=GRID_DASH)
            surface.text(f"{y:g}", 10, y - 3, size=GRID_LABEL_SIZE)
            y += grid.space
