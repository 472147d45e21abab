"""
Drawing surface over a reportlab canvas.

Layout coordinates have their origin at the top left of the page with y growing
downwards; the surface converts them to PDF space. Text is positioned by its
vertical middle unless stated otherwise.
"""
from __future__ import annotations

import functools
import logging
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional

from reportlab.graphics import renderPDF
from reportlab.lib import colors, pagesizes
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph
from svglib.svglib import svg2rlg

from packages.shared import settings
from packages.shared.errors import ResourceLoadError
from packages.shared.models.layout import LayoutConfig

logger = logging.getLogger(__name__)

NIMBUS_COLOUR = "#ffffff"
NIMBUS_OPACITY = 0.7
NIMBUS_WIDTH = 2
MESSAGE_FONT_SIZE = 8
MESSAGE_OPACITY = 0.9


@functools.lru_cache(maxsize=None)
def register_font_directory(font_dir: str) -> tuple[str, ...]:
    """Register every TrueType font in ``font_dir`` under its file stem."""
    directory = Path(font_dir)
    if not directory.is_dir():
        logger.info(f"Font directory {directory} not found, using built-in fonts")
        return ()
    registered = []
    for path in sorted(directory.iterdir()):
        if path.suffix.lower() != ".ttf":
            continue
        logger.debug(f"Load font {path.stem} {path}")
        pdfmetrics.registerFont(TTFont(path.stem, str(path)))
        registered.append(path.stem)
    return tuple(registered)


def page_size(name: str, landscape: bool = False) -> tuple[float, float]:
    try:
        size = getattr(pagesizes, name.upper())
    except AttributeError:
        logger.warning(f"Unknown page size {name}, using A4")
        size = pagesizes.A4
    return pagesizes.landscape(size) if landscape else pagesizes.portrait(size)


def _colour(value: Optional[str]):
    return colors.toColor(value) if value else None


class DrawingSurface:
    """Primitive drawing operations for one document."""

    def __init__(self, layout: LayoutConfig, font_dir: Path | None = None):
        self.layout = layout
        self.buffer = BytesIO()
        self.width, self.height = page_size(layout.page.size, layout.page.landscape)
        self.canvas = canvas.Canvas(self.buffer, pagesize=(self.width, self.height))
        self.canvas.setTitle("SEND observation chart")
        self._fonts = set(self.canvas.getAvailableFonts())
        self._fonts.update(register_font_directory(str(font_dir or settings.FONT_DIR)))
        self._aliases = {k.lower(): v for k, v in layout.font_aliases.items()}
        self._page_open = False
        self.page_count = 0

    # Pages

    def begin_page(self) -> None:
        if self._page_open:
            self.canvas.showPage()
        self._page_open = True
        self.page_count += 1
        tx, ty = self.layout.page.translate
        self.canvas.translate(tx, -ty)

    def finish(self) -> bytes:
        if self._page_open:
            self.canvas.showPage()
            self._page_open = False
        self.canvas.save()
        return self.buffer.getvalue()

    def _y(self, y: float) -> float:
        return self.height - y

    # Fonts

    def font(self, name: str) -> str:
        """Resolve a layout font name to a font reportlab can draw with."""
        defaults = self.layout.fonts
        name = {"normal": defaults.normal, "bold": defaults.bold, "italic": defaults.italic}.get(name, name)
        name = self._aliases.get(name.lower(), name)
        if name in self._fonts:
            return name
        logger.warning(f"Font {name} is not available, using {defaults.normal}")
        return defaults.normal

    def string_width(self, text: str, font: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, self.font(font), size)

    def _middle_baseline(self, y: float, font: str, size: float) -> float:
        ascent, descent = pdfmetrics.getAscentDescent(font, size)
        return self._y(y) - (ascent + descent) / 2

    # Shapes

    def rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
        line_width: float = 1,
        fill_opacity: float = 1,
    ) -> None:
        c = self.canvas
        c.saveState()
        if fill:
            c.setFillColor(_colour(fill), alpha=fill_opacity)
        if stroke:
            c.setStrokeColor(_colour(stroke))
            c.setLineWidth(line_width)
        c.rect(x, self._y(y + height), width, height, stroke=int(bool(stroke)), fill=int(bool(fill)))
        c.restoreState()

    def rounded_rect(self, x: float, y: float, width: float, height: float, radius: float, stroke: str) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(_colour(stroke))
        c.setLineWidth(0.5)
        c.roundRect(x, self._y(y + height), width, height, radius, stroke=1, fill=0)
        c.restoreState()

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        colour: str = "#000000",
        line_width: float = 1,
        dash: Optional[tuple[float, float]] = None,
    ) -> None:
        c = self.canvas
        c.saveState()
        c.setStrokeColor(_colour(colour))
        c.setLineWidth(line_width)
        if dash:
            c.setDash(*dash)
        c.line(x1, self._y(y1), x2, self._y(y2))
        c.restoreState()

    def circle(self, x: float, y: float, radius: float, fill: str) -> None:
        c = self.canvas
        c.saveState()
        c.setFillColor(_colour(fill))
        c.setStrokeColor(_colour(fill))
        c.setLineWidth(0)
        c.circle(x, self._y(y), radius, stroke=1, fill=1)
        c.restoreState()

    def polygon(self, points: Iterable[tuple[float, float]], fill: Optional[str], stroke: str, line_width: float = 1) -> None:
        c = self.canvas
        points = list(points)
        c.saveState()
        c.setStrokeColor(_colour(stroke))
        c.setLineWidth(line_width)
        if fill:
            c.setFillColor(_colour(fill))
        path = c.beginPath()
        first_x, first_y = points[0]
        path.moveTo(first_x, self._y(first_y))
        for px, py in points[1:]:
            path.lineTo(px, self._y(py))
        path.close()
        c.drawPath(path, stroke=1, fill=int(bool(fill)))
        c.restoreState()

    # Text

    def _aligned_x(self, text: str, x: float, width: Optional[float], align: str, font: str, size: float) -> float:
        if width is None or align == "left":
            return x
        text_width = pdfmetrics.stringWidth(text, font, size)
        if align == "right":
            return x + width - text_width
        return x + (width - text_width) / 2

    def text(
        self,
        text: str,
        x: float,
        y: float,
        font: str = "normal",
        size: float = 10,
        colour: str = "#000000",
        width: Optional[float] = None,
        align: str = "left",
        baseline: str = "alphabetic",
    ) -> None:
        """Single line of text. ``baseline`` is 'alphabetic' or 'middle'."""
        c = self.canvas
        face = self.font(font)
        tx = self._aligned_x(text, x, width, align, face, size)
        ty = self._middle_baseline(y, face, size) if baseline == "middle" else self._y(y)
        c.saveState()
        c.setFont(face, size)
        c.setFillColor(_colour(colour))
        c.drawString(tx, ty, text)
        c.restoreState()

    def nimbus_text(
        self,
        text: str,
        x: float,
        y: float,
        width: float,
        font: str,
        size: float,
        colour: str,
    ) -> None:
        """Centred text with a translucent white halo behind it."""
        c = self.canvas
        face = self.font(font)
        tx = self._aligned_x(text, x, width, "centre", face, size)
        ty = self._middle_baseline(y, face, size)
        c.saveState()
        c.setFont(face, size)
        c.setStrokeColor(_colour(NIMBUS_COLOUR))
        c.setStrokeAlpha(NIMBUS_OPACITY)
        c.setLineWidth(NIMBUS_WIDTH)
        c.drawString(tx, ty, text, mode=1)
        c.setFillColor(_colour(colour))
        c.setStrokeAlpha(1)
        c.drawString(tx, ty, text, mode=0)
        c.restoreState()

    def vertical_text(
        self,
        text: str,
        left: float,
        centre: float,
        width: float,
        top: float,
        bottom: float,
        margin: float,
        bg_colour: str,
        alignments: Iterable[str],
    ) -> None:
        """Text reading bottom to top over a translucent column background."""
        c = self.canvas
        box_width = bottom - top
        face = self.font("normal")
        size = MESSAGE_FONT_SIZE
        text_width = pdfmetrics.stringWidth(text, face, size)
        if text_width > box_width:
            logger.error(f"Message {text} too long! (l:{left}, t:{top} mw:{text_width:.1f}, h:{box_width})")

        self.rect(left, top, width, box_width, fill=bg_colour, stroke=bg_colour, fill_opacity=MESSAGE_OPACITY)

        c.saveState()
        c.translate(centre, self._y(bottom))
        c.rotate(90)
        c.setFont(face, size)
        c.setFillColor(colors.black)
        ascent, descent = pdfmetrics.getAscentDescent(face, size)
        baseline = -(ascent + descent) / 2
        for align in alignments:
            if align == "left":
                c.drawString(margin, baseline, text)
            elif align == "centre":
                c.drawString((box_width - text_width) / 2, baseline, text)
            elif align == "right":
                c.drawString(box_width - margin - text_width, baseline, text)
        c.restoreState()

    def paragraph(self, markup: str, x: float, y: float, width: float, font: str, size: float) -> None:
        """Flow reportlab paragraph markup into ``width``; ``y`` is the first baseline."""
        face = self.font(font)
        style = ParagraphStyle(
            "field",
            fontName=face,
            fontSize=size,
            leading=size * 1.2,
            spaceAfter=size / 2,
        )
        para = Paragraph(markup, style)
        _, height = para.wrapOn(self.canvas, width, self.height)
        para.drawOn(self.canvas, x, self._y(y) + size - height)

    # Images

    def svg(self, path: str | Path, x: float, y: float, width: float, height: float, align: str = "xMaxYMax") -> None:
        """Draw an SVG file scaled to fit the box, keeping its aspect ratio."""
        path = Path(path)
        if not path.is_file():
            raise ResourceLoadError(str(path), "file not found")
        try:
            drawing = svg2rlg(str(path))
        except Exception as exc:
            raise ResourceLoadError(str(path), str(exc)) from exc
        if drawing is None or not drawing.width or not drawing.height:
            raise ResourceLoadError(str(path), "not a usable SVG drawing")

        scale = min(width / drawing.width, height / drawing.height)
        drawn_width = drawing.width * scale
        drawn_height = drawing.height * scale
        if align == "xMaxYMax":
            left = x + width - drawn_width
            top = y + height - drawn_height
        else:
            left = x + (width - drawn_width) / 2
            top = y + (height - drawn_height) / 2

        c = self.canvas
        c.saveState()
        c.translate(left, self._y(top + drawn_height))
        c.scale(scale, scale)
        renderPDF.draw(drawing, c, 0, 0)
        c.restoreState()

    def background(self, path: str | Path) -> None:
        self.svg(path, 0, 0, self.width, self.height, align="xMidYMid")
