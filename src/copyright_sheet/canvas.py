"""Drawing surface for copyright sheets.

The layout code only talks to the `DocumentCanvas` protocol, in
millimetres with the origin at the top-left corner of the page.
`ReportLabCanvas` is the production implementation.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from io import BytesIO
from pathlib import Path
from typing import List, NamedTuple, Protocol

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .config import LayoutOptions
from .errors import RenderError

logger = logging.getLogger(__name__)

REGULAR_FONT_NAME = "CopyrightSheet"
BOLD_FONT_NAME = "CopyrightSheet-Bold"

# Fraction of the font size between the top of a line and its baseline
BASELINE_RATIO = 0.8


class Font(NamedTuple):
    name: str
    size: float


class DocumentCanvas(Protocol):
    """What the layout needs from a page-description writer."""

    def new_page(self) -> None: ...

    def draw_rect(self, x: float, y: float, width: float, height: float) -> None: ...

    def write_text(self, x: float, y: float, text: str, font: Font) -> None: ...

    def write_lines(
        self, x: float, y: float, width: float, line_height: float, text: str, font: Font
    ) -> float: ...

    def draw_image(self, x: float, y: float, width: float, height: float, path: Path) -> None: ...

    def split_text(self, text: str, max_width: float, font: Font) -> List[str]: ...

    def wrap_text(self, text: str, max_width: float, font: Font) -> int: ...

    def string_width(self, text: str, font: Font) -> float: ...

    def serialize(self) -> bytes: ...


def prepare_fonts(options: LayoutOptions) -> LayoutOptions:
    """
    Register the configured TrueType fonts and return options that use them.

    Missing font files fall back to the standard Helvetica pair.
    """
    if options.font_path is None:
        return options

    regular = Path(options.font_path)
    if not regular.is_file():
        logger.warning("Font file %s not found; using %s", regular, options.font_family)
        return options

    pdfmetrics.registerFont(TTFont(REGULAR_FONT_NAME, str(regular)))
    bold_name = REGULAR_FONT_NAME
    if options.bold_font_path is not None and Path(options.bold_font_path).is_file():
        pdfmetrics.registerFont(TTFont(BOLD_FONT_NAME, str(options.bold_font_path)))
        bold_name = BOLD_FONT_NAME
    else:
        logger.warning("Bold font not found; using regular font for bold labels.")

    logger.info("Font loaded: %s", regular)
    return replace(options, font_family=REGULAR_FONT_NAME, bold_font_family=bold_name)


class ReportLabCanvas:
    """`DocumentCanvas` backed by an in-memory ReportLab canvas."""

    def __init__(self, options: LayoutOptions) -> None:
        self._options = options
        self._page_height = options.page_height * mm
        self._buffer = BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer,
            pagesize=(options.page_width * mm, self._page_height),
        )
        self._canvas.setTitle(options.title)
        self._canvas.setAuthor(options.author)
        self._canvas.setLineWidth(0.2)
        self._page_open = False
        self.page_count = 0

    def _to_pdf_y(self, y: float, height: float = 0.0) -> float:
        return self._page_height - (y + height) * mm

    def new_page(self) -> None:
        if self._page_open:
            self._canvas.showPage()
            self._canvas.setLineWidth(0.2)
        self._page_open = True
        self.page_count += 1

    def draw_rect(self, x: float, y: float, width: float, height: float) -> None:
        self._canvas.rect(
            x * mm,
            self._to_pdf_y(y, height),
            width * mm,
            height * mm,
            stroke=1,
            fill=0,
        )

    def write_text(self, x: float, y: float, text: str, font: Font) -> None:
        self._canvas.setFont(font.name, font.size)
        self._canvas.drawString(x * mm, self._to_pdf_y(y) - font.size * BASELINE_RATIO, text)

    def write_lines(
        self,
        x: float,
        y: float,
        width: float,
        line_height: float,
        text: str,
        font: Font,
    ) -> float:
        """Draw `text` wrapped to `width`; returns the height used."""
        lines = self.split_text(text, width, font)
        for index, line in enumerate(lines):
            self.write_text(x, y + index * line_height, line, font)
        return len(lines) * line_height

    def draw_image(self, x: float, y: float, width: float, height: float, path: Path) -> None:
        self._canvas.drawImage(
            str(path),
            x * mm,
            self._to_pdf_y(y, height),
            width=width * mm,
            height=height * mm,
            mask="auto",  # Respect transparent backgrounds (PNG with alpha)
        )

    def split_text(self, text: str, max_width: float, font: Font) -> List[str]:
        if not text:
            return []
        lines: List[str] = []
        # simpleSplit ignores explicit line breaks, honour them first
        for paragraph in text.splitlines():
            lines.extend(simpleSplit(paragraph, font.name, font.size, max_width * mm) or [""])
        return lines

    def wrap_text(self, text: str, max_width: float, font: Font) -> int:
        return len(self.split_text(text, max_width, font))

    def string_width(self, text: str, font: Font) -> float:
        return pdfmetrics.stringWidth(text, font.name, font.size) / mm

    def serialize(self) -> bytes:
        """Finish the last page and return the PDF bytes."""
        try:
            return self._canvas.getpdfdata()
        except Exception as e:
            raise RenderError(f"serializing PDF: {type(e).__name__}: {e}") from e
