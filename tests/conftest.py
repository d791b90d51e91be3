"""
pytest configuration and shared fixtures.

Usage:
    def test_something(options, recording_canvas):
        assert options.card_width == 99.25
"""

from __future__ import annotations

import asyncio
import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import fitz
import pytest

from copyright_sheet.canvas import Font
from copyright_sheet.config import FetchSettings, LayoutOptions, configuration
from copyright_sheet.errors import RenderError, TransportError
from copyright_sheet.models import ContentBlock, Organization


# ============================================================================
# Configuration fixtures
# ============================================================================

@pytest.fixture
def options() -> LayoutOptions:
    """A4, 4-slot grid."""
    return configuration()


@pytest.fixture
def fetch_settings(tmp_path: Path) -> FetchSettings:
    return FetchSettings(scratch_dir=tmp_path / "scratch", timeout=2.0)


# ============================================================================
# Image fixtures
# ============================================================================

def png_bytes(width: int, height: int) -> bytes:
    """Encode a plain white PNG of the given pixel size."""
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(255)
    return pix.tobytes("png")


def svg_bytes(width: int, height: int) -> bytes:
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<rect x="0" y="0" width="{width}" height="{height}" fill="#336699"/>'
        f"</svg>"
    ).encode("utf-8")


@pytest.fixture
def png_file(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    path.write_bytes(png_bytes(120, 60))
    return path


@pytest.fixture
def svg_file(tmp_path: Path) -> Path:
    path = tmp_path / "logo.svg"
    path.write_bytes(svg_bytes(200, 100))
    return path


# ============================================================================
# Content fixtures
# ============================================================================

def make_block(code: str, *orgs: Organization, text: str = "All rights reserved.", date: str = "2001") -> ContentBlock:
    return ContentBlock(product_code=code, copyright=text, copyright_date=date, organizations=tuple(orgs))


@pytest.fixture
def bible_society() -> Organization:
    return Organization(organization_id=1, name="Bible Society", logo_url="https://cdn.example.org/logos/bs.png")


@pytest.fixture
def hosanna() -> Organization:
    return Organization(organization_id=2, name="Hosanna", logo_url="https://cdn.example.org/logos/hosanna.svg")


@pytest.fixture
def sample_blocks(bible_society: Organization, hosanna: Organization) -> List[ContentBlock]:
    return [
        make_block("N2ENG/NIV", bible_society, hosanna),
        make_block("P1PUI/LAN", hosanna),
        make_block("N2SWA/HNV", bible_society, text="Text " * 80),
    ]


# ============================================================================
# Fakes
# ============================================================================

class FakeTransport:
    """Serves canned bytes (or raises canned errors) and counts requests."""

    def __init__(self, responses: Optional[Dict[str, Union[bytes, Exception]]] = None, delay: float = 0.0):
        self.responses = responses or {}
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get(self, url: str) -> bytes:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            response = self.responses.get(url)
            if response is None:
                raise TransportError("image download returned non-OK status: 404")
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1


# Width of one character in mm per point of font size
CHAR_WIDTH = 0.2


class RecordingCanvas:
    """DocumentCanvas that records operations and measures text by character count."""

    def __init__(self, options: Optional[LayoutOptions] = None, output: bytes = b"%PDF-1.4 recorded"):
        self.options = options
        self.output = output
        self.ops: List[Tuple] = []
        self.wraps: List[Tuple[str, float, Font]] = []
        self.pages = 0

    def new_page(self) -> None:
        self.pages += 1
        self.ops.append(("page", self.pages))

    def draw_rect(self, x, y, width, height) -> None:
        self.ops.append(("rect", x, y, width, height))

    def write_text(self, x, y, text, font) -> None:
        self.ops.append(("text", x, y, text, font))

    def write_lines(self, x, y, width, line_height, text, font) -> float:
        lines = self.split_text(text, width, font)
        self.ops.append(("lines", x, y, width, line_height, text, font))
        return len(lines) * line_height

    def draw_image(self, x, y, width, height, path) -> None:
        self.ops.append(("image", x, y, width, height, path))

    def split_text(self, text, max_width, font) -> List[str]:
        if not text:
            return []
        per_line = max(1, int(max_width // (font.size * CHAR_WIDTH)))
        return [text[i : i + per_line] for i in range(0, len(text), per_line)]

    def wrap_text(self, text, max_width, font) -> int:
        self.wraps.append((text, max_width, font))
        if not text:
            return 0
        return math.ceil(len(text) * font.size * CHAR_WIDTH / max_width)

    def string_width(self, text, font) -> float:
        return len(text) * font.size * CHAR_WIDTH

    def serialize(self) -> bytes:
        return self.output

    def of_kind(self, kind: str) -> List[Tuple]:
        return [op for op in self.ops if op[0] == kind]


class FailingCanvas(RecordingCanvas):
    def serialize(self) -> bytes:
        raise RenderError("serializing PDF: disk on fire")


@pytest.fixture
def recording_canvas(options: LayoutOptions) -> RecordingCanvas:
    return RecordingCanvas(options)
