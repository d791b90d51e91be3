"""Layout and fetch configuration."""
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from .errors import LayoutError

MODE_AUDIO = "audio"
MODE_VIDEO = "video"
MODE_TEXT = "text"
MODES = (MODE_AUDIO, MODE_VIDEO, MODE_TEXT)

# Card slots per page; every pairing takes two (one column, two rows).
GRID_AUDIO = 4
GRID_VIDEO = 8

# Cards are always laid out in two columns
CARD_COLUMNS = 2

TYPE_CODES: Dict[str, Tuple[str, ...]] = {
    MODE_AUDIO: ("audio_drama", "audio"),
    MODE_VIDEO: ("video_stream",),
    MODE_TEXT: ("text_plain", "text_html", "text_json", "text_format"),
}

# Page sizes in millimetres (width, height)
PAGE_SIZES: Dict[str, Tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "Letter": (215.9, 279.4),
}

MAX_CONCURRENT_DOWNLOADS = 8
DEFAULT_FETCH_TIMEOUT = 10.0
SCRATCH_FOLDER = "copyright"


@dataclass(frozen=True)
class LayoutOptions:
    """Page geometry and font metrics for one document (all lengths in mm)."""

    page_size: str = "A4"
    page_width: float = 210.0
    page_height: float = 297.0
    page_margin: float = 8.0  # combined top and bottom margins

    grid_size: int = GRID_AUDIO
    card_columns: int = CARD_COLUMNS
    card_width: float = 99.25
    card_height: float = 140.5
    card_padding: float = 1.0

    image_max_width: float = 70.0
    image_max_height: float = 20.0
    cell_height: float = 10.0

    header_height: float = 6.0
    org_spacing: float = 2.0

    font_family: str = "Helvetica"
    bold_font_family: str = "Helvetica-Bold"
    font_size: float = 8.0
    font_path: Optional[Path] = None
    bold_font_path: Optional[Path] = None

    title: str = "Copyright"
    author: str = "Copyright Sheet Generator"

    @property
    def gutter(self) -> float:
        """Space between cards and around the grid."""
        return self.page_margin / self.card_columns

    @property
    def pair_capacity(self) -> float:
        """Maximum combined height of two cards stacked in one column."""
        return self.page_height - self.page_margin * 4

    @property
    def body_font_size(self) -> float:
        return self.font_size * 0.9

    @property
    def body_line_height(self) -> float:
        return self.cell_height * 0.4

    @property
    def org_line_height(self) -> float:
        return self.cell_height * 0.5

    @property
    def org_name_width(self) -> float:
        return self.card_width * 0.81 - self.card_padding

    @property
    def body_width(self) -> float:
        return self.card_width - self.card_padding * 2


def configuration(
    page_size: str = "A4",
    grid_size: int = GRID_AUDIO,
    **overrides,
) -> LayoutOptions:
    """
    Build the layout options for a page size and grid size.

    The nominal card height splits the page into `grid_size / 2` card rows
    per column, minus the page margin.

    Args:
        page_size: "A4" or "Letter"
        grid_size: Card slots per page (4 for audio, 8 for video/text)
        **overrides: Any other LayoutOptions field

    Raises:
        LayoutError: If the page size or grid size is not supported
    """
    if page_size not in PAGE_SIZES:
        raise LayoutError(f"unsupported page size {page_size!r}")
    if grid_size <= 0 or grid_size % CARD_COLUMNS:
        raise LayoutError(f"grid size must be a positive multiple of {CARD_COLUMNS}, got {grid_size}")

    page_width, page_height = PAGE_SIZES[page_size]
    page_margin = overrides.pop("page_margin", 8.0)
    card_height = overrides.pop("card_height", page_height / (grid_size * 0.5) - page_margin)

    return LayoutOptions(
        page_size=page_size,
        page_width=page_width,
        page_height=page_height,
        page_margin=page_margin,
        grid_size=grid_size,
        card_height=card_height,
        **overrides,
    )


def grid_size_for(mode: str) -> int:
    """Audio packages use the 4-slot grid, everything else the 8-slot grid."""
    return GRID_AUDIO if mode == MODE_AUDIO else GRID_VIDEO


def type_codes_for(mode: str) -> Tuple[str, ...]:
    return TYPE_CODES.get(mode, ())


def options_for_mode(mode: str, page_size: str = "A4") -> LayoutOptions:
    return configuration(page_size=page_size, grid_size=grid_size_for(mode))


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class FetchSettings:
    """Limits and locations for logo downloads."""

    max_concurrent_downloads: int = MAX_CONCURRENT_DOWNLOADS
    timeout: float = DEFAULT_FETCH_TIMEOUT
    scratch_dir: Path = field(
        default_factory=lambda: Path(tempfile.gettempdir()) / SCRATCH_FOLDER
    )

    @classmethod
    def from_env(cls) -> "FetchSettings":
        scratch = os.getenv("COPYRIGHT_SCRATCH_DIR", "").strip()
        return cls(
            timeout=_env_float("COPYRIGHT_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
            scratch_dir=Path(scratch) if scratch else Path(tempfile.gettempdir()) / SCRATCH_FOLDER,
        )
