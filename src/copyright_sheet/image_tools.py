"""Logo probing: format detection, SVG rasterizing and scaling."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

import fitz  # PyMuPDF - renders SVG documents to pixmaps
from reportlab.lib.utils import ImageReader

from .config import LayoutOptions
from .errors import AssetError
from .models import ContentBlock, LogoAsset

logger = logging.getLogger(__name__)

PNG_FORMAT = "png"
SVG_FORMAT = "svg"
JPEG_FORMAT = "jpg"
GIF_FORMAT = "gif"

_EXTENSION_FORMATS = {
    ".png": PNG_FORMAT,
    ".svg": SVG_FORMAT,
    ".jpg": JPEG_FORMAT,
    ".jpeg": JPEG_FORMAT,
    ".gif": GIF_FORMAT,
}

_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", PNG_FORMAT),
    (b"\xff\xd8\xff", JPEG_FORMAT),
    (b"GIF87a", GIF_FORMAT),
    (b"GIF89a", GIF_FORMAT),
)


def detect_format(image_path: Path) -> str:
    """
    Detect the image format from the file extension, or from its first bytes.

    Returns:
        One of "png", "jpg", "gif", "svg", or "" when unknown
    """
    known = _EXTENSION_FORMATS.get(image_path.suffix.lower())
    if known:
        return known

    try:
        with image_path.open("rb") as f:
            head = f.read(512)
    except OSError:
        return ""

    for signature, fmt in _SIGNATURES:
        if head.startswith(signature):
            return fmt
    text = head.lstrip().lower()
    if text.startswith(b"<svg") or (text.startswith(b"<?xml") and b"<svg" in text):
        return SVG_FORMAT
    return ""


def svg_to_png(svg_path: Path) -> Path:
    """
    Rasterize an SVG file to a PNG next to it.

    The SVG is rendered at its native view-box size (identity matrix),
    keeping the alpha channel.

    Args:
        svg_path: Path to the SVG file

    Returns:
        Path to the generated PNG file

    Raises:
        AssetError: If the SVG cannot be parsed or the PNG cannot be written
    """
    png_path = svg_path.with_suffix("." + PNG_FORMAT)
    try:
        doc = fitz.open(str(svg_path), filetype=SVG_FORMAT)
        try:
            pix = doc[0].get_pixmap(alpha=True)
            pix.save(str(png_path))
        finally:
            doc.close()
    except Exception as e:
        raise AssetError(f"rasterize SVG {svg_path}: {type(e).__name__}: {e}") from e
    return png_path


def get_image_dimensions(image_path: Path) -> Tuple[float, float]:
    """Return the natural (width, height) of a raster image in pixels."""
    try:
        width, height = ImageReader(str(image_path)).getSize()
    except Exception as e:
        raise AssetError(f"decode image {image_path}: {type(e).__name__}: {e}") from e
    if width <= 0 or height <= 0:
        raise AssetError(f"decode image {image_path}: empty image {width}x{height}")
    return float(width), float(height)


def scale_dimensions(
    width: float,
    height: float,
    max_width: float,
    max_height: float,
) -> Tuple[float, float]:
    """
    Fit (width, height) into (max_width, max_height) preserving aspect ratio.

    A single factor min(max_width / width, max_height / height) is applied
    to both sides, so small images are enlarged as well as large ones shrunk.
    """
    scale = min(max_width / width, max_height / height)
    return width * scale, height * scale


def resolve_logo(url: str, path: Path, options: LayoutOptions) -> LogoAsset:
    """
    Probe a downloaded logo and compute its placed size.

    SVG files are rasterized first; only the PNG is measured and drawn.

    Raises:
        AssetError: If the image cannot be rasterized or decoded
    """
    fmt = detect_format(path)
    if fmt == SVG_FORMAT:
        path = svg_to_png(path)
        fmt = PNG_FORMAT

    natural_width, natural_height = get_image_dimensions(path)
    width, height = scale_dimensions(
        natural_width,
        natural_height,
        options.image_max_width,
        options.image_max_height,
    )
    return LogoAsset(
        url=url,
        path=path,
        format=fmt,
        natural_width=natural_width,
        natural_height=natural_height,
        width=width,
        height=min(height, options.image_max_height),
    )


def resolve_logos(
    blocks: Iterable[ContentBlock],
    downloaded: Mapping[str, Path],
    options: LayoutOptions,
) -> Dict[str, LogoAsset]:
    """
    Build one LogoAsset per distinct downloaded logo URL.

    URLs that were not downloaded, or whose image cannot be decoded, are
    left out; the cards for those organizations render without a logo.
    """
    logos: Dict[str, LogoAsset] = {}
    failed: set[str] = set()

    for block in blocks:
        for org in block.organizations:
            url = org.logo_url
            if url in logos or url in failed:
                continue
            path: Optional[Path] = downloaded.get(url)
            if path is None:
                continue
            try:
                logos[url] = resolve_logo(url, path, options)
            except AssetError as e:
                logger.warning("Failed to prepare logo url=%s: %s", url, e)
                failed.add(url)

    return logos
