"""Card height estimation from wrapped text and scaled logos."""
from __future__ import annotations

import math
from typing import Dict, Mapping, Sequence

from .canvas import DocumentCanvas, Font
from .config import LayoutOptions
from .errors import LayoutError
from .models import ContentBlock, LogoAsset


def regular_font(options: LayoutOptions) -> Font:
    return Font(options.font_family, options.font_size)


def bold_font(options: LayoutOptions) -> Font:
    return Font(options.bold_font_family, options.font_size)


def body_font(options: LayoutOptions) -> Font:
    return Font(options.font_family, options.body_font_size)


def org_info_height(
    canvas: DocumentCanvas,
    name: str,
    options: LayoutOptions,
) -> float:
    """Height of the wrapped organization name, one half cell per line."""
    lines = canvas.wrap_text(name, options.org_name_width, regular_font(options))
    return max(lines, 1) * options.org_line_height


def copyright_body_height(
    canvas: DocumentCanvas,
    text: str,
    options: LayoutOptions,
) -> float:
    lines = canvas.wrap_text(text, options.body_width, body_font(options))
    return lines * options.body_line_height


def estimate_block_height(
    canvas: DocumentCanvas,
    block: ContentBlock,
    logos: Mapping[str, LogoAsset],
    options: LayoutOptions,
) -> float:
    """
    Vertical space a card needs, in mm.

    header + per organization (logo + name lines + date line + spacing)
    + wrapped copyright body. Text is measured with the fonts the layout
    draws with.

    Raises:
        LayoutError: If the result is negative or not finite
    """
    height = options.header_height
    for org in block.organizations:
        logo = logos.get(org.logo_url)
        if logo is not None:
            height += logo.height
        height += org_info_height(canvas, org.name, options)
        height += options.org_line_height  # copyright date
        height += options.org_spacing
    height += copyright_body_height(canvas, block.copyright, options)

    if not math.isfinite(height) or height < 0:
        raise LayoutError(f"invalid height {height!r} for {block.product_code!r}")
    return height


def estimate_heights(
    canvas: DocumentCanvas,
    blocks: Sequence[ContentBlock],
    logos: Mapping[str, LogoAsset],
    options: LayoutOptions,
) -> Dict[str, float]:
    """
    Estimate every block's height, keyed by product code in block order.

    Raises:
        LayoutError: If two blocks share a product code
    """
    heights: Dict[str, float] = {}
    for block in blocks:
        if block.product_code in heights:
            raise LayoutError(f"duplicate product code {block.product_code!r}")
        heights[block.product_code] = estimate_block_height(canvas, block, logos, options)
    return heights
