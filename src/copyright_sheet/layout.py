"""Placement of paired cards onto pages.

Pages hold two columns of cards. Each pairing fills one column slot: its
first card on top, the second directly beneath it. A new page starts
whenever the slot counter reaches a multiple of the grid size.
"""
from __future__ import annotations

from typing import Mapping, Optional, Sequence

from .canvas import DocumentCanvas
from .config import LayoutOptions
from .errors import LayoutError
from .heights import body_font, bold_font, org_info_height, regular_font
from .models import ContentBlock, LogoAsset, Organization, Pairing

ORG_NAME_LABEL = "Org. Name: "
DATE_LABEL = "Copyright Date: "

# Label column widths as a fraction of the card width
ORG_NAME_LABEL_FRACTION = 0.19
DATE_LABEL_FRACTION = 0.25

# Space taken by the centered title at the top of a card
TITLE_BAND = 4.0

# Cards stacked in one pairing
CARDS_PER_PAIR = 2


def place_org_info(
    canvas: DocumentCanvas,
    block: ContentBlock,
    org: Organization,
    logo: Optional[LogoAsset],
    x: float,
    y: float,
    options: LayoutOptions,
) -> float:
    """
    Draw one organization's logo, name and copyright date.

    Returns:
        The height used, matching what the height estimate counted
    """
    current_y = y
    left = x + options.card_padding

    if logo is not None and logo.has_valid_path:
        canvas.draw_image(left, current_y, logo.width, logo.height, logo.path)
        current_y += logo.height

    name_height = org_info_height(canvas, org.name, options)
    date_y = current_y + name_height

    # Labels
    canvas.write_text(left, current_y, ORG_NAME_LABEL, bold_font(options))
    canvas.write_text(left, date_y, DATE_LABEL, bold_font(options))

    # Values
    canvas.write_lines(
        left + options.card_width * ORG_NAME_LABEL_FRACTION,
        current_y,
        options.org_name_width,
        options.org_line_height,
        org.name,
        regular_font(options),
    )
    canvas.write_text(
        left + options.card_width * DATE_LABEL_FRACTION,
        date_y,
        block.copyright_date,
        regular_font(options),
    )

    current_y = date_y + options.org_line_height + options.org_spacing
    return current_y - y


def place_card(
    canvas: DocumentCanvas,
    block: ContentBlock,
    logos: Mapping[str, LogoAsset],
    x: float,
    y: float,
    height: float,
    options: LayoutOptions,
) -> None:
    """Draw the outline, title, organizations and copyright text of one card."""
    canvas.draw_rect(x, y, options.card_width, height)

    font = regular_font(options)
    title_x = x + options.card_width / 2 - canvas.string_width(block.product_code, font) / 2
    canvas.write_text(title_x, y + options.card_padding, block.product_code, font)
    current_y = y + TITLE_BAND

    for org in block.organizations:
        current_y += place_org_info(
            canvas, block, org, logos.get(org.logo_url), x, current_y, options
        )

    canvas.write_lines(
        x + options.card_padding,
        current_y,
        options.body_width,
        options.body_line_height,
        block.copyright,
        body_font(options),
    )


def _height_of(heights: Mapping[str, float], code: str) -> float:
    try:
        return heights[code]
    except KeyError:
        raise LayoutError(f"no height estimated for {code!r}") from None


def place_pairs(
    canvas: DocumentCanvas,
    pairs: Sequence[Pairing],
    blocks: Sequence[ContentBlock],
    heights: Mapping[str, float],
    logos: Mapping[str, LogoAsset],
    options: LayoutOptions,
) -> int:
    """
    Lay out all pairings in order, starting new pages as the grid fills.

    The first card of a pairing is stretched to the nominal card height
    when it is shorter. The second card gets whatever is left of two
    nominal card heights, or its own height if that is larger. Cards
    taller than their slot overflow it.

    Returns:
        Number of pages started
    """
    by_code = {block.product_code: block for block in blocks}
    gutter = options.gutter
    columns = options.card_columns

    pages = 0
    y = gutter
    row_bottom = gutter

    for index, pair in enumerate(pairs):
        column = index % columns
        if (index * CARDS_PER_PAIR) % options.grid_size == 0:
            canvas.new_page()
            pages += 1
            y = row_bottom = gutter
        elif column == 0:
            y = row_bottom + gutter
            row_bottom = y

        x = gutter + column * (options.card_width + gutter)

        first = by_code.get(pair.first)
        if first is None:
            raise LayoutError(f"pairing references unknown product code {pair.first!r}")
        first_height = max(_height_of(heights, pair.first), options.card_height)
        place_card(canvas, first, logos, x, y, first_height, options)
        bottom = y + first_height

        if not pair.is_single:
            second = by_code.get(pair.second)
            if second is None:
                raise LayoutError(f"pairing references unknown product code {pair.second!r}")
            remaining = options.card_height * CARDS_PER_PAIR - first_height
            second_height = max(remaining, _height_of(heights, pair.second))
            second_y = bottom + gutter
            place_card(canvas, second, logos, x, second_y, second_height, options)
            bottom = second_y + second_height

        row_bottom = max(row_bottom, bottom)

    return pages
