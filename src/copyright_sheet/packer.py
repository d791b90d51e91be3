"""Greedy pairing of cards into page columns."""
from __future__ import annotations

from typing import List, Mapping, Set

from .config import LayoutOptions
from .models import Pairing


def page_capacity(options: LayoutOptions) -> float:
    """Room for two stacked cards: page height minus the margin counted four times."""
    return options.pair_capacity


def find_pairs(heights: Mapping[str, float], capacity: float) -> List[Pairing]:
    """
    Pair product codes so each pair's combined height fits `capacity`.

    Greedy descending first-fit: codes are sorted by height (tallest
    first, ties keep the mapping's order), and each unused code takes the
    first other unused code in that order that fits beside it.
    Codes without a partner are appended at the end as single pairings,
    in the order they were given up on. This is not optimal packing; a
    code taller than `capacity` always ends up alone.

    Args:
        heights: Product code -> estimated card height
        capacity: Maximum combined height of a pair

    Returns:
        Pairings covering every code exactly once
    """
    # sorted() is stable, so equal heights keep insertion order
    ordered = sorted(heights.items(), key=lambda item: -item[1])

    pairs: List[Pairing] = []
    unpaired: List[str] = []
    used: Set[str] = set()

    for code_i, height_i in ordered:
        if code_i in used:
            continue

        partner = None
        for code_j, height_j in ordered:
            if code_j != code_i and code_j not in used and height_i + height_j <= capacity:
                partner = code_j
                break

        if partner is None:
            unpaired.append(code_i)
            used.add(code_i)
            continue

        pairs.append(Pairing(code_i, partner))
        used.add(code_i)
        used.add(partner)

    pairs.extend(Pairing(code) for code in unpaired)
    return pairs
