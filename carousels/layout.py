"""
Carousels — Layout Rules

Responsive visible-item counts, the wrapping position range and the
pixel offset for a given position.

@file carousels/layout.py
"""

from dataclasses import dataclass
from typing import Sequence

MOBILE_MAX_WIDTH = 600
TABLET_MAX_WIDTH = 900

VISIBLE_COUNTS = {
    'mobile': 2,
    'tablet': 3,
    'desktop': 4,
}


@dataclass(frozen=True)
class ItemBox:
    """Rendered geometry of one carousel item, in CSS pixels."""

    left: float
    width: float
    margin_right: float = 0.0


def viewport_category(width) -> str:
    if width <= MOBILE_MAX_WIDTH:
        return 'mobile'
    if width <= TABLET_MAX_WIDTH:
        return 'tablet'
    return 'desktop'


def visible_count_for_width(width) -> int:
    """4 items above 900px, 3 above 600px, otherwise 2."""
    return VISIBLE_COUNTS[viewport_category(width)]


def should_show_arrows(item_count: int, width) -> bool:
    return item_count > visible_count_for_width(width)


def max_position(item_count: int, visible_count: int) -> int:
    return max(0, item_count - visible_count)


def wrap_position(position: int, item_count: int, visible_count: int) -> int:
    """Past the end wraps to 0, before the start wraps to the last position."""
    last = max_position(item_count, visible_count)
    if position < 0:
        return last
    if position > last:
        return 0
    return position


def measure_item_and_gap(boxes: Sequence[ItemBox]) -> tuple[int, int]:
    """
    Item width and inter-item gap measured from the first two items.

    The gap is the first item's right margin; when that is zero it is
    derived from the distance between the first two boxes. Anything
    that cannot be measured counts as 0.
    """
    if not boxes:
        return 0, 0
    first = boxes[0]
    item_width = round(first.width)
    gap = first.margin_right or 0
    if not gap and len(boxes) > 1:
        gap = round(boxes[1].left - first.left - first.width)
    return max(0, item_width), max(0, gap)


def offset_for(position: int, boxes: Sequence[ItemBox]) -> int:
    item_width, gap = measure_item_and_gap(boxes)
    return round(position * (item_width + gap))
