"""
Carousels — headless carousel engine.

Position model, responsive layout rules, swipe / drag recognition and
debounced reflows for the app's horizontally scrolling content rows.
Framework-free: the view layer feeds it measurements and events and
receives (name, position, offset) render callbacks.
"""

from .engine import CarouselController, CarouselDocument, CarouselState
from .layout import ItemBox, should_show_arrows, visible_count_for_width

__all__ = [
    'CarouselController',
    'CarouselDocument',
    'CarouselState',
    'ItemBox',
    'should_show_arrows',
    'visible_count_for_width',
]
