"""
Carousels — Controller

Owns the state of every carousel on a page, keyed by carousel name,
plus registries of the carousels, navigation buttons and viewports it
has already bound. Scanning is therefore idempotent: the view layer can
call ``reinit()`` or ``notify_markup_inserted()`` as often as it likes
and nothing is bound twice.

The view layer supplies a ``CarouselDocument`` describing the rendered
markup, a width provider returning the current viewport width, and an
``on_render(name, position, offset)`` callback that applies the
translation. Missing structure (unknown carousel, no items) is a silent
no-op.

@file carousels/engine.py
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol, Sequence

from .debounce import Debouncer
from .gestures import NEXT, DragTracker, SwipeTracker
from .layout import ItemBox, offset_for, visible_count_for_width, wrap_position

logger = logging.getLogger('beinghappy')

RESIZE_DEBOUNCE_SECONDS = 0.100
RESCAN_DEBOUNCE_SECONDS = 0.120

DIRECTION_RIGHT = 'right'
DIRECTION_LEFT = 'left'


class CarouselDocument(Protocol):
    """What the engine needs to know about the rendered markup."""

    def carousel_names(self) -> Iterable[str]: ...

    def nav_buttons(self) -> Iterable[tuple[str, str, str]]:
        """(button_id, carousel_name, 'left' | 'right') per navigation button."""

    def viewports(self) -> Iterable[tuple[str, str | None]]:
        """(viewport_id, carousel_name or None) per swipeable viewport."""

    def item_boxes(self, name: str) -> Sequence[ItemBox]: ...


@dataclass
class CarouselState:
    position: int = 0
    offset: int = 0


@dataclass
class _ViewportBinding:
    carousel: str
    swipe: SwipeTracker = field(default_factory=SwipeTracker)
    drag: DragTracker = field(default_factory=DragTracker)


class CarouselController:

    def __init__(
        self,
        document: CarouselDocument,
        width_provider: Callable[[], float],
        on_render: Callable[[str, int, int], None] | None = None,
        timer_factory=None,
    ):
        self.document = document
        self.width_provider = width_provider
        self.on_render = on_render
        self._states: dict[str, CarouselState] = {}
        self._buttons: dict[str, tuple[str, str]] = {}
        self._viewports: dict[str, _ViewportBinding] = {}
        # Debounced scans and reflows fire on timer threads.
        self._lock = threading.RLock()
        self._debounced_reflow = Debouncer(self.reflow, RESIZE_DEBOUNCE_SECONDS, timer_factory)
        self._debounced_rescan = Debouncer(self.scan, RESCAN_DEBOUNCE_SECONDS, timer_factory)

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @property
    def bound_carousels(self) -> frozenset[str]:
        return frozenset(self._states)

    @property
    def bound_buttons(self) -> frozenset[str]:
        return frozenset(self._buttons)

    @property
    def bound_viewports(self) -> frozenset[str]:
        return frozenset(self._viewports)

    def scan(self) -> None:
        """Bind anything new in the document and reflow every carousel."""
        with self._lock:
            for name in self.document.carousel_names():
                state = self._states.setdefault(name, CarouselState())
                self._render(name, state.position)

            for button_id, name, direction in self.document.nav_buttons():
                if button_id not in self._buttons:
                    self._buttons[button_id] = (name, direction)

            for viewport_id, name in self.document.viewports():
                if viewport_id not in self._viewports and name:
                    self._viewports[viewport_id] = _ViewportBinding(carousel=name)

        logger.debug(
            'Carousel scan: %d carousels, %d buttons, %d viewports bound.',
            len(self._states), len(self._buttons), len(self._viewports),
        )

    def reinit(self) -> None:
        """Full re-scan right now, for callers that just replaced carousel markup."""
        self._debounced_rescan.cancel()
        self.scan()

    def notify_markup_inserted(self) -> None:
        self._debounced_rescan()

    def handle_resize(self) -> None:
        self._debounced_reflow()

    def reflow(self) -> None:
        with self._lock:
            for name, state in list(self._states.items()):
                self._render(name, state.position)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def position(self, name: str) -> int | None:
        state = self._states.get(name)
        return state.position if state else None

    def offset(self, name: str) -> int | None:
        state = self._states.get(name)
        return state.offset if state else None

    def advance(self, name: str) -> None:
        self._step(name, 1)

    def retreat(self, name: str) -> None:
        self._step(name, -1)

    def click(self, button_id: str) -> None:
        binding = self._buttons.get(button_id)
        if binding is None:
            return
        name, direction = binding
        if direction == DIRECTION_RIGHT:
            self.advance(name)
        else:
            self.retreat(name)

    def _step(self, name: str, delta: int) -> None:
        with self._lock:
            state = self._states.get(name)
            if state is not None:
                self._render(name, state.position + delta)

    def _render(self, name: str, position: int) -> None:
        boxes = list(self.document.item_boxes(name) or ())
        if not boxes:
            return
        visible = visible_count_for_width(self.width_provider())
        state = self._states[name]
        state.position = wrap_position(position, len(boxes), visible)
        state.offset = offset_for(state.position, boxes)
        if self.on_render is not None:
            self.on_render(name, state.position, state.offset)

    def _navigate(self, name: str, direction: str | None) -> None:
        if direction is None:
            return
        if direction == NEXT:
            self.advance(name)
        else:
            self.retreat(name)

    # ------------------------------------------------------------------
    # Touch and mouse input
    # ------------------------------------------------------------------

    def touch_start(self, viewport_id: str, touches) -> None:
        with self._lock:
            binding = self._viewports.get(viewport_id)
            if binding is not None:
                binding.swipe.start(touches)

    def touch_move(self, viewport_id: str, touches) -> None:
        with self._lock:
            binding = self._viewports.get(viewport_id)
            if binding is not None:
                binding.swipe.move(touches)

    def touch_end(self, viewport_id: str) -> None:
        with self._lock:
            binding = self._viewports.get(viewport_id)
            if binding is not None:
                self._navigate(binding.carousel, binding.swipe.end())

    def mouse_down(self, viewport_id: str, x, button: int = 0) -> None:
        with self._lock:
            binding = self._viewports.get(viewport_id)
            if binding is not None:
                binding.drag.down(x, button)

    def mouse_move(self, x) -> None:
        """Pointer moves are page-wide; only viewports mid-drag track them."""
        with self._lock:
            for binding in self._viewports.values():
                binding.drag.move(x)

    def mouse_up(self) -> None:
        with self._lock:
            for binding in list(self._viewports.values()):
                if binding.drag.dragging:
                    self._navigate(binding.carousel, binding.drag.up())

    def is_dragging(self, viewport_id: str) -> bool:
        binding = self._viewports.get(viewport_id)
        return bool(binding and binding.drag.dragging)
