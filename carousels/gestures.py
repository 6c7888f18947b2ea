"""
Carousels — Gesture Recognition

Touch swipes and mouse drags reduced to 'next' / 'prev' decisions. A
gesture navigates only once its horizontal travel exceeds
SWIPE_THRESHOLD; shorter gestures are dropped and tracking resets.

@file carousels/gestures.py
"""

SWIPE_THRESHOLD = 40
PRIMARY_BUTTON = 0

NEXT = 'next'
PREV = 'prev'


def _direction(dx) -> str:
    # Dragging left reveals the next items.
    return NEXT if dx < 0 else PREV


class SwipeTracker:
    """Single-finger horizontal swipe on a viewport."""

    def __init__(self, threshold=SWIPE_THRESHOLD):
        self.threshold = threshold
        self.touching = False
        self._start = (0, 0)
        self.dx = 0
        self.dy = 0

    def start(self, touches) -> None:
        if not touches or len(touches) > 1:
            return
        self._start = touches[0]
        self.dx = self.dy = 0
        self.touching = True

    def move(self, touches) -> None:
        if not self.touching or not touches or len(touches) > 1:
            return
        x, y = touches[0]
        self.dx = x - self._start[0]
        self.dy = y - self._start[1]

    def end(self) -> str | None:
        if not self.touching:
            return None
        self.touching = False
        result = None
        if abs(self.dx) > abs(self.dy) and abs(self.dx) > self.threshold:
            result = _direction(self.dx)
        self.dx = self.dy = 0
        return result


class DragTracker:
    """Primary-button mouse drag. ``dragging`` is set while the button is held."""

    def __init__(self, threshold=SWIPE_THRESHOLD):
        self.threshold = threshold
        self.dragging = False
        self._start_x = 0
        self.dx = 0

    def down(self, x, button=PRIMARY_BUTTON) -> None:
        if button != PRIMARY_BUTTON:
            return
        self.dragging = True
        self._start_x = x
        self.dx = 0

    def move(self, x) -> None:
        if self.dragging:
            self.dx = x - self._start_x

    def up(self) -> str | None:
        if not self.dragging:
            return None
        self.dragging = False
        result = _direction(self.dx) if abs(self.dx) > self.threshold else None
        self.dx = 0
        return result
