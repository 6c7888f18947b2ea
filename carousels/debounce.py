"""
Carousels — Debouncing

Trailing-edge debounce: a burst of calls collapses into one call made
``wait`` seconds after the last of them, with the last call's arguments.

@file carousels/debounce.py
"""

import threading


class Debouncer:
    """
    Wrap ``fn`` so bursts of calls run it once.

    ``timer_factory(interval, callback)`` must return an object with
    ``start()`` and ``cancel()``; it defaults to ``threading.Timer``.
    Tests inject a manual timer to fire callbacks deterministically.
    """

    def __init__(self, fn, wait, timer_factory=None):
        self._fn = fn
        self.wait = wait
        self._timer_factory = timer_factory or threading.Timer
        self._lock = threading.Lock()
        self._timer = None
        self._pending = None

    def __call__(self, *args, **kwargs):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = self._timer_factory(self.wait, self._fire)
            if hasattr(self._timer, 'daemon'):
                self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def _fire(self):
        with self._lock:
            call, self._pending = self._pending, None
            self._timer = None
        if call is None:
            return
        args, kwargs = call
        self._fn(*args, **kwargs)

    def flush(self):
        """Run a pending call now instead of waiting for the timer."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self._fire()

    def cancel(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
