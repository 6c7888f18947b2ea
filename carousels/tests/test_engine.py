"""
Carousels — Controller Tests

@file carousels/tests/test_engine.py
"""

import threading

import pytest

from carousels.engine import CarouselController

from .fakes import FakeDocument, ManualClock


@pytest.fixture
def document():
    doc = FakeDocument()
    doc.add('featured', 10)
    return doc


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def renders():
    return []


@pytest.fixture
def width():
    return {'value': 1200}


@pytest.fixture
def controller(document, clock, renders, width):
    engine = CarouselController(
        document,
        width_provider=lambda: width['value'],
        on_render=lambda *args: renders.append(args),
        timer_factory=clock,
    )
    engine.scan()
    return engine


class TestPositionModel:
    @pytest.mark.parametrize('steps', [0, 1, 6, 7, 8, 15, 20])
    def test_advances_cycle_through_max_position(self, controller, steps):
        for _ in range(steps):
            controller.advance('featured')
        assert controller.position('featured') == steps % 7

    def test_retreat_from_start_wraps_to_end(self, controller):
        controller.retreat('featured')
        assert controller.position('featured') == 6

    def test_offset_tracks_item_width_and_gap(self, controller, renders):
        controller.advance('featured')
        controller.advance('featured')
        assert renders[-1] == ('featured', 2, 432)
        assert controller.offset('featured') == 432

    def test_unknown_carousel_is_noop(self, controller, renders):
        count = len(renders)
        controller.advance('missing')
        controller.retreat('missing')
        assert controller.position('missing') is None
        assert len(renders) == count

    def test_carousel_without_items_is_noop(self, document, controller, renders):
        document.carousels['empty'] = []
        controller.scan()
        controller.advance('empty')
        assert controller.position('empty') == 0
        assert all(name != 'empty' for name, _, _ in renders)


class TestButtons:
    def test_click_right_and_left(self, controller):
        controller.click('featured-right')
        controller.click('featured-right')
        controller.click('featured-left')
        assert controller.position('featured') == 1

    def test_unknown_button_is_noop(self, controller):
        controller.click('nope')
        assert controller.position('featured') == 0

    def test_button_for_missing_carousel_is_noop(self, document, controller):
        document.buttons.append(('ghost-right', 'ghost', 'right'))
        controller.scan()
        controller.click('ghost-right')
        assert controller.position('ghost') is None


class TestGestures:
    def test_swipe_threshold(self, controller):
        controller.touch_start('featured-viewport', [(300, 50)])
        controller.touch_move('featured-viewport', [(261, 50)])
        controller.touch_end('featured-viewport')
        assert controller.position('featured') == 0

        controller.touch_start('featured-viewport', [(300, 50)])
        controller.touch_move('featured-viewport', [(259, 50)])
        controller.touch_end('featured-viewport')
        assert controller.position('featured') == 1

    def test_swipe_right_retreats(self, controller):
        controller.touch_start('featured-viewport', [(100, 50)])
        controller.touch_move('featured-viewport', [(200, 60)])
        controller.touch_end('featured-viewport')
        assert controller.position('featured') == 6

    def test_mouse_drag(self, controller):
        controller.mouse_down('featured-viewport', 500)
        assert controller.is_dragging('featured-viewport') is True
        controller.mouse_move(420)
        controller.mouse_up()
        assert controller.is_dragging('featured-viewport') is False
        assert controller.position('featured') == 1

    def test_short_drag_does_nothing(self, controller):
        controller.mouse_down('featured-viewport', 500)
        controller.mouse_move(461)
        controller.mouse_up()
        assert controller.position('featured') == 0

    def test_events_on_unbound_viewport_ignored(self, controller):
        controller.touch_start('other', [(0, 0)])
        controller.touch_end('other')
        controller.mouse_down('other', 0)
        controller.mouse_up()
        assert controller.position('featured') == 0


class TestScanning:
    def test_scan_is_idempotent(self, document, controller):
        controller.scan()
        controller.scan()
        assert controller.bound_carousels == {'featured'}
        assert controller.bound_buttons == {'featured-left', 'featured-right'}
        assert controller.bound_viewports == {'featured-viewport'}

    def test_rescan_keeps_position(self, controller):
        controller.advance('featured')
        controller.reinit()
        assert controller.position('featured') == 1

    def test_swipe_after_double_scan_moves_once(self, controller):
        controller.scan()
        controller.touch_start('featured-viewport', [(300, 0)])
        controller.touch_move('featured-viewport', [(200, 0)])
        controller.touch_end('featured-viewport')
        assert controller.position('featured') == 1

    def test_markup_insertion_is_debounced(self, document, controller, clock):
        document.add('audio', 6)
        calls_before = document.calls
        for _ in range(5):
            controller.notify_markup_inserted()
        assert 'audio' not in controller.bound_carousels

        clock.fire_all()
        assert document.calls == calls_before + 1
        assert 'audio' in controller.bound_carousels
        assert 'audio-right' in controller.bound_buttons

    def test_reinit_binds_immediately(self, document, controller, clock):
        document.add('video', 5)
        controller.notify_markup_inserted()
        controller.reinit()
        assert 'video' in controller.bound_carousels
        assert clock.live == []

    def test_viewport_without_carousel_bound_later(self, document, controller):
        document.viewport_list.append(('late-viewport', None))
        controller.scan()
        assert 'late-viewport' not in controller.bound_viewports
        document.viewport_list[-1] = ('late-viewport', 'featured')
        controller.scan()
        assert 'late-viewport' in controller.bound_viewports


class TestResize:
    def test_resize_reflows_once_per_burst(self, controller, clock, renders, width):
        for _ in range(3):
            controller.advance('featured')
        renders.clear()

        width['value'] = 700
        for _ in range(10):
            controller.handle_resize()
        assert renders == []

        clock.fire_all()
        assert renders == [('featured', 3, 648)]

    def test_shrinking_row_wraps_position(self, document, controller, clock):
        for _ in range(6):
            controller.advance('featured')
        document.carousels['featured'] = document.carousels['featured'][:8]
        controller.handle_resize()
        clock.fire_all()
        assert controller.position('featured') == 0


class TestTimerThreads:
    def test_advance_waits_for_reflow_running_on_another_thread(self, document, width):
        entered, release = threading.Event(), threading.Event()
        hold = {'next': False}

        def on_render(*args):
            if hold['next']:
                hold['next'] = False
                entered.set()
                release.wait(timeout=5)

        engine = CarouselController(document, lambda: width['value'], on_render)
        engine.scan()

        hold['next'] = True
        reflow = threading.Thread(target=engine.reflow)
        reflow.start()
        assert entered.wait(timeout=5)

        stepper = threading.Thread(target=engine.advance, args=('featured',))
        stepper.start()
        stepper.join(timeout=0.05)
        assert stepper.is_alive()
        assert engine.position('featured') == 0

        release.set()
        reflow.join(timeout=5)
        stepper.join(timeout=5)
        assert engine.position('featured') == 1
