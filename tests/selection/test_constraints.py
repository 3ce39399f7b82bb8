"""Tests for the constrained-resize algorithm."""

import itertools

import pytest

from iCrop.config import RATIO_EPSILON
from iCrop.core.geometry import Point, Rect, Viewport
from iCrop.selection.constraints import Direction, constrain_selection

VIEWPORT = Viewport(800, 600)


def _assert_inside(rect: Rect, viewport: Viewport = VIEWPORT) -> None:
    assert rect.left >= 0
    assert rect.top >= 0
    assert rect.right <= viewport.width + 1e-9
    assert rect.bottom <= viewport.height + 1e-9


def test_small_drag_is_extended_to_minimum():
    rect = constrain_selection(Point(10, 10), Point(20, 15), VIEWPORT, min_width=50, min_height=50)
    assert rect == Rect(10, 10, 50, 50)


def test_minimum_extends_towards_drag_direction():
    """Dragging up-left grows the box on the near edge."""
    rect = constrain_selection(Point(100, 100), Point(90, 95), VIEWPORT, min_width=50, min_height=50)
    assert rect == Rect(50, 50, 50, 50)


def test_ratio_grows_width_from_left_anchor():
    rect = constrain_selection(Point(0, 0), Point(100, 100), VIEWPORT, ratio=2)
    assert rect == Rect(0, 0, 200, 100)


def test_ratio_grows_height_upwards_when_dragging_up():
    rect = constrain_selection(Point(300, 300), Point(400, 280), VIEWPORT, ratio=1)
    assert rect.left == pytest.approx(300)
    assert rect.bottom == pytest.approx(300)
    assert rect.width == pytest.approx(100)
    assert rect.height == pytest.approx(100)


def test_ratio_grows_width_leftwards_when_dragging_left():
    rect = constrain_selection(Point(400, 100), Point(350, 200), VIEWPORT, ratio=2)
    assert rect.right == pytest.approx(400)
    assert rect.width == pytest.approx(200)
    assert rect.height == pytest.approx(100)


def test_pointer_outside_viewport_is_clamped():
    rect = constrain_selection(Point(700, 500), Point(1000, 900), VIEWPORT)
    assert rect == Rect(700, 500, 100, 100)


def test_minimum_near_edge_translates_instead_of_truncating():
    rect = constrain_selection(Point(790, 590), Point(795, 595), VIEWPORT, min_width=50, min_height=50)
    assert rect == Rect(750, 550, 50, 50)


def test_minimum_larger_than_viewport_is_capped():
    rect = constrain_selection(Point(0, 0), Point(5, 5), Viewport(40, 30), min_width=50, min_height=50)
    assert rect == Rect(0, 0, 40, 30)


def test_ratio_overflow_rescales_other_dimension():
    """Growing the width past the right edge shrinks both dimensions."""
    rect = constrain_selection(Point(700, 0), Point(750, 200), VIEWPORT, ratio=1)
    _assert_inside(rect)
    assert rect.width / rect.height == pytest.approx(1)
    assert rect.left == pytest.approx(700)
    assert rect.top == pytest.approx(0)
    assert rect.width == pytest.approx(100)


def test_ratio_overflow_keeps_bottom_anchor_when_dragging_up():
    rect = constrain_selection(Point(0, 600), Point(100, 300), VIEWPORT, ratio=4)
    _assert_inside(rect)
    assert rect.width / rect.height == pytest.approx(4)
    assert rect.bottom == pytest.approx(600)


def test_ratio_translates_when_shrinking_breaks_minimum():
    rect = constrain_selection(
        Point(790, 100), Point(795, 110), VIEWPORT, min_width=50, min_height=50, ratio=2
    )
    _assert_inside(rect)
    assert rect.width == pytest.approx(100)
    assert rect.height == pytest.approx(50)


def test_latched_direction_overrides_drag_flags():
    anchor, live = Point(100, 100), Point(200, 150)
    free = constrain_selection(anchor, live, VIEWPORT, ratio=1)
    latched = constrain_selection(anchor, live, VIEWPORT, ratio=1, latched=Direction(is_left=True, is_up=True))
    assert free.top == pytest.approx(100)
    assert latched.bottom == pytest.approx(150)
    assert latched.top == pytest.approx(50)


def test_ratio_within_epsilon_is_left_alone():
    rect = constrain_selection(Point(0, 0), Point(200, 100), VIEWPORT, ratio=2 + RATIO_EPSILON / 10)
    assert rect == Rect(0, 0, 200, 100)


_POINTS = [Point(x, y) for x, y in itertools.product((-50, 0, 13, 399, 790, 900), (-20, 0, 7, 300, 590, 700))]


@pytest.mark.parametrize("ratio", [None, 0.5, 1.0, 16 / 9])
def test_properties_hold_for_any_drag(ratio):
    """Bounds, minimum size and ratio hold across a grid of drags."""
    for anchor, live in itertools.product(_POINTS, repeat=2):
        rect = constrain_selection(anchor, live, VIEWPORT, min_width=20, min_height=20, ratio=ratio)
        _assert_inside(rect)
        assert rect.width >= 20 - 1e-9
        assert rect.height >= 20 - 1e-9
        if ratio is not None:
            assert rect.width / rect.height == pytest.approx(ratio, abs=1e-6)
