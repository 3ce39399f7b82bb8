"""Tests for the selection HitTester module."""

import pytest

from iCrop.core.geometry import Point, Rect
from iCrop.selection.hit_tester import HitTester, SelectionHandle, constrain_to_handle, scale_anchor


@pytest.fixture
def hit_tester():
    """Create a HitTester instance with standard padding."""
    return HitTester(hit_padding=10.0)


@pytest.fixture
def rect():
    return Rect(100, 100, 100, 100)


@pytest.mark.parametrize(
    ("point", "expected"),
    [
        (Point(102, 102), SelectionHandle.TOP_LEFT),
        (Point(198, 102), SelectionHandle.TOP_RIGHT),
        (Point(198, 198), SelectionHandle.BOTTOM_RIGHT),
        (Point(102, 198), SelectionHandle.BOTTOM_LEFT),
    ],
)
def test_hit_corners(hit_tester, rect, point, expected):
    assert hit_tester.test(point, rect) == expected


@pytest.mark.parametrize(
    ("point", "expected"),
    [
        (Point(150, 95), SelectionHandle.TOP),
        (Point(205, 150), SelectionHandle.RIGHT),
        (Point(150, 205), SelectionHandle.BOTTOM),
        (Point(95, 150), SelectionHandle.LEFT),
    ],
)
def test_hit_edges(hit_tester, rect, point, expected):
    assert hit_tester.test(point, rect) == expected


def test_hit_inside(hit_tester, rect):
    assert hit_tester.test(Point(150, 150), rect) == SelectionHandle.INSIDE


def test_miss_outside(hit_tester, rect):
    assert hit_tester.test(Point(300, 300), rect) == SelectionHandle.NONE


def test_empty_rect_has_no_handles(hit_tester):
    assert hit_tester.test(Point(0, 0), Rect(0, 0, 0, 0)) == SelectionHandle.NONE
    assert hit_tester.test(Point(0, 0), None) == SelectionHandle.NONE


def test_corners_have_priority_over_edges(hit_tester):
    """Small rectangles resolve ambiguous hits to the nearest corner first."""
    small = Rect(100, 100, 10, 10)
    assert hit_tester.test(Point(105, 101), small) == SelectionHandle.TOP_LEFT


def test_scale_anchor_is_opposite_corner(rect):
    assert scale_anchor(rect, SelectionHandle.TOP_LEFT) == Point(200, 200)
    assert scale_anchor(rect, SelectionHandle.BOTTOM_RIGHT) == Point(100, 100)
    assert scale_anchor(rect, SelectionHandle.TOP_RIGHT) == Point(100, 200)
    assert scale_anchor(rect, SelectionHandle.BOTTOM_LEFT) == Point(200, 100)


def test_edge_handles_move_a_single_axis(rect):
    assert constrain_to_handle(rect, SelectionHandle.RIGHT, Point(250, 20)) == Point(250, 200)
    assert constrain_to_handle(rect, SelectionHandle.LEFT, Point(50, 20)) == Point(50, 100)
    assert constrain_to_handle(rect, SelectionHandle.TOP, Point(20, 50)) == Point(100, 50)
    assert constrain_to_handle(rect, SelectionHandle.BOTTOM, Point(20, 250)) == Point(200, 250)
    assert constrain_to_handle(rect, SelectionHandle.TOP_LEFT, Point(20, 30)) == Point(20, 30)
