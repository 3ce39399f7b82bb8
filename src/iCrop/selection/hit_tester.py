"""
Hit testing logic for selection handles.

This module contains pure geometric functions for detecting which handle of
the selection rectangle (if any) is under a given point, with no dependency on
any UI toolkit.
"""

from __future__ import annotations

import enum
import math

from ..config import HANDLE_HIT_PADDING
from ..core.geometry import Point, Rect


class SelectionHandle(enum.IntEnum):
    """Enumeration of selection rectangle interaction handles."""

    NONE = 0
    LEFT = 1
    RIGHT = 2
    BOTTOM = 3
    TOP = 4
    TOP_LEFT = 5
    TOP_RIGHT = 6
    BOTTOM_RIGHT = 7
    BOTTOM_LEFT = 8
    INSIDE = -1


class HitTester:
    """Pure-function hit tester for selection handles."""

    def __init__(self, hit_padding: float = HANDLE_HIT_PADDING) -> None:
        self._hit_padding = float(hit_padding)

    @staticmethod
    def _distance_to_segment(point: Point, start: Point, end: Point) -> float:
        """Calculate distance from point to line segment."""
        vx = end.x - start.x
        vy = end.y - start.y
        if abs(vx) < 1e-6 and abs(vy) < 1e-6:
            return math.hypot(point.x - start.x, point.y - start.y)
        t = ((point.x - start.x) * vx + (point.y - start.y) * vy) / (vx * vx + vy * vy)
        t = max(0.0, min(1.0, t))
        return math.hypot(point.x - (start.x + t * vx), point.y - (start.y + t * vy))

    def test(self, point: Point, rect: Rect | None) -> SelectionHandle:
        """Determine which handle of *rect* (if any) is under *point*.

        Corners win over edges, edges over the interior. An empty rectangle
        exposes no handles.
        """
        if rect is None or (rect.width <= 0 and rect.height <= 0):
            return SelectionHandle.NONE

        top_left = Point(rect.left, rect.top)
        top_right = Point(rect.right, rect.top)
        bottom_right = Point(rect.right, rect.bottom)
        bottom_left = Point(rect.left, rect.bottom)

        corners = [
            (SelectionHandle.TOP_LEFT, top_left),
            (SelectionHandle.TOP_RIGHT, top_right),
            (SelectionHandle.BOTTOM_RIGHT, bottom_right),
            (SelectionHandle.BOTTOM_LEFT, bottom_left),
        ]
        for handle, corner in corners:
            if math.hypot(point.x - corner.x, point.y - corner.y) <= self._hit_padding:
                return handle

        edges = [
            (SelectionHandle.TOP, top_left, top_right),
            (SelectionHandle.RIGHT, top_right, bottom_right),
            (SelectionHandle.BOTTOM, bottom_left, bottom_right),
            (SelectionHandle.LEFT, top_left, bottom_left),
        ]
        for handle, start, end in edges:
            if self._distance_to_segment(point, start, end) <= self._hit_padding:
                return handle

        if rect.contains(point):
            return SelectionHandle.INSIDE
        return SelectionHandle.NONE


def scale_anchor(rect: Rect, handle: SelectionHandle) -> Point:
    """Return the fixed point of *rect* while *handle* is dragged."""

    return {
        SelectionHandle.TOP_LEFT: Point(rect.right, rect.bottom),
        SelectionHandle.TOP: Point(rect.right, rect.bottom),
        SelectionHandle.LEFT: Point(rect.right, rect.bottom),
        SelectionHandle.TOP_RIGHT: Point(rect.left, rect.bottom),
        SelectionHandle.BOTTOM_LEFT: Point(rect.right, rect.top),
    }.get(handle, Point(rect.left, rect.top))


def constrain_to_handle(rect: Rect, handle: SelectionHandle, pointer: Point) -> Point:
    """Project *pointer* so that edge handles only move their own edge."""

    if handle in (SelectionHandle.LEFT, SelectionHandle.RIGHT):
        anchor = scale_anchor(rect, handle)
        return Point(pointer.x, rect.top if anchor.y == rect.bottom else rect.bottom)
    if handle in (SelectionHandle.TOP, SelectionHandle.BOTTOM):
        anchor = scale_anchor(rect, handle)
        return Point(rect.left if anchor.x == rect.right else rect.right, pointer.y)
    return pointer


__all__ = ["HitTester", "SelectionHandle", "constrain_to_handle", "scale_anchor"]
