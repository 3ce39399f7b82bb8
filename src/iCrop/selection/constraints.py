"""Constrained resize of the selection rectangle.

:func:`constrain_selection` turns an anchor and a live pointer position into a
rectangle that respects the viewport bounds, the minimum size and, when set,
the aspect ratio. The steps run in a fixed order and later steps rely on the
guarantees of the earlier ones:

1. direction flags from the anchor/live relation;
2. raw bounding box clamped to the viewport;
3. minimum size, extending the box in the drag direction;
4. bounds re-clamp by translating the whole box;
5. aspect-ratio correction anchored on the edge the drag started from.
"""

from __future__ import annotations

from typing import NamedTuple

from ..config import RATIO_EPSILON
from ..core.geometry import Point, Rect, Viewport

_SIZE_TOLERANCE = 1e-9


class Direction(NamedTuple):
    """Which way the live point lies relative to the anchor."""

    is_left: bool
    is_up: bool


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _shift_into(near: float, far: float, limit: float) -> tuple[float, float]:
    """Translate ``[near, far]`` inside ``[0, limit]`` keeping its length."""

    if near < 0.0:
        far += -near
        near = 0.0
    if far > limit:
        near -= far - limit
        far = limit
    if near < 0.0:
        # Longer than the viewport itself: truncate as a last resort.
        near = 0.0
    return near, far


def _fits(left: float, top: float, width: float, height: float, viewport: Viewport) -> bool:
    return (
        left >= -_SIZE_TOLERANCE
        and top >= -_SIZE_TOLERANCE
        and left + width <= viewport.width + _SIZE_TOLERANCE
        and top + height <= viewport.height + _SIZE_TOLERANCE
    )


def _shrink_into(
    box: tuple[float, float, float, float],
    ratio: float,
    direction: Direction,
    viewport: Viewport,
) -> tuple[float, float, float, float]:
    """Recompute the overflowing dimension from the space that is left.

    The other dimension follows proportionally; the corner opposite the
    overflow stays where it was.
    """

    left, top, width, height = box
    right = left + width
    if left < 0.0 or right > viewport.width:
        left_c = max(0.0, left)
        right_c = min(float(viewport.width), right)
        new_width = max(0.0, right_c - left_c)
        new_height = new_width / ratio
        if direction.is_up:
            top = top + height - new_height
        left, width, height = left_c, new_width, new_height

    bottom = top + height
    if top < 0.0 or bottom > viewport.height:
        top_c = max(0.0, top)
        bottom_c = min(float(viewport.height), bottom)
        new_height = max(0.0, bottom_c - top_c)
        new_width = new_height * ratio
        if direction.is_left:
            left = left + width - new_width
        top, width, height = top_c, new_width, new_height
    return left, top, width, height


def _correct_ratio(
    left: float,
    top: float,
    width: float,
    height: float,
    *,
    ratio: float,
    direction: Direction,
    viewport: Viewport,
    min_width: float,
    min_height: float,
) -> tuple[float, float, float, float]:
    if width / height < ratio:
        new_width = height * ratio
        if direction.is_left:
            left -= new_width - width
        width = new_width
    else:
        new_height = width / ratio
        if direction.is_up:
            top -= new_height - height
        height = new_height

    if _fits(left, top, width, height, viewport):
        return left, top, width, height

    shrunk = _shrink_into((left, top, width, height), ratio, direction, viewport)
    if shrunk[2] + _SIZE_TOLERANCE >= min_width and shrunk[3] + _SIZE_TOLERANCE >= min_height:
        return shrunk
    if width <= viewport.width and height <= viewport.height:
        # Keeping the anchor would break the minimum size; move the grown
        # box inside the viewport instead.
        return _translate_into(left, top, width, height, viewport)

    # The grown box is larger than the viewport itself: settle for the
    # smallest box honouring both the ratio and the minimum size.
    s_left, s_top, s_width, s_height = shrunk
    width = max(s_width, min_width, min_height * ratio)
    height = width / ratio
    if width > viewport.width + _SIZE_TOLERANCE or height > viewport.height + _SIZE_TOLERANCE:
        return shrunk
    left = s_left + s_width - width if direction.is_left else s_left
    top = s_top + s_height - height if direction.is_up else s_top
    return _translate_into(left, top, width, height, viewport)


def _translate_into(
    left: float, top: float, width: float, height: float, viewport: Viewport
) -> tuple[float, float, float, float]:
    return (
        _clamp(left, 0.0, max(0.0, viewport.width - width)),
        _clamp(top, 0.0, max(0.0, viewport.height - height)),
        width,
        height,
    )


def constrain_selection(
    anchor: Point,
    live: Point,
    viewport: Viewport,
    *,
    min_width: float = 1.0,
    min_height: float = 1.0,
    ratio: float | None = None,
    latched: Direction | None = None,
) -> Rect:
    """Return the selection spanned by *anchor* and *live* under constraints.

    ``latched`` overrides the direction used to pick the anchor edge during
    the aspect-ratio correction; quick select passes the direction captured
    from the pointer position relative to the rectangle midlines.
    """

    vp_width = max(0.0, float(viewport.width))
    vp_height = max(0.0, float(viewport.height))
    bounds = Viewport(vp_width, vp_height)

    is_right = live.x > anchor.x
    is_down = live.y > anchor.y
    direction = Direction(is_left=not is_right, is_up=not is_down)

    min_w = min(float(min_width), vp_width)
    min_h = min(float(min_height), vp_height)

    left = _clamp(min(anchor.x, live.x), 0.0, vp_width)
    right = _clamp(max(anchor.x, live.x), 0.0, vp_width)
    top = _clamp(min(anchor.y, live.y), 0.0, vp_height)
    bottom = _clamp(max(anchor.y, live.y), 0.0, vp_height)

    if right - left < min_w:
        if is_right:
            right = left + min_w
        else:
            left = right - min_w
    if bottom - top < min_h:
        if is_down:
            bottom = top + min_h
        else:
            top = bottom - min_h

    left, right = _shift_into(left, right, vp_width)
    top, bottom = _shift_into(top, bottom, vp_height)
    width = right - left
    height = bottom - top

    if ratio is not None and width > 0.0 and height > 0.0:
        target = float(ratio)
        if abs(width / height - target) > RATIO_EPSILON:
            left, top, width, height = _correct_ratio(
                left,
                top,
                width,
                height,
                ratio=target,
                direction=latched if latched is not None else direction,
                viewport=bounds,
                min_width=min_w,
                min_height=min_h,
            )

    return Rect(left, top, width, height)


__all__ = ["Direction", "constrain_selection"]
