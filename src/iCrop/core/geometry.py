"""Geometry primitives shared by the selection engine and the raster layer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import NamedTuple

_TRIG_SNAP = 1e-12


class Point(NamedTuple):
    """Pointer position in viewport coordinates."""

    x: float
    y: float


class Viewport(NamedTuple):
    """Axis-aligned size of the area the selection lives in."""

    width: float
    height: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle described by its top-left corner and size."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> Point:
        return Point(self.left + self.width * 0.5, self.top + self.height * 0.5)

    def contains(self, point: Point) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.width, self.height)

    def is_degenerate(self, threshold: float = 1.0) -> bool:
        """Return True when both dimensions fall below *threshold*."""
        return self.width < threshold and self.height < threshold

    def as_mapping(self) -> dict[str, float]:
        return {
            "left": float(self.left),
            "top": float(self.top),
            "width": float(self.width),
            "height": float(self.height),
        }


def _snap(value: float) -> float:
    return 0.0 if abs(value) < _TRIG_SNAP else value


def compute_viewport(width: float, height: float, angle: float = 0.0) -> Viewport:
    """Return the bounding box of a ``width`` x ``height`` raster rotated by *angle*.

    *angle* is expressed in degrees. Exact multiples of 90° produce exact
    dimensions because vanishing trigonometric terms are snapped to zero.
    """

    radians = math.radians(float(angle))
    sin_a = abs(_snap(math.sin(radians)))
    cos_a = abs(_snap(math.cos(radians)))
    return Viewport(
        width=abs(height * sin_a) + abs(width * cos_a),
        height=abs(width * sin_a) + abs(height * cos_a),
    )


@dataclass(frozen=True)
class CanvasLayout:
    """Placement of the displayed raster on the editing canvas."""

    scale: float
    canvas_width: float
    canvas_height: float
    left: float
    top: float

    @property
    def canvas(self) -> Viewport:
        return Viewport(self.canvas_width, self.canvas_height)


def fit_to_canvas(
    viewport: Viewport,
    *,
    min_width: float | None = None,
    min_height: float | None = None,
    max_width: float | None = None,
    max_height: float | None = None,
    ratio: float | None = None,
) -> CanvasLayout:
    """Compute the uniform display scale and centred position of a raster.

    The viewport is first padded to *ratio* (when given) so the canvas keeps
    the requested proportions. Each axis then derives its own scale: shrink to
    the maximum when the image is larger, grow to the minimum when it is
    smaller. The smaller of both scales is applied uniformly.
    """

    image_width = float(viewport.width)
    image_height = float(viewport.height)
    if image_width <= 0 or image_height <= 0:
        return CanvasLayout(1.0, max(0.0, image_width), max(0.0, image_height), 0.0, 0.0)

    padded_width = image_width
    padded_height = image_height
    if ratio is not None:
        canvas_ratio = float(ratio)
        current_ratio = padded_width / padded_height
        if current_ratio > canvas_ratio:
            padded_height = padded_width / canvas_ratio
        elif current_ratio < canvas_ratio:
            padded_width = padded_height * canvas_ratio

    scale_x = 1.0
    if max_width is not None and max_width < padded_width:
        scale_x = max_width / padded_width
    elif min_width is not None and min_width > padded_width:
        scale_x = min_width / padded_width

    scale_y = 1.0
    if max_height is not None and max_height < padded_height:
        scale_y = max_height / padded_height
    elif min_height is not None and min_height > padded_height:
        scale_y = min_height / padded_height

    scale = min(scale_x, scale_y)
    canvas_width = float(max_width) if max_width is not None else padded_width * scale
    canvas_height = float(max_height) if max_height is not None else padded_height * scale
    return CanvasLayout(
        scale=scale,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
        left=(canvas_width - image_width * scale) * 0.5,
        top=(canvas_height - image_height * scale) * 0.5,
    )


__all__ = [
    "CanvasLayout",
    "Point",
    "Rect",
    "Viewport",
    "compute_viewport",
    "fit_to_canvas",
]
