"""Selection-rectangle engine.

The engine owns the transient crop rectangle of one editing session together
with the drag/quick-select state. It reacts to pointer and key input, keeps
the rectangle inside the viewport under the configured constraints and turns
the final rectangle into native raster pixels on commit.

Every instance carries its own options and state; nothing is shared between
sessions.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ..config import DEGENERATE_THRESHOLD
from ..core.geometry import Point, Rect, Viewport
from ..events import Signal
from ..settings import SelectOptions
from .constraints import Direction, constrain_selection
from .hit_tester import HitTester, SelectionHandle, constrain_to_handle, scale_anchor

_LOGGER = logging.getLogger(__name__)

_EMPTY = Rect(0.0, 0.0, 0.0, 0.0)


class DragMode(enum.Enum):
    """Interaction currently driving the rectangle."""

    NONE = "none"
    NEW = "drawing"
    MOVE = "moving"
    SCALE = "scaling"
    KEY_SELECT = "keySelecting"


@dataclass
class DragState:
    """State kept between the begin and end of one interaction."""

    anchor: Point | None = None
    mode: DragMode = DragMode.NONE
    last_valid_scale: tuple[float, float] = (1.0, 1.0)
    latched_direction: Direction | None = None
    handle: SelectionHandle = SelectionHandle.NONE
    origin: Rect | None = None
    anchor_latched: bool = False


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _as_select_options(options: SelectOptions | Mapping[str, Any] | None) -> SelectOptions:
    if isinstance(options, SelectOptions):
        return options
    return SelectOptions.from_mapping(options)


class SelectionEngine:
    """Geometric constraint solver driven by pointer and keyboard input."""

    def __init__(
        self,
        viewport_provider: Callable[[], Viewport],
        options: SelectOptions | Mapping[str, Any] | None = None,
        *,
        hit_tester: HitTester | None = None,
    ) -> None:
        self._viewport_provider = viewport_provider
        self._options = _as_select_options(options)
        self._hit_tester = hit_tester or HitTester()
        self._rect: Rect | None = None
        self._drag = DragState()
        self._scale_base: tuple[float, float] | None = None
        self.selection_changed = Signal("selection changed")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def options(self) -> SelectOptions:
        return self._options

    @property
    def has_focus(self) -> bool:
        return self._rect is not None

    @property
    def rect(self) -> Rect | None:
        return self._rect

    @property
    def drag_state(self) -> DragState:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return self._drag.mode is not DragMode.NONE

    def viewport(self) -> Viewport:
        viewport = self._viewport_provider()
        return Viewport(max(0.0, float(viewport.width)), max(0.0, float(viewport.height)))

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------
    def acquire(self) -> None:
        """Create an empty rectangle unless one already exists."""

        if self._rect is None:
            self._rect = _EMPTY
            self._drag = DragState()
            self._scale_base = None

    def release(self) -> None:
        """Discard the rectangle and any pending interaction."""

        if self._rect is None:
            return
        self._rect = None
        self._drag = DragState()
        self._scale_base = None
        self.selection_changed.emit()

    def toggle(self) -> None:
        if self.has_focus:
            self.release()
        else:
            self.acquire()

    # ------------------------------------------------------------------
    # Drag interaction
    # ------------------------------------------------------------------
    def begin_drag(
        self,
        pointer: Point,
        mode: DragMode,
        *,
        handle: SelectionHandle | None = None,
    ) -> None:
        """Start a ``NEW``, ``MOVE`` or ``SCALE`` interaction at *pointer*."""

        if self._rect is None:
            return
        if mode not in (DragMode.NEW, DragMode.MOVE, DragMode.SCALE):
            raise ValueError(f"begin_drag does not accept {mode!r}")
        pointer = Point(float(pointer.x), float(pointer.y))
        self._scale_base = None

        if mode is DragMode.NEW:
            viewport = self.viewport()
            start = Point(
                _clamp(pointer.x, 0.0, viewport.width),
                _clamp(pointer.y, 0.0, viewport.height),
            )
            self._rect = Rect(start.x, start.y, 0.0, 0.0)
            self._drag = DragState(anchor=pointer, mode=mode)
            self.selection_changed.emit()
            return

        if mode is DragMode.MOVE:
            self._drag = DragState(anchor=pointer, mode=mode, origin=self._rect)
            return

        if handle is None or handle in (SelectionHandle.NONE, SelectionHandle.INSIDE):
            handle = self._nearest_corner(pointer)
        self._drag = DragState(
            anchor=scale_anchor(self._rect, handle),
            mode=mode,
            handle=handle,
            origin=self._rect,
        )

    def update_drag(self, pointer: Point) -> None:
        """Run the constrained resize towards *pointer*."""

        drag = self._drag
        if self._rect is None or drag.anchor is None:
            return
        pointer = Point(float(pointer.x), float(pointer.y))
        if drag.mode is DragMode.MOVE:
            origin = drag.origin or self._rect
            self.on_handle_moved(
                origin.left + pointer.x - drag.anchor.x,
                origin.top + pointer.y - drag.anchor.y,
            )
            return
        if drag.mode is DragMode.SCALE:
            pointer = constrain_to_handle(drag.origin or self._rect, drag.handle, pointer)
            self._render(drag.anchor, pointer)
            return
        if drag.mode is DragMode.NEW:
            self._render(drag.anchor, pointer)

    def end_drag(self) -> None:
        """Finish the active interaction; a second call is a no-op."""

        if self._drag.mode is DragMode.NONE:
            return
        _LOGGER.debug("Selection settled at %s", self._rect)
        self._drag = DragState()
        self._scale_base = None

    # ------------------------------------------------------------------
    # Quick select
    # ------------------------------------------------------------------
    def begin_key_select(self, pointer: Point | None = None) -> None:
        """Enter quick-select mode; the anchor latches on the first move."""

        if self._rect is None or self._drag.mode is DragMode.KEY_SELECT:
            return
        self._rect = _EMPTY
        self._scale_base = None
        self._drag = DragState(mode=DragMode.KEY_SELECT)
        if pointer is not None:
            self._latch_key_anchor(pointer)
        self.selection_changed.emit()

    def update_key_select(self, pointer: Point) -> None:
        """Grow the quick-select rectangle towards *pointer*."""

        drag = self._drag
        if self._rect is None or drag.mode is not DragMode.KEY_SELECT:
            return
        pointer = Point(float(pointer.x), float(pointer.y))
        if not drag.anchor_latched:
            self._latch_key_anchor(pointer)
            self.selection_changed.emit()
            return
        rect = self._rect
        drag.latched_direction = Direction(
            is_left=pointer.x < rect.left + rect.width / 2.0,
            is_up=pointer.y < rect.top + rect.height / 2.0,
        )
        self._render(
            Point(min(rect.left, pointer.x), min(rect.top, pointer.y)),
            Point(max(rect.right, pointer.x), max(rect.bottom, pointer.y)),
            latched=drag.latched_direction,
        )

    def end_key_select(self) -> None:
        if self._drag.mode is not DragMode.KEY_SELECT:
            return
        self.end_drag()

    def _latch_key_anchor(self, pointer: Point) -> None:
        viewport = self.viewport()
        self._rect = Rect(
            _clamp(float(pointer.x), 0.0, viewport.width),
            _clamp(float(pointer.y), 0.0, viewport.height),
            0.0,
            0.0,
        )
        self._drag.anchor = Point(self._rect.left, self._rect.top)
        self._drag.anchor_latched = True

    # ------------------------------------------------------------------
    # Direct manipulation of the rectangle object
    # ------------------------------------------------------------------
    def on_handle_moved(self, left: float, top: float) -> None:
        """Keep a moved rectangle fully inside the viewport."""

        rect = self._rect
        if rect is None:
            return
        viewport = self.viewport()
        left = _clamp(float(left), 0.0, max(0.0, viewport.width - rect.width))
        top = _clamp(float(top), 0.0, max(0.0, viewport.height - rect.height))
        self._rect = Rect(left, top, rect.width, rect.height)
        self.selection_changed.emit()

    def on_handle_scaled(self, left: float, top: float, scale_x: float, scale_y: float) -> None:
        """Apply a handle scale, reverting to the last valid scale on overflow.

        Scale factors are relative to the rectangle size at the start of the
        scale gesture; :meth:`end_drag` starts a new gesture.
        """

        rect = self._rect
        if rect is None:
            return
        if self._scale_base is None:
            self._scale_base = (rect.width, rect.height)
        base_width, base_height = self._scale_base
        viewport = self.viewport()
        options = self._options
        last_x, last_y = self._drag.last_valid_scale
        left = float(left)
        top = float(top)
        scale_x = float(scale_x)
        scale_y = float(scale_y)

        right = left + base_width * scale_x
        bottom = top + base_height * scale_y
        out_x = left < 0.0 or right > viewport.width
        out_y = top < 0.0 or bottom > viewport.height
        prevent = options.ratio is not None and (out_x or out_y)

        if out_x or prevent:
            scale_x = last_x
        if left < 0.0:
            left = 0.0
        if out_y or prevent:
            scale_y = last_y
        if top < 0.0:
            top = 0.0

        if base_width > 0.0 and base_width * scale_x < options.min_width:
            scale_x = scale_y = options.min_width / base_width
        if base_height > 0.0 and base_height * scale_y < options.min_height:
            scale_x = scale_y = options.min_height / base_height

        self._drag.last_valid_scale = (scale_x, scale_y)
        width = base_width * scale_x
        height = base_height * scale_y
        left = _clamp(left, 0.0, max(0.0, viewport.width - width))
        top = _clamp(top, 0.0, max(0.0, viewport.height - height))
        self._rect = Rect(left, top, width, height)
        self.selection_changed.emit()

    # ------------------------------------------------------------------
    # Programmatic selection
    # ------------------------------------------------------------------
    def draw_zone(
        self,
        left: float,
        top: float,
        width: float,
        height: float,
        *,
        force_dimension: bool = False,
    ) -> None:
        """Select a zone, acquiring focus first when needed.

        With ``force_dimension`` the rectangle is taken verbatim; otherwise it
        goes through the same constraints as a drag from its top-left to its
        bottom-right corner.
        """

        self.acquire()
        self._scale_base = None
        if force_dimension:
            self._rect = Rect(float(left), float(top), float(width), float(height))
            self.selection_changed.emit()
            return
        self._render(Point(left, top), Point(left + width, top + height))

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def commit_selection(self, raster_bounds: Rect, scale: float | tuple[float, float] = 1.0) -> Rect | None:
        """Return the selection in native raster pixels, or None if degenerate.

        *raster_bounds* is the displayed raster box in the same coordinates
        as the rectangle and *scale* its display scale. Parts of the selection
        left of or above the raster are trimmed rather than rejected.
        """

        rect = self._rect
        if rect is None or rect.is_degenerate(DEGENERATE_THRESHOLD):
            return None
        if isinstance(scale, tuple):
            scale_x, scale_y = (float(value) or 1.0 for value in scale)
        else:
            scale_x = scale_y = float(scale) or 1.0

        left = rect.left - raster_bounds.left
        top = rect.top - raster_bounds.top
        width = rect.width
        height = rect.height
        if top < 0.0:
            height += top
            top = 0.0
        if left < 0.0:
            width += left
            left = 0.0
        width = min(width, raster_bounds.width)
        height = min(height, raster_bounds.height)
        if width <= 0.0 or height <= 0.0:
            _LOGGER.debug("Selection %s does not overlap raster %s", rect, raster_bounds)
            return None

        committed = Rect(left / scale_x, top / scale_y, width / scale_x, height / scale_y)
        if committed.is_degenerate(DEGENERATE_THRESHOLD):
            return None
        return committed

    # ------------------------------------------------------------------
    # Event-level inputs
    # ------------------------------------------------------------------
    def on_pointer_down(self, point: Point) -> None:
        if self._rect is None:
            return
        if self._drag.mode is DragMode.KEY_SELECT:
            return
        handle = self._hit_tester.test(point, self._rect)
        if handle is SelectionHandle.INSIDE:
            self.begin_drag(point, DragMode.MOVE)
        elif handle is SelectionHandle.NONE:
            self.begin_drag(point, DragMode.NEW)
        else:
            self.begin_drag(point, DragMode.SCALE, handle=handle)

    def on_pointer_move(self, point: Point) -> None:
        if self._drag.mode is DragMode.KEY_SELECT:
            self.update_key_select(point)
        else:
            self.update_drag(point)

    def on_pointer_up(self, point: Point | None = None) -> None:
        if self._drag.mode is DragMode.KEY_SELECT:
            return
        self.end_drag()

    def on_key_down(self, key_code: int) -> None:
        key = self._options.quick_select_key
        if key is None or key_code != key:
            return
        self.begin_key_select()

    def on_key_up(self, key_code: int) -> None:
        key = self._options.quick_select_key
        if key is None or key_code != key:
            return
        self.end_key_select()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _render(self, anchor: Point, live: Point, *, latched: Direction | None = None) -> None:
        options = self._options
        self._rect = constrain_selection(
            anchor,
            live,
            self.viewport(),
            min_width=options.min_width,
            min_height=options.min_height,
            ratio=options.ratio,
            latched=latched,
        )
        self.selection_changed.emit()

    def _nearest_corner(self, pointer: Point) -> SelectionHandle:
        rect = self._rect or _EMPTY
        corners = {
            SelectionHandle.TOP_LEFT: Point(rect.left, rect.top),
            SelectionHandle.TOP_RIGHT: Point(rect.right, rect.top),
            SelectionHandle.BOTTOM_RIGHT: Point(rect.right, rect.bottom),
            SelectionHandle.BOTTOM_LEFT: Point(rect.left, rect.bottom),
        }
        return min(
            corners,
            key=lambda handle: (corners[handle].x - pointer.x) ** 2 + (corners[handle].y - pointer.y) ** 2,
        )


__all__ = ["DragMode", "DragState", "SelectionEngine"]
