"""Selection rectangle engine and its pure geometric helpers."""

from .constraints import Direction, constrain_selection
from .engine import DragMode, DragState, SelectionEngine
from .hit_tester import HitTester, SelectionHandle

__all__ = [
    "Direction",
    "DragMode",
    "DragState",
    "HitTester",
    "SelectionEngine",
    "SelectionHandle",
    "constrain_selection",
]
