"""Quarter-turn rotation plugin."""

from __future__ import annotations

from concurrent.futures import Future
from typing import ClassVar

from ..core.transformations import RotateTransformation
from .base import Plugin


class RotatePlugin(Plugin):
    name: ClassVar[str] = "rotate"

    def rotate_left(self) -> "Future | None":
        return self.rotate(-90)

    def rotate_right(self) -> "Future | None":
        return self.rotate(90)

    def rotate(self, angle: float) -> "Future | None":
        if self.editor.pipeline.is_busy:
            return None
        return self.editor.apply_transformation(RotateTransformation(angle))


__all__ = ["RotatePlugin"]
