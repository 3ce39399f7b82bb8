"""Crop plugin: selection rectangle plus the crop transformation."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from typing import Any, ClassVar, Mapping

from ..core.geometry import Rect
from ..core.transformations import CropTransformation
from ..selection import SelectionEngine
from ..settings import SelectOptions
from ..settings.schema import DEFAULT_SELECT_OPTIONS, SELECT_SCHEMA
from .base import Plugin

_LOGGER = logging.getLogger(__name__)


def _fraction(value: float) -> float:
    return max(0.0, min(1.0, value))


class CropPlugin(Plugin):
    """Let the user draw a rectangle and crop the image to it."""

    name: ClassVar[str] = "crop"
    defaults: ClassVar[Mapping[str, Any]] = DEFAULT_SELECT_OPTIONS
    schema: ClassVar[Mapping[str, Any]] = SELECT_SCHEMA

    def initialize(self) -> None:
        self.select_options = SelectOptions.from_mapping(self.options)
        self.engine = SelectionEngine(self.editor.canvas_size, self.select_options)
        self.editor.pipeline.transformation_applied.connect(self.engine.release)

    def toggle_crop(self) -> None:
        self.engine.toggle()

    def draw_zone(
        self,
        left: float,
        top: float,
        width: float,
        height: float,
        *,
        force_dimension: bool = False,
    ) -> None:
        self.engine.draw_zone(left, top, width, height, force_dimension=force_dimension)

    def selected_region(self) -> Rect | None:
        """Return the committed selection in native pixels of the working raster."""

        working = self.editor.image
        if working is None:
            return None
        return self.engine.commit_selection(working.bounds(), (working.scale_x, working.scale_y))

    def crop_current_zone(self) -> "Future | None":
        """Append a crop for the current selection.

        Returns the pipeline future, or ``None`` when nothing happens: no
        focus, an empty selection or a pipeline still busy with another step.
        """

        pipeline = self.editor.pipeline
        if pipeline.is_busy:
            _LOGGER.debug("Crop ignored while the pipeline is busy")
            return None
        region = self.selected_region()
        if region is None:
            return None

        viewport = pipeline.source.viewport()
        if viewport.width <= 0 or viewport.height <= 0:
            return None
        transformation = CropTransformation(
            left=_fraction(region.left / viewport.width),
            top=_fraction(region.top / viewport.height),
            width=_fraction(region.width / viewport.width),
            height=_fraction(region.height / viewport.height),
        )
        _LOGGER.info("Cropping to %s", region)
        return self.editor.apply_transformation(transformation)


__all__ = ["CropPlugin"]
