"""Image editor core: pipeline, canvas layout and plugin host."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Mapping

from .core.geometry import CanvasLayout, Viewport, fit_to_canvas
from .core.pipeline import TransformationPipeline
from .core.raster import Raster, RasterDecoder
from .core.transformations import Transformation
from .plugins import PLUGINS, Plugin
from .settings import EditorOptions

_LOGGER = logging.getLogger(__name__)


class ImageEditor:
    """Own the transformation pipeline of one picture and its plugins.

    The working raster is laid out on a canvas sized by the editor options;
    that canvas is the viewport the selection rectangle lives in.
    """

    def __init__(
        self,
        raster: Raster,
        options: EditorOptions | Mapping[str, Any] | None = None,
        plugins: Mapping[str, type[Plugin]] | None = None,
    ) -> None:
        if isinstance(options, EditorOptions):
            self.options = options
        else:
            self.options = EditorOptions.from_mapping(options)
        self._layout = self._compute_layout(raster)
        self.pipeline = TransformationPipeline(raster, layout=self._place)
        self.plugins: dict[str, Plugin] = {}
        self._initialize_plugins(PLUGINS if plugins is None else plugins)
        self.pipeline.refresh()

    @classmethod
    def open(
        cls,
        path: Path | str,
        options: EditorOptions | Mapping[str, Any] | None = None,
        plugins: Mapping[str, type[Plugin]] | None = None,
        *,
        decoder: RasterDecoder | None = None,
    ) -> "ImageEditor":
        return cls(Raster.open(path, decoder=decoder), options, plugins)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _compute_layout(self, raster: Raster) -> CanvasLayout:
        options = self.options
        return fit_to_canvas(
            raster.viewport(),
            min_width=options.min_width,
            min_height=options.min_height,
            max_width=options.max_width,
            max_height=options.max_height,
            ratio=options.ratio,
        )

    def _place(self, raster: Raster) -> Raster:
        self._layout = self._compute_layout(raster)
        return raster.placed(self._layout.left, self._layout.top, self._layout.scale)

    @property
    def layout(self) -> CanvasLayout:
        return self._layout

    def canvas_size(self) -> Viewport:
        """Return the size of the canvas the working raster is drawn on."""
        return self._layout.canvas

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------
    def _initialize_plugins(self, plugins: Mapping[str, type[Plugin]]) -> None:
        for name, plugin_cls in plugins.items():
            plugin_options = self.options.plugin_options(name)
            if plugin_options is False:
                _LOGGER.debug("Plugin %s disabled", name)
                continue
            self.plugins[name] = plugin_cls(self, plugin_options)

    def plugin(self, name: str) -> Plugin | None:
        return self.plugins.get(name)

    # ------------------------------------------------------------------
    # Pipeline facade
    # ------------------------------------------------------------------
    @property
    def image(self) -> Raster | None:
        """The working raster as currently displayed."""
        return self.pipeline.working

    def apply_transformation(self, transformation: Transformation) -> "Future[Raster]":
        return self.pipeline.append(transformation)

    def reinitialize_image(self) -> "Future[Raster]":
        return self.pipeline.reinitialize()

    def export(self, path: Path | str | None = None) -> bytes:
        """Encode the current source raster, writing it to *path* when given."""

        data = self.pipeline.source.export()
        if path is not None:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            _LOGGER.info("Exported %d bytes to %s", len(data), target)
        return data


__all__ = ["ImageEditor"]
