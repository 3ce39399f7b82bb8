"""Raster layer, geometry and transformation pipeline."""

from .geometry import CanvasLayout, Point, Rect, Viewport, compute_viewport, fit_to_canvas
from .pipeline import TransformationPipeline
from .raster import DeferredRasterDecoder, Raster, RasterDecoder
from .transformations import (
    CropTransformation,
    RotateTransformation,
    Transformation,
    transformation_from_config,
)

__all__ = [
    "CanvasLayout",
    "CropTransformation",
    "DeferredRasterDecoder",
    "Point",
    "Raster",
    "RasterDecoder",
    "Rect",
    "RotateTransformation",
    "Transformation",
    "TransformationPipeline",
    "Viewport",
    "compute_viewport",
    "fit_to_canvas",
    "transformation_from_config",
]
