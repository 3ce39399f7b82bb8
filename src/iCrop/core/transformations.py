"""Replayable raster transformations.

Each transformation is an immutable configuration plus an ``apply`` step. The
step receives the raster to transform and a :class:`~concurrent.futures.Future`
acting as its continuation: it must eventually resolve the future with the new
raster, with ``None`` when it leaves the raster untouched, or with an
exception. Variants form a closed set keyed by their ``kind`` tag so a list of
transformations can be stored as plain configuration and rebuilt later.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Mapping

from ..errors import InvalidConfigurationError, UnknownTransformationError
from .geometry import Rect
from .raster import Raster

_LOGGER = logging.getLogger(__name__)


def forward_future(source: Future, target: Future) -> None:
    """Resolve *target* with the outcome of *source* once it completes."""

    def _relay(done: Future) -> None:
        error = done.exception()
        if error is not None:
            target.set_exception(error)
        else:
            target.set_result(done.result())

    source.add_done_callback(_relay)


class Transformation(ABC):
    """Base class for pipeline steps."""

    kind: ClassVar[str] = ""

    @abstractmethod
    def apply(self, raster: Raster, future: Future) -> None:
        """Transform *raster* and resolve *future* with the outcome."""

    def to_config(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.kind}
        payload.update(asdict(self))  # type: ignore[call-overload]
        return payload


def _check_fraction(name: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidConfigurationError(f"crop {name} must be a number, got {value!r}") from exc
    if not math.isfinite(number) or number < 0.0 or number > 1.0:
        raise InvalidConfigurationError(f"crop {name} must be within [0, 1], got {value!r}")
    return number


@dataclass(frozen=True)
class CropTransformation(Transformation):
    """Keep the region described by viewport fractions."""

    kind: ClassVar[str] = "crop"

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("left", "top", "width", "height"):
            object.__setattr__(self, name, _check_fraction(name, getattr(self, name)))

    def pixel_region(self, raster: Raster) -> Rect:
        """Return the region in rendered pixels, clamped to the viewport."""

        viewport = raster.viewport()
        left = self.left * viewport.width
        top = self.top * viewport.height
        width = min(self.width * viewport.width, viewport.width - left)
        height = min(self.height * viewport.height, viewport.height - top)
        return Rect(left, top, max(0.0, width), max(0.0, height))

    def apply(self, raster: Raster, future: Future) -> None:
        region = self.pixel_region(raster)
        pixel_width = round(region.right) - round(region.left)
        pixel_height = round(region.bottom) - round(region.top)
        if pixel_width < 1 or pixel_height < 1:
            _LOGGER.debug("Crop region %s rounds to an empty area; leaving raster untouched", region)
            future.set_result(None)
            return
        data = raster.export(region)
        forward_future(raster.decoder.decode(data), future)


@dataclass(frozen=True)
class RotateTransformation(Transformation):
    """Rotate the raster clockwise by ``angle`` degrees."""

    kind: ClassVar[str] = "rotate"

    angle: float

    def __post_init__(self) -> None:
        try:
            angle = float(self.angle)
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"rotation angle must be a number, got {self.angle!r}") from exc
        if not math.isfinite(angle):
            raise InvalidConfigurationError(f"rotation angle must be finite, got {self.angle!r}")
        object.__setattr__(self, "angle", angle)

    def apply(self, raster: Raster, future: Future) -> None:
        future.set_result(raster.rotated(self.angle))


TRANSFORMATIONS: dict[str, type[Transformation]] = {
    CropTransformation.kind: CropTransformation,
    RotateTransformation.kind: RotateTransformation,
}


def transformation_from_config(config: Mapping[str, Any]) -> Transformation:
    """Build the variant named by ``config["type"]``."""

    if not isinstance(config, Mapping):
        raise InvalidConfigurationError(f"transformation config must be a mapping, got {config!r}")
    values = dict(config)
    kind = values.pop("type", None)
    variant = TRANSFORMATIONS.get(str(kind))
    if variant is None:
        raise UnknownTransformationError(f"unknown transformation type: {kind!r}")
    try:
        return variant(**values)
    except TypeError as exc:
        raise InvalidConfigurationError(f"invalid {kind} transformation: {exc}") from exc


__all__ = [
    "CropTransformation",
    "RotateTransformation",
    "TRANSFORMATIONS",
    "Transformation",
    "forward_future",
    "transformation_from_config",
]
