"""Pillow-backed raster collaborator.

A :class:`Raster` is an immutable view over decoded pixels plus the display
state the editor attaches to it (rotation, placement on the canvas and display
scale). Pixel export is synchronous; turning encoded bytes back into a raster
goes through a :class:`RasterDecoder`, whose result is delivered through a
:class:`concurrent.futures.Future`.
"""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Future
from io import BytesIO
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import EXPORT_FORMAT, PNG_SAFE_MODES, REPLAY_TOLERANCE
from ..errors import RasterDecodeError
from .geometry import Rect, Viewport, compute_viewport

_LOGGER = logging.getLogger(__name__)

# Clockwise quarter turns expressed as Pillow transposes (which rotate
# counter-clockwise).
_QUARTER_TURNS = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}


def _normalise_mode(image: Image.Image) -> Image.Image:
    if image.mode in PNG_SAFE_MODES:
        return image
    return image.convert("RGBA")


class Raster:
    """Decoded bitmap with rotation and display placement."""

    def __init__(
        self,
        image: Image.Image,
        *,
        angle: float = 0.0,
        left: float = 0.0,
        top: float = 0.0,
        scale_x: float = 1.0,
        scale_y: float = 1.0,
        decoder: "RasterDecoder | None" = None,
    ) -> None:
        self._image = image
        self._angle = float(angle) % 360.0
        self._left = float(left)
        self._top = float(top)
        self._scale_x = float(scale_x)
        self._scale_y = float(scale_y)
        self._decoder = decoder if decoder is not None else RasterDecoder()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def open(cls, path: Path | str, *, decoder: "RasterDecoder | None" = None) -> "Raster":
        """Load *path* synchronously, honouring EXIF orientation."""

        try:
            with Image.open(path) as handle:
                image = ImageOps.exif_transpose(handle)
                if image is handle:
                    image = handle.copy()
                image.load()
        except (OSError, UnidentifiedImageError) as exc:
            raise RasterDecodeError(f"Cannot decode {path}: {exc}") from exc
        return cls(_normalise_mode(image), decoder=decoder)

    @classmethod
    def from_bytes(cls, data: bytes, *, decoder: "RasterDecoder | None" = None) -> "Raster":
        """Decode *data* synchronously."""

        return cls(_decode_image(data), decoder=decoder)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def decoder(self) -> "RasterDecoder":
        return self._decoder

    @property
    def angle(self) -> float:
        return self._angle

    @property
    def left(self) -> float:
        return self._left

    @property
    def top(self) -> float:
        return self._top

    @property
    def scale_x(self) -> float:
        return self._scale_x

    @property
    def scale_y(self) -> float:
        return self._scale_y

    @property
    def native_width(self) -> int:
        return self._image.width

    @property
    def native_height(self) -> int:
        return self._image.height

    @property
    def width(self) -> float:
        """Displayed width of the rotated raster."""
        return self.viewport().width * self._scale_x

    @property
    def height(self) -> float:
        """Displayed height of the rotated raster."""
        return self.viewport().height * self._scale_y

    def viewport(self) -> Viewport:
        """Return the rotation-aware bounding box in native pixels."""
        return compute_viewport(self.native_width, self.native_height, self._angle)

    def bounds(self) -> Rect:
        """Return the displayed bounding box in canvas coordinates."""
        return Rect(self._left, self._top, self.width, self.height)

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------
    def _derive(self, **changes) -> "Raster":
        values = {
            "angle": self._angle,
            "left": self._left,
            "top": self._top,
            "scale_x": self._scale_x,
            "scale_y": self._scale_y,
            "decoder": self._decoder,
        }
        values.update(changes)
        return Raster(self._image, **values)

    def placed(self, left: float, top: float, scale: float) -> "Raster":
        """Return a copy positioned on the canvas with a uniform display scale."""
        return self._derive(left=left, top=top, scale_x=scale, scale_y=scale)

    def rotated(self, angle: float) -> "Raster":
        """Return a copy rotated clockwise by *angle* degrees (pixels untouched)."""
        return self._derive(angle=self._angle + float(angle))

    # ------------------------------------------------------------------
    # Pixel export
    # ------------------------------------------------------------------
    def rendered(self) -> Image.Image:
        """Return the pixels as displayed, with the rotation applied."""

        angle = self._angle
        if angle == 0.0:
            return self._image
        quarter = _QUARTER_TURNS.get(int(angle)) if float(angle).is_integer() else None
        if quarter is not None:
            return self._image.transpose(quarter)
        return self._image.rotate(-angle, resample=Image.Resampling.BICUBIC, expand=True)

    def export(self, box: Rect | None = None, *, image_format: str = EXPORT_FORMAT) -> bytes:
        """Encode the rendered raster, or the *box* region of it, to bytes."""

        image = self.rendered()
        if box is not None:
            x0 = max(0, int(round(box.left)))
            y0 = max(0, int(round(box.top)))
            x1 = min(image.width, int(round(box.right)))
            y1 = min(image.height, int(round(box.bottom)))
            image = image.crop((x0, y0, max(x0, x1), max(y0, y1)))
        buffer = BytesIO()
        image.save(buffer, format=image_format)
        return buffer.getvalue()

    def to_array(self) -> np.ndarray:
        return np.asarray(self.rendered())

    def equivalent(self, other: "Raster", tolerance: int = REPLAY_TOLERANCE) -> bool:
        """Return True when *other* renders the same pixels within *tolerance*."""

        mine = self.to_array()
        theirs = other.to_array()
        if mine.shape != theirs.shape:
            return False
        if mine.size == 0:
            return True
        delta = np.abs(mine.astype(np.int32) - theirs.astype(np.int32))
        return int(delta.max()) <= int(tolerance)

    def __repr__(self) -> str:
        return (
            f"Raster({self.native_width}x{self.native_height}, angle={self._angle:g}, "
            f"left={self._left:g}, top={self._top:g}, scale={self._scale_x:g})"
        )


def _decode_image(data: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise RasterDecodeError(f"Cannot decode raster data: {exc}") from exc
    return _normalise_mode(image)


class RasterDecoder:
    """Asynchronous decode constructor.

    The base decoder resolves the returned future before :meth:`decode`
    returns, so continuations run synchronously on the calling stack.
    """

    def decode(self, data: bytes) -> "Future[Raster]":
        future: Future = Future()
        self._resolve(future, data)
        return future

    def _resolve(self, future: Future, data: bytes) -> None:
        try:
            image = _decode_image(data)
        except RasterDecodeError as exc:
            _LOGGER.warning("%s", exc)
            future.set_exception(exc)
            return
        future.set_result(Raster(image, decoder=self))


class DeferredRasterDecoder(RasterDecoder):
    """Decoder that only makes progress when the host pumps it.

    Pending decodes are processed one at a time in submission order, which
    mirrors an event loop delivering image ``load`` callbacks.
    """

    def __init__(self) -> None:
        self._pending: deque[tuple[Future, bytes]] = deque()

    def decode(self, data: bytes) -> "Future[Raster]":
        future: Future = Future()
        self._pending.append((future, data))
        return future

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def run_next(self) -> bool:
        """Resolve the oldest pending decode; return False when idle."""

        if not self._pending:
            return False
        future, data = self._pending.popleft()
        self._resolve(future, data)
        return True

    def run_pending(self) -> int:
        """Drain the queue, including decodes scheduled by continuations."""

        count = 0
        while self.run_next():
            count += 1
        return count

    def fail_next(self, error: Exception | None = None) -> bool:
        """Fail the oldest pending decode instead of decoding it."""

        if not self._pending:
            return False
        future, _data = self._pending.popleft()
        future.set_exception(error or RasterDecodeError("decode aborted"))
        return True


__all__ = ["DeferredRasterDecoder", "Raster", "RasterDecoder"]
