import os
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Widget tests run without a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from iCrop.core.raster import Raster  # noqa: E402


def gradient_image(width: int, height: int) -> Image.Image:
    """Return an RGB image whose pixels encode their own coordinates."""

    xs = np.linspace(0, 255, width, dtype=np.float64)
    ys = np.linspace(0, 255, height, dtype=np.float64)
    red = np.tile(xs, (height, 1))
    green = np.tile(ys[:, None], (1, width))
    blue = (red + green) / 2.0
    pixels = np.stack([red, green, blue], axis=-1).round().astype(np.uint8)
    return Image.fromarray(pixels)


@pytest.fixture
def make_raster():
    """Factory building gradient rasters of a given size."""

    def _make(width: int = 40, height: int = 30, **kwargs) -> Raster:
        return Raster(gradient_image(width, height), **kwargs)

    return _make


@pytest.fixture
def image_file(tmp_path):
    """A 40x30 PNG on disk."""

    path = tmp_path / "source.png"
    gradient_image(40, 30).save(path)
    return path
