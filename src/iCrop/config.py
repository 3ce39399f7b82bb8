"""Default configuration values for iCrop."""

from __future__ import annotations

from typing import Final

# Selection defaults. ``minWidth``/``minHeight`` are expressed in viewport
# pixels, so the default of one pixel only rules out empty rectangles.
DEFAULT_MIN_WIDTH: Final[float] = 1.0
DEFAULT_MIN_HEIGHT: Final[float] = 1.0

# Aspect-ratio corrections are skipped when the current ratio is already this
# close to the configured one.
RATIO_EPSILON: Final[float] = 1e-6

# Distance, in viewport pixels, within which a pointer grabs a corner handle of
# the selection instead of starting a new rectangle or moving the current one.
HANDLE_HIT_PADDING: Final[float] = 8.0

# A committed selection whose width *and* height fall below this size is
# treated as empty.
DEGENERATE_THRESHOLD: Final[float] = 1.0

# Every intermediate raster is re-encoded with a lossless format so replaying
# the transformation list reproduces the incremental result exactly.
EXPORT_FORMAT: Final[str] = "PNG"
REPLAY_TOLERANCE: Final[int] = 0

# Image modes that survive a PNG round trip untouched. Anything else is
# converted to RGBA when a raster is opened.
PNG_SAFE_MODES: Final[frozenset[str]] = frozenset({"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"})

DEFAULT_BACKGROUND_COLOR: Final[str] = "#fff"
