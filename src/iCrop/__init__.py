"""Interactive image cropping with a replayable transformation pipeline."""

__version__ = "0.1.0"
