"""Editor plugins, instantiated in declaration order."""

from .base import Plugin
from .crop import CropPlugin
from .rotate import RotatePlugin

PLUGINS: dict[str, type[Plugin]] = {
    CropPlugin.name: CropPlugin,
    RotatePlugin.name: RotatePlugin,
}

__all__ = ["CropPlugin", "PLUGINS", "Plugin", "RotatePlugin"]
