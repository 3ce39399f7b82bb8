"""Typed views over validated option mappings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .schema import merge_editor_options, merge_select_options


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


@dataclass(frozen=True)
class SelectOptions:
    """Options recognised by the selection engine."""

    min_width: float = 1.0
    min_height: float = 1.0
    ratio: float | None = None
    quick_select_key: int | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None = None) -> "SelectOptions":
        """Validate *values* (camelCase keys) and build the options object.

        Raises :class:`~iCrop.errors.InvalidConfigurationError` for
        non-positive minimum sizes, a non-positive ratio or a malformed key.
        """

        merged = merge_select_options(values)
        key = merged["quickSelectKey"]
        return cls(
            min_width=float(merged["minWidth"]),
            min_height=float(merged["minHeight"]),
            ratio=_optional_float(merged["ratio"]),
            quick_select_key=None if key is False or key is None else int(key),
        )

    def as_mapping(self) -> dict[str, Any]:
        return {
            "minWidth": self.min_width,
            "minHeight": self.min_height,
            "ratio": self.ratio,
            "quickSelectKey": False if self.quick_select_key is None else self.quick_select_key,
        }


@dataclass(frozen=True)
class EditorOptions:
    """Canvas sizing options plus the raw per-plugin configuration."""

    min_width: float | None = None
    min_height: float | None = None
    max_width: float | None = None
    max_height: float | None = None
    ratio: float | None = None
    background_color: str = "#fff"
    plugins: Mapping[str, Any] | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any] | None = None) -> "EditorOptions":
        merged = merge_editor_options(values)
        return cls(
            min_width=_optional_float(merged["minWidth"]),
            min_height=_optional_float(merged["minHeight"]),
            max_width=_optional_float(merged["maxWidth"]),
            max_height=_optional_float(merged["maxHeight"]),
            ratio=_optional_float(merged["ratio"]),
            background_color=str(merged["backgroundColor"]),
            plugins=dict(merged["plugins"]),
        )

    def plugin_options(self, name: str) -> Any:
        """Return the raw options for plugin *name* (``False`` disables it)."""

        return (self.plugins or {}).get(name)
