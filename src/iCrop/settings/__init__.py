from .options import EditorOptions, SelectOptions
from .schema import (
    DEFAULT_EDITOR_OPTIONS,
    DEFAULT_SELECT_OPTIONS,
    merge_editor_options,
    merge_select_options,
)

__all__ = [
    "DEFAULT_EDITOR_OPTIONS",
    "DEFAULT_SELECT_OPTIONS",
    "EditorOptions",
    "SelectOptions",
    "merge_editor_options",
    "merge_select_options",
]
