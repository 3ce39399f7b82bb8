"""Schema helpers for editor and plugin options."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from ..config import DEFAULT_BACKGROUND_COLOR, DEFAULT_MIN_HEIGHT, DEFAULT_MIN_WIDTH
from ..errors import InvalidConfigurationError

_POSITIVE_OR_NULL: dict[str, Any] = {"type": ["number", "null"], "exclusiveMinimum": 0}

EDITOR_SCHEMA: dict[str, Any] = {
    "$id": "iCrop/editor.schema.json",
    "type": "object",
    "properties": {
        "minWidth": _POSITIVE_OR_NULL,
        "minHeight": _POSITIVE_OR_NULL,
        "maxWidth": _POSITIVE_OR_NULL,
        "maxHeight": _POSITIVE_OR_NULL,
        "ratio": _POSITIVE_OR_NULL,
        "backgroundColor": {"type": "string"},
        "plugins": {
            "type": "object",
            "additionalProperties": {
                "anyOf": [{"type": "object"}, {"const": False}],
            },
        },
    },
    "additionalProperties": True,
}

SELECT_SCHEMA: dict[str, Any] = {
    "$id": "iCrop/select.schema.json",
    "type": "object",
    "properties": {
        "minWidth": {"type": "number", "exclusiveMinimum": 0},
        "minHeight": {"type": "number", "exclusiveMinimum": 0},
        "ratio": _POSITIVE_OR_NULL,
        # ``false``/``null`` disables quick select, an integer is the key code.
        "quickSelectKey": {
            "anyOf": [
                {"type": "integer", "minimum": 0},
                {"enum": [False, None]},
            ],
        },
    },
    "additionalProperties": True,
}

DEFAULT_EDITOR_OPTIONS: dict[str, Any] = {
    "minWidth": None,
    "minHeight": None,
    "maxWidth": None,
    "maxHeight": None,
    "ratio": None,
    "backgroundColor": DEFAULT_BACKGROUND_COLOR,
    "plugins": {},
}

DEFAULT_SELECT_OPTIONS: dict[str, Any] = {
    "minWidth": DEFAULT_MIN_WIDTH,
    "minHeight": DEFAULT_MIN_HEIGHT,
    "ratio": None,
    "quickSelectKey": False,
}

_editor_validator = Draft202012Validator(EDITOR_SCHEMA)
_select_validator = Draft202012Validator(SELECT_SCHEMA)


def _validate(validator: Draft202012Validator, data: Mapping[str, Any]) -> None:
    errors = sorted(validator.iter_errors(data), key=lambda err: list(err.path))
    if not errors:
        return
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.path) or "<root>"
        messages.append(f"{location}: {error.message}")
    raise InvalidConfigurationError("; ".join(messages))


def merge_with_defaults(
    data: Mapping[str, Any] | None,
    defaults: Mapping[str, Any],
    validator: Draft202012Validator,
) -> dict[str, Any]:
    """Merge *data* over *defaults* and validate the result."""

    if data is not None and not isinstance(data, Mapping):
        raise InvalidConfigurationError(f"options must be a mapping, got {type(data).__name__}")
    merged = deepcopy(dict(defaults))
    if data:
        for key, value in data.items():
            if key == "plugins" and isinstance(value, Mapping):
                target = merged.setdefault("plugins", {})
                for name, plugin_options in value.items():
                    target[name] = plugin_options
                continue
            merged[key] = value
    _validate(validator, merged)
    return merged


def merge_editor_options(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return validated editor options."""

    return merge_with_defaults(data, DEFAULT_EDITOR_OPTIONS, _editor_validator)


def merge_select_options(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return validated selection options."""

    return merge_with_defaults(data, DEFAULT_SELECT_OPTIONS, _select_validator)


__all__ = [
    "DEFAULT_EDITOR_OPTIONS",
    "DEFAULT_SELECT_OPTIONS",
    "EDITOR_SCHEMA",
    "SELECT_SCHEMA",
    "merge_editor_options",
    "merge_select_options",
    "merge_with_defaults",
]
