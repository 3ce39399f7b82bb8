"""Base class shared by editor plugins."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Mapping

from jsonschema import Draft202012Validator

from ..settings.schema import merge_with_defaults

if TYPE_CHECKING:
    from ..editor import ImageEditor

_PERMISSIVE_SCHEMA: dict[str, Any] = {"type": "object"}


class Plugin:
    """Feature attached to an :class:`~iCrop.editor.ImageEditor`.

    Subclasses declare their ``name``, ``defaults`` and, optionally, a JSON
    ``schema``; the options handed over by the editor are merged over the
    defaults and validated before :meth:`initialize` runs.
    """

    name: ClassVar[str] = ""
    defaults: ClassVar[Mapping[str, Any]] = {}
    schema: ClassVar[Mapping[str, Any]] = _PERMISSIVE_SCHEMA

    def __init__(self, editor: "ImageEditor", options: Mapping[str, Any] | None = None) -> None:
        self.editor = editor
        self.options = merge_with_defaults(
            options,
            self.defaults,
            Draft202012Validator(dict(self.schema)),
        )
        self.initialize()

    def initialize(self) -> None:
        """Hook for subclasses; called once the options are merged."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


__all__ = ["Plugin"]
