"""Pure Python signal system with no Qt dependency.

The engine and the pipeline announce state changes through ``Signal``
instances. Handlers run synchronously, after the state mutation that triggered
the emission has completed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

_logger = logging.getLogger(__name__)


class Signal:
    """Ordered list of callbacks fired by :meth:`emit`.

    Exceptions raised by individual handlers are caught and logged so that one
    failing handler does not prevent subsequent handlers from executing.
    """

    def __init__(self, name: str = "") -> None:
        self._name = name
        self._handlers: list[Callable] = []

    @property
    def name(self) -> str:
        return self._name

    def connect(self, handler: Callable) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def disconnect(self, handler: Callable) -> None:
        self._handlers.remove(handler)

    def emit(self, *args: Any, **kwargs: Any) -> None:
        handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(*args, **kwargs)
            except Exception as exc:
                _logger.error("Signal %s handler %r failed: %s", self._name or "<anonymous>", handler, exc)

    @property
    def handler_count(self) -> int:
        return len(self._handlers)
