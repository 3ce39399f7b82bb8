from __future__ import annotations

import logging
import sys

_INSTALLED_HANDLERS: dict[str, logging.Handler] = {}

_FORMAT = "%(levelname)s %(name)s: %(message)s"


def ensure_console_logger(
    logger: logging.Logger,
    handler_name: str,
    *,
    level: int = logging.INFO,
) -> logging.Handler:
    """Attach a stdout handler called *handler_name* to *logger* once.

    Calling again with another *level* only adjusts the existing handler.
    """

    handler = _INSTALLED_HANDLERS.get(handler_name)
    if handler is None:
        for existing in logger.handlers:
            if getattr(existing, "name", None) == handler_name:
                handler = existing
                break
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.name = handler_name
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    elif isinstance(handler, logging.StreamHandler):
        # Follow stdout when it has been swapped since the first call.
        handler.setStream(sys.stdout)
    handler.setLevel(level)
    logger.setLevel(level)
    _INSTALLED_HANDLERS[handler_name] = handler
    return handler
