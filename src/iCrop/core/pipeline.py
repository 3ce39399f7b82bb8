"""Ordered, replayable sequence of raster transformations.

The pipeline owns the authoritative ``source`` raster and the ``working``
copy shown to the user. ``working`` is never edited in place: after every
change it is re-derived from ``source`` by exporting and decoding it again and
handing the result to the layout callback.

Only one operation runs at a time. ``append`` is refused while another append,
a replay or a refresh is in flight; ``reinitialize`` requests arriving at that
moment are queued and served once the pipeline goes idle.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from functools import partial
from typing import Callable, Sequence

from ..errors import PipelineBusyError
from ..events import Signal
from .raster import Raster
from .transformations import Transformation

_LOGGER = logging.getLogger(__name__)


def _identity_layout(raster: Raster) -> Raster:
    return raster


class TransformationPipeline:
    """Apply transformations sequentially and replay them on demand."""

    def __init__(
        self,
        original: Raster,
        *,
        layout: Callable[[Raster], Raster] | None = None,
    ) -> None:
        self._original = original
        self._source = original
        self._working: Raster | None = None
        self._layout = layout or _identity_layout
        self._transformations: list[Transformation] = []
        self._busy = False
        self._queued_reinitialize: list[Future] = []

        self.transformation_applied = Signal("transformation applied")
        self.reinitialized = Signal("reinitialized")
        self.refreshed = Signal("refreshed")
        self.failed = Signal("failed")

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def original(self) -> Raster:
        return self._original

    @property
    def source(self) -> Raster:
        return self._source

    @property
    def working(self) -> Raster | None:
        return self._working

    @property
    def transformations(self) -> tuple[Transformation, ...]:
        return tuple(self._transformations)

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def queued_reinitialize_count(self) -> int:
        return len(self._queued_reinitialize)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def append(self, transformation: Transformation) -> "Future[Raster]":
        """Record *transformation* and apply it to ``source``.

        The returned future resolves with the new ``source`` once ``working``
        has been refreshed and ``transformation_applied`` has fired.
        """

        if self._busy:
            raise PipelineBusyError(
                f"cannot append {transformation.kind!r} while another operation is in flight"
            )
        self._busy = True
        self._transformations.append(transformation)
        index = len(self._transformations) - 1
        waiters: list[Future] = [Future()]
        _LOGGER.debug("Applying %r (step %d)", transformation, index + 1)
        try:
            step = self._start(transformation, self._source)
        except Exception:
            self._transformations.pop()
            self._busy = False
            raise
        step.add_done_callback(partial(self._on_appended, index=index, waiters=waiters))
        return waiters[0]

    def reinitialize(self) -> "Future[Raster]":
        """Rebuild ``source`` from the original raster by replaying every step."""

        result: Future = Future()
        if self._busy:
            _LOGGER.debug("Reinitialize requested while busy; queued")
            self._queued_reinitialize.append(result)
            return result
        self._run_reinitialize([result])
        return result

    def refresh(self) -> "Future[Raster]":
        """Re-derive ``working`` from ``source``."""

        if self._busy:
            raise PipelineBusyError("cannot refresh while another operation is in flight")
        self._busy = True
        waiters: list[Future] = [Future()]
        self._refresh(waiters, then=partial(self._resolve, waiters))
        return waiters[0]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @staticmethod
    def _start(transformation: Transformation, raster: Raster) -> Future:
        step: Future = Future()
        try:
            transformation.apply(raster, step)
        except Exception as exc:
            if step.done():
                raise
            step.set_exception(exc)
        return step

    def _on_appended(self, done: Future, *, index: int, waiters: list[Future]) -> None:
        try:
            error = done.exception()
            if error is not None:
                del self._transformations[index:]
                self._fail(waiters, error)
                return
            produced = done.result()
            if produced is not None:
                self._source = produced
            self._refresh(waiters, then=partial(self._announce_applied, waiters))
        except Exception as exc:
            self._fail(waiters, exc)

    def _announce_applied(self, waiters: list[Future]) -> None:
        self.transformation_applied.emit()
        self._resolve(waiters)

    def _run_reinitialize(self, waiters: list[Future]) -> None:
        self._busy = True
        self._source = self._original
        _LOGGER.debug("Replaying %d transformation(s)", len(self._transformations))
        self._replay(0, waiters)

    def _replay(self, index: int, waiters: list[Future]) -> None:
        # Steps that complete synchronously are folded in this loop; only a
        # pending step suspends the replay and resumes it from its callback.
        try:
            while index < len(self._transformations):
                step = self._start(self._transformations[index], self._source)
                if not step.done():
                    step.add_done_callback(partial(self._on_replayed, index=index, waiters=waiters))
                    return
                if not self._consume_replayed(step, index, waiters):
                    return
                index += 1
            self.reinitialized.emit()
            self._refresh(waiters, then=partial(self._resolve, waiters))
        except Exception as exc:
            self._fail(waiters, exc)

    def _on_replayed(self, done: Future, *, index: int, waiters: list[Future]) -> None:
        try:
            if not self._consume_replayed(done, index, waiters):
                return
        except Exception as exc:
            self._fail(waiters, exc)
            return
        self._replay(index + 1, waiters)

    def _consume_replayed(self, done: Future, index: int, waiters: list[Future]) -> bool:
        """Fold a finished replay step into ``source``; False stops the replay."""

        error = done.exception()
        if error is not None:
            dropped = len(self._transformations) - index
            del self._transformations[index:]
            _LOGGER.error("Replay stopped at step %d; dropped %d transformation(s)", index + 1, dropped)
            self._refresh(waiters, then=partial(self._fail, waiters, error))
            return False
        produced = done.result()
        if produced is not None:
            self._source = produced
        return True

    def _refresh(self, waiters: list[Future], *, then: Callable[[], None]) -> None:
        source = self._source
        try:
            decoded = source.decoder.decode(source.export())
        except Exception as exc:
            self._fail(waiters, exc)
            return
        decoded.add_done_callback(partial(self._on_refreshed, waiters=waiters, then=then))

    def _on_refreshed(self, done: Future, *, waiters: list[Future], then: Callable[[], None]) -> None:
        try:
            error = done.exception()
            if error is not None:
                self._fail(waiters, error)
                return
            self._working = self._layout(done.result())
        except Exception as exc:
            self._fail(waiters, exc)
            return
        self._busy = False
        self.refreshed.emit()
        try:
            then()
        except Exception as exc:
            self._fail(waiters, exc)

    def _resolve(self, waiters: Sequence[Future]) -> None:
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(self._source)
        self._drain_queue()

    def _fail(self, waiters: Sequence[Future], error: BaseException) -> None:
        self._busy = False
        _LOGGER.error("Transformation pipeline failed: %s", error)
        self.failed.emit(error)
        for waiter in waiters:
            if not waiter.done():
                waiter.set_exception(error)
        self._drain_queue()

    def _drain_queue(self) -> None:
        if self._busy or not self._queued_reinitialize:
            return
        waiters = list(self._queued_reinitialize)
        self._queued_reinitialize.clear()
        self._run_reinitialize(waiters)


__all__ = ["TransformationPipeline"]
