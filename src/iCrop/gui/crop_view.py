"""Qt canvas showing the working raster and the crop selection."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QImage, QKeyEvent, QMouseEvent, QPainter, QPainterPath, QPen, QPixmap
from PySide6.QtWidgets import QWidget

from ..core.geometry import Point, Rect
from ..editor import ImageEditor
from ..plugins import CropPlugin

_LOGGER = logging.getLogger(__name__)

_OVERLAY_COLOR = QColor(0, 0, 0, 128)
_BORDER_COLOR = QColor("#ffffff")
_GRID_COLOR = QColor(255, 255, 255, 110)
_HANDLE_SIZE = 8.0


def _to_qrect(rect: Rect) -> QRectF:
    return QRectF(rect.left, rect.top, rect.width, rect.height)


class CropView(QWidget):
    """Map Qt input onto the crop plugin's selection engine and paint the result."""

    selectionChanged = Signal()

    def __init__(self, editor: ImageEditor, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._editor = editor
        self._pixmap: Optional[QPixmap] = None
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setCursor(Qt.CursorShape.CrossCursor)

        editor.pipeline.refreshed.connect(self._on_refreshed)
        plugin = self.crop_plugin
        if plugin is not None:
            plugin.engine.selection_changed.connect(self._on_selection_changed)
        self._on_refreshed()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def editor(self) -> ImageEditor:
        return self._editor

    @property
    def crop_plugin(self) -> Optional[CropPlugin]:
        plugin = self._editor.plugin(CropPlugin.name)
        return plugin if isinstance(plugin, CropPlugin) else None

    def pixmap(self) -> Optional[QPixmap]:
        return self._pixmap

    # ------------------------------------------------------------------
    # Editor callbacks
    # ------------------------------------------------------------------
    def _on_refreshed(self) -> None:
        working = self._editor.image
        if working is None:
            self._pixmap = None
        else:
            image = QImage.fromData(working.export())
            if image.isNull():
                _LOGGER.warning("Qt could not decode the working raster %r", working)
                self._pixmap = None
            else:
                self._pixmap = QPixmap.fromImage(image)
        canvas = self._editor.canvas_size()
        self.setFixedSize(max(1, round(canvas.width)), max(1, round(canvas.height)))
        self.update()

    def _on_selection_changed(self) -> None:
        self.selectionChanged.emit()
        self.update()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------
    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(self._editor.options.background_color))

        working = self._editor.image
        if self._pixmap is not None and working is not None:
            painter.drawPixmap(_to_qrect(working.bounds()), self._pixmap, QRectF(self._pixmap.rect()))

        plugin = self.crop_plugin
        selection = plugin.engine.rect if plugin is not None else None
        if selection is not None and (selection.width > 0 or selection.height > 0):
            self._paint_selection(painter, selection)
        painter.end()

    def _paint_selection(self, painter: QPainter, selection: Rect) -> None:
        zone = _to_qrect(selection)

        # Shade everything outside the selection.
        shade = QPainterPath()
        shade.addRect(QRectF(self.rect()))
        inner = QPainterPath()
        inner.addRect(zone)
        painter.fillPath(shade.subtracted(inner), _OVERLAY_COLOR)

        painter.setPen(QPen(_GRID_COLOR, 1))
        for step in (1, 2):
            x = zone.left() + zone.width() * step / 3.0
            y = zone.top() + zone.height() * step / 3.0
            painter.drawLine(QPointF(x, zone.top()), QPointF(x, zone.bottom()))
            painter.drawLine(QPointF(zone.left(), y), QPointF(zone.right(), y))

        painter.setPen(QPen(_BORDER_COLOR, 1))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(zone)

        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QColor("#444444"))
        half = _HANDLE_SIZE / 2.0
        for corner in (zone.topLeft(), zone.topRight(), zone.bottomRight(), zone.bottomLeft()):
            painter.drawRect(QRectF(corner.x() - half, corner.y() - half, _HANDLE_SIZE, _HANDLE_SIZE))

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    @staticmethod
    def _point(event: QMouseEvent) -> Point:
        position = event.position()
        return Point(position.x(), position.y())

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        plugin = self.crop_plugin
        if plugin is None or event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        plugin.engine.on_pointer_down(self._point(event))
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        plugin = self.crop_plugin
        if plugin is None:
            super().mouseMoveEvent(event)
            return
        plugin.engine.on_pointer_move(self._point(event))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        plugin = self.crop_plugin
        if plugin is None or event.button() != Qt.MouseButton.LeftButton:
            super().mouseReleaseEvent(event)
            return
        plugin.engine.on_pointer_up(self._point(event))
        event.accept()

    def keyPressEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        plugin = self.crop_plugin
        if plugin is None or event.isAutoRepeat():
            super().keyPressEvent(event)
            return
        if event.key() in (Qt.Key.Key_Return, Qt.Key.Key_Enter):
            plugin.crop_current_zone()
            event.accept()
            return
        plugin.engine.on_key_down(int(event.key()))
        super().keyPressEvent(event)

    def keyReleaseEvent(self, event: QKeyEvent) -> None:  # type: ignore[override]
        plugin = self.crop_plugin
        if plugin is None or event.isAutoRepeat():
            super().keyReleaseEvent(event)
            return
        plugin.engine.on_key_up(int(event.key()))
        super().keyReleaseEvent(event)


__all__ = ["CropView"]
