"""Qt widget hosting the timeline engine."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from PyQt6.QtCore import QPointF, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QPainter
from PyQt6.QtWidgets import QAbstractScrollArea, QWidget

from .config import GanttConfig
from .hierarchy import RoadmapNode, flatten_roadmap
from .interaction import CursorHint, InteractionController
from .models import Group, Instant, Item, ViewportState
from .renderer import RenderPipeline
from .scheduler import RedrawReason, RedrawScheduler
from .zoom import apply_zoom, zoom_anchor_pan

logger = logging.getLogger(__name__)

_CURSORS = {
    CursorHint.DEFAULT: Qt.CursorShape.ArrowCursor,
    CursorHint.POINTER: Qt.CursorShape.PointingHandCursor,
    CursorHint.GRAB: Qt.CursorShape.OpenHandCursor,
    CursorHint.GRABBING: Qt.CursorShape.ClosedHandCursor,
}


class GanttChartView(QAbstractScrollArea):
    """Scrollable Gantt timeline.

    The render pipeline paints into an off-screen surface which this widget
    blits into its viewport, offset by the vertical scrollbar. Every visual
    change goes through the redraw scheduler; call :meth:`dispose` before
    the widget is destroyed.
    """

    item_selected = pyqtSignal(object)
    item_activated = pyqtSignal(object)
    hovered_item_changed = pyqtSignal(object)

    def __init__(self, config: Optional[GanttConfig] = None, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.config = config or GanttConfig()
        self.viewport_state = ViewportState()
        self.pipeline = RenderPipeline(self.config, self.viewport_state)
        self.controller = InteractionController(
            self.pipeline,
            on_select=self.item_selected.emit,
            on_activate=self.item_activated.emit,
            request_redraw=self.request_redraw,
        )
        self.scheduler = RedrawScheduler(self._render_frame, self.config, self)
        self._disposed = False
        self._setup_view()
        self._sync_viewport_size()

    def _setup_view(self) -> None:
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.viewport().setMouseTracking(True)
        self.verticalScrollBar().setSingleStep(self.config.row_height)

    # --- Public API -------------------------------------------------------

    def set_items(self, items: Sequence[Item], groups: Optional[Sequence[Group]] = None) -> None:
        """Show ``items``; groups (when given) fix the band order and names."""
        self.pipeline.set_items(items, groups)
        self.request_redraw(RedrawReason.DATA)

    def set_roadmap(self, themes: Sequence[RoadmapNode]) -> None:
        groups, items = flatten_roadmap(themes)
        self.set_items(items, groups)

    def set_today(self, today: Optional[Instant]) -> None:
        self.pipeline.today = today
        self.request_redraw(RedrawReason.DATA)

    def request_redraw(self, reason: RedrawReason = RedrawReason.POINTER) -> None:
        self.scheduler.request(reason)

    def zoom_in(self, anchor_x: Optional[float] = None) -> None:
        self._zoom(True, anchor_x)

    def zoom_out(self, anchor_x: Optional[float] = None) -> None:
        self._zoom(False, anchor_x)

    def reset_view(self) -> None:
        """Back to zoom 1.0 with no pan."""
        self.pipeline.set_zoom(1.0)
        self.pipeline.set_pan_offset(0)
        self.request_redraw(RedrawReason.DATA)

    def dispose(self) -> None:
        """Cancel pending redraws; nothing paints into this widget afterwards."""
        if self._disposed:
            return
        self._disposed = True
        self.scheduler.dispose()

    # --- Internals --------------------------------------------------------

    def _zoom(self, zoom_in: bool, anchor_x: Optional[float]) -> None:
        config = self.config
        current = self.viewport_state.zoom_level
        target = apply_zoom(
            current, zoom_in, step=config.zoom_step, minimum=config.min_zoom_level, maximum=config.max_zoom_level
        )
        if target == current:
            return
        anchor = config.left_margin if anchor_x is None else anchor_x
        pan = zoom_anchor_pan(self.viewport_state.pan_offset_px, anchor, current, target, config.left_margin)
        self.pipeline.set_zoom(target)
        self.pipeline.set_pan_offset(pan)
        logger.debug("Zoom %.2f -> %.2f", current, target)
        self.request_redraw(RedrawReason.DATA)

    def _sync_viewport_size(self) -> None:
        size = self.viewport().size()
        self.pipeline.set_viewport_size(size.width(), size.height(), self.devicePixelRatioF())

    def _render_frame(self) -> None:
        if self._disposed:
            return
        self.pipeline.paint()
        self._update_scroll_range()
        self.viewport().update()

    def _update_scroll_range(self) -> None:
        content_height = self.pipeline.content_height()
        page = self.viewport().height()
        bar = self.verticalScrollBar()
        bar.setPageStep(page)
        bar.setRange(0, max(0, int(content_height - page)))

    def _content_point(self, event) -> QPointF:
        position = event.position()
        return QPointF(position.x(), position.y() + self.verticalScrollBar().value())

    def _apply_cursor(self, hint: CursorHint) -> None:
        self.viewport().setCursor(_CURSORS[hint])

    # --- Qt events --------------------------------------------------------

    def paintEvent(self, event):  # type: ignore[override]
        painter = QPainter(self.viewport())
        painter.fillRect(self.viewport().rect(), QColor("white"))
        surface = self.pipeline.surface
        if surface is not None and not self._disposed:
            painter.drawImage(QPointF(0, -self.verticalScrollBar().value()), surface)
        painter.end()

    def resizeEvent(self, event):  # type: ignore[override]
        super().resizeEvent(event)
        self._sync_viewport_size()
        self.request_redraw(RedrawReason.RESIZE)

    def scrollContentsBy(self, dx: int, dy: int) -> None:  # type: ignore[override]
        self.pipeline.set_scroll_offset(self.verticalScrollBar().value())
        self.viewport().update()
        self.request_redraw(RedrawReason.SCROLL)

    def mousePressEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            point = self._content_point(event)
            self._apply_cursor(self.controller.pointer_down(point.x(), point.y()))
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):  # type: ignore[override]
        point = self._content_point(event)
        result = self.controller.pointer_move(point.x(), point.y())
        self._apply_cursor(result.cursor)
        self.viewport().setToolTip(result.tooltip)
        if result.hover_changed:
            self.hovered_item_changed.emit(result.hovered_item_id)
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            point = self._content_point(event)
            self.controller.pointer_up(point.x(), point.y())
            self.controller.click(point.x(), point.y())
            self._apply_cursor(CursorHint.DEFAULT)
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            point = self._content_point(event)
            self.controller.double_click(point.x(), point.y())
        super().mouseDoubleClickEvent(event)

    def leaveEvent(self, event):  # type: ignore[override]
        self.controller.pointer_leave()
        self.viewport().setToolTip("")
        super().leaveEvent(event)

    def wheelEvent(self, event):  # type: ignore[override]
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            delta = event.angleDelta().y()
            if delta:
                self._zoom(delta > 0, event.position().x())
            event.accept()
            return
        super().wheelEvent(event)

    def keyPressEvent(self, event):  # type: ignore[override]
        if event.key() == Qt.Key.Key_Home:
            self.reset_view()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event):  # type: ignore[override]
        self.dispose()
        super().closeEvent(event)
