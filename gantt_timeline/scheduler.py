"""Debounced, frame-aligned redraw scheduling."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from PyQt6.QtCore import QObject, Qt, QTimer

from .config import GanttConfig

logger = logging.getLogger(__name__)


class RedrawReason(Enum):
    """Why a redraw was requested; resize waits longer than the rest."""

    DATA = "data"
    POINTER = "pointer"
    SCROLL = "scroll"
    RESIZE = "resize"


class RedrawScheduler(QObject):
    """Collapse bursts of redraw requests into one paint per frame.

    A request (re)starts a debounce timer; when it fires, a frame timer is
    armed and the paint callback runs on its timeout. Any request arriving in
    between cancels both and starts over, so only the last request of a burst
    paints, and it paints whatever state is current at that moment. The owner
    must call :meth:`dispose` before tearing down the surface.
    """

    def __init__(
        self,
        paint: Callable[[], None],
        config: Optional[GanttConfig] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._paint = paint
        self._config = config or GanttConfig()
        self._disposed = False
        self._pending_delay = 0
        self.paint_count = 0

        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.timeout.connect(self._on_debounce)

        self._frame = QTimer(self)
        self._frame.setSingleShot(True)
        self._frame.setTimerType(Qt.TimerType.PreciseTimer)
        self._frame.timeout.connect(self._on_frame)

    # --- Introspection ----------------------------------------------------

    @property
    def is_pending(self) -> bool:
        return self._debounce.isActive() or self._frame.isActive()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def delay_for(self, reason: RedrawReason) -> int:
        if reason is RedrawReason.RESIZE:
            return self._config.resize_debounce_ms
        return self._config.pointer_debounce_ms

    # --- Control ----------------------------------------------------------

    def request(self, reason: RedrawReason = RedrawReason.POINTER) -> None:
        """Ask for a repaint; restarts the debounce window."""
        if self._disposed:
            return
        delay = self.delay_for(reason)
        if self.is_pending:
            delay = max(delay, self._pending_delay)
        self._frame.stop()
        self._pending_delay = delay
        self._debounce.start(delay)

    def flush(self) -> bool:
        """Paint immediately, dropping whatever was pending."""
        if self._disposed:
            return False
        self.cancel()
        self._run_paint()
        return True

    def cancel(self) -> None:
        self._debounce.stop()
        self._frame.stop()
        self._pending_delay = 0

    def dispose(self) -> None:
        """Cancel pending timers; later requests and stray timeouts are ignored."""
        self.cancel()
        self._disposed = True
        logger.debug("Redraw scheduler disposed after %d paints", self.paint_count)

    # --- Timer callbacks --------------------------------------------------

    def _on_debounce(self) -> None:
        if self._disposed:
            return
        self._frame.start(self._config.frame_interval_ms)

    def _on_frame(self) -> None:
        if self._disposed:
            return
        self._pending_delay = 0
        self._run_paint()

    def _run_paint(self) -> None:
        self.paint_count += 1
        self._paint()
