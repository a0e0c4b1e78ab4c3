"""Pointer interaction: hit-testing, drag-to-pan and tooltip text."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from .models import InteractionState, Item, as_date
from .renderer import RenderPipeline, RenderableBar, bar_rect
from .scale import MONTH_NAMES
from .scheduler import RedrawReason

logger = logging.getLogger(__name__)

ItemCallback = Callable[[Item], None]


class CursorHint(Enum):
    DEFAULT = "default"
    POINTER = "pointer"
    GRAB = "grab"
    GRABBING = "grabbing"


@dataclass(frozen=True)
class PointerResult:
    """Outcome of a pointer move, for the host to reflect in its UI."""

    hovered_item_id: Optional[str]
    hover_changed: bool
    panned: bool
    cursor: CursorHint
    tooltip: str


def status_label(status: str) -> str:
    """Human label for a status tag, e.g. ``in-progress`` -> ``In Progress``."""
    if not status:
        return "Unknown"
    return status.replace("-", " ").replace("_", " ").title()


def format_tooltip_date(value) -> str:
    """``Jan 5, 2024``, with ``09:30`` appended when the value carries a time."""
    day = as_date(value)
    text = f"{MONTH_NAMES[day.month - 1]} {day.day}, {day.year}"
    if isinstance(value, datetime):
        text += f" {value:%H:%M}"
    return text


def tooltip_text(item: Item) -> str:
    """Tooltip lines for a hovered item: the name, then progress details if any."""
    lines: List[str] = [item.name]
    progress = item.progress
    if progress is not None:
        lines.append(f"Status: {status_label(progress.status)}")
        lines.append(f"Progress: {progress.percent_complete:g}%")
        if progress.last_update_time is not None:
            lines.append(f"Last Update: {format_tooltip_date(progress.last_update_time)}")
        if progress.last_update_summary:
            lines.append(f"Summary: {progress.last_update_summary}")
    return "\n".join(lines)


class InteractionController:
    """Translates pointer events into hover, pan and selection changes.

    The controller reads bar geometry from the render pipeline but never
    mutates it; it owns the :class:`InteractionState` and the pan offset.
    """

    def __init__(
        self,
        pipeline: RenderPipeline,
        *,
        on_select: Optional[ItemCallback] = None,
        on_activate: Optional[ItemCallback] = None,
        request_redraw: Optional[Callable[[RedrawReason], None]] = None,
    ) -> None:
        self.pipeline = pipeline
        self.state: InteractionState = pipeline.interaction
        self.on_select = on_select
        self.on_activate = on_activate
        self._request_redraw = request_redraw

    def _redraw(self) -> None:
        if self._request_redraw is not None:
            self._request_redraw(RedrawReason.POINTER)

    def hit_test(self, x: float, y: float) -> Optional[RenderableBar]:
        """First bar whose rectangle (pan applied) contains the point, inclusive.

        Uses the geometry of the last layout pass; a stale layout is left for
        the next paint to refresh.
        """
        config = self.pipeline.config
        pan = self.pipeline.viewport.pan_offset_px
        for bar in self.pipeline.last_layout.bars:
            left, top, width, height = bar_rect(bar, config, pan)
            if left <= x <= left + width and top <= y <= top + height:
                return bar
        return None

    def _cursor_for(self, y: float, bar: Optional[RenderableBar]) -> CursorHint:
        if self.state.dragging:
            return CursorHint.GRABBING
        if y < self.pipeline.config.header_height:
            return CursorHint.GRAB
        return CursorHint.POINTER if bar is not None else CursorHint.DEFAULT

    def pointer_down(self, x: float, y: float) -> CursorHint:
        """Start a pan gesture anchored at ``x``."""
        self.state.dragging = True
        self.state.drag_anchor_x = x
        self.state.drag_anchor_pan_offset = self.pipeline.viewport.pan_offset_px
        self.state.drag_moved = False
        self.state.suppress_click = False
        return CursorHint.GRABBING

    def pointer_move(self, x: float, y: float) -> PointerResult:
        panned = False
        if self.state.dragging:
            delta = x - self.state.drag_anchor_x
            if abs(delta) >= self.pipeline.config.drag_threshold_px:
                self.state.drag_moved = True
            new_offset = self.state.drag_anchor_pan_offset + delta
            if new_offset != self.pipeline.viewport.pan_offset_px:
                self.pipeline.set_pan_offset(new_offset)
                panned = True

        bar = self.hit_test(x, y)
        hovered = bar.item_id if bar is not None else None
        hover_changed = hovered != self.state.hovered_item_id
        self.state.hovered_item_id = hovered
        if panned or hover_changed:
            self._redraw()
        return PointerResult(
            hovered_item_id=hovered,
            hover_changed=hover_changed,
            panned=panned,
            cursor=self._cursor_for(y, bar),
            tooltip=tooltip_text(bar.item) if bar is not None else "",
        )

    def pointer_up(self, x: float, y: float) -> bool:
        """End the pan gesture; returns True when the pointer actually dragged."""
        moved = self.state.dragging and self.state.drag_moved
        self.state.dragging = False
        self.state.drag_moved = False
        self.state.suppress_click = moved
        return moved

    def pointer_leave(self) -> None:
        self.state.dragging = False
        self.state.drag_moved = False
        self.state.suppress_click = False
        if self.state.hovered_item_id is not None:
            self.state.hovered_item_id = None
            self._redraw()

    def click(self, x: float, y: float) -> Optional[Item]:
        """Select the bar under the pointer unless a drag just finished."""
        if self.state.suppress_click:
            self.state.suppress_click = False
            return None
        bar = self.hit_test(x, y)
        if bar is None:
            return None
        logger.debug("Selected item %s", bar.item_id)
        if self.on_select is not None:
            self.on_select(bar.item)
        return bar.item

    def double_click(self, x: float, y: float) -> Optional[Item]:
        bar = self.hit_test(x, y)
        if bar is None:
            return None
        logger.debug("Activated item %s", bar.item_id)
        if self.on_activate is not None:
            self.on_activate(bar.item)
        return bar.item
