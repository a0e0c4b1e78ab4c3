"""Render pipeline: layout the chart and paint it onto a DPR-aware surface."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence, Tuple

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QImage, QPainter, QPen

from .config import GanttConfig
from .geometry import BarGeometry, calculate_bar
from .models import Group, InteractionState, Item, ViewportState
from .rows import RowAssignment, assign_rows
from .scale import (
    HeaderCell,
    ScaleModel,
    TimeUnit,
    WeekCell,
    calculate_scale,
    month_cells,
    quarter_cells,
    week_cells,
)
from .zoom import time_unit_for_zoom

logger = logging.getLogger(__name__)

EMPTY_MESSAGE = "No roadmap items to display"
EMPTY_HINT = "Create themes, products, and features to get started"
OFFSCREEN_SLACK = 50
PROGRESS_OVERLAY = QColor(0, 0, 0, 38)
BAR_TEXT_COLOR = QColor("#ffffff")
LABEL_BACKGROUND = QColor("#ffffff")
SURFACE_BACKGROUND = QColor("#ffffff")


@dataclass(frozen=True)
class RenderableBar:
    """An item with its row and pixel geometry resolved."""

    item: Item
    row: int
    geometry: BarGeometry
    theme_color: str

    @property
    def item_id(self) -> str:
        return self.item.id


@dataclass
class LayoutResult:
    """Everything derived from the item list and viewport width."""

    scale: Optional[ScaleModel] = None
    rows: RowAssignment = field(default_factory=RowAssignment)
    bars: List[RenderableBar] = field(default_factory=list)
    skipped: List[Item] = field(default_factory=list)
    quarters: List[HeaderCell] = field(default_factory=list)
    months: List[HeaderCell] = field(default_factory=list)
    weeks: List[WeekCell] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.scale is None


def bar_rect(bar: RenderableBar, config: GanttConfig, pan_offset: float) -> Tuple[float, float, float, float]:
    """(x, y, width, height) of a bar on the surface with the pan applied."""
    y = config.header_height + bar.row * config.row_height + config.row_padding
    return bar.geometry.x + pan_offset, y, bar.geometry.width, config.bar_height


def rows_in_view(scroll_offset: float, viewport_height: float, config: GanttConfig) -> Tuple[int, int]:
    """Inclusive row range intersecting the viewport, padded by one row each side."""
    top = max(0.0, scroll_offset - config.header_height)
    bottom = max(0.0, scroll_offset + viewport_height - config.header_height)
    first = math.floor(top / config.row_height) - 1
    last = math.ceil(bottom / config.row_height)
    return max(0, first), last


def visible_bars_for_viewport(
    bars: Sequence[RenderableBar], scroll_offset: float, viewport_height: float, config: GanttConfig
) -> List[RenderableBar]:
    """Virtual scrolling: below the threshold every bar is painted."""
    if len(bars) < config.virtual_scroll_threshold:
        return list(bars)
    first, last = rows_in_view(scroll_offset, viewport_height, config)
    return [bar for bar in bars if first <= bar.row <= last]


def _font(pixel_size: int, bold: bool = False) -> QFont:
    font = QFont()
    font.setPixelSize(pixel_size)
    font.setBold(bold)
    return font


class RenderPipeline:
    """Owns the drawing surface and every geometry cache derived from the items.

    Layout (scale, rows, bars) reruns only when the item list or the viewport
    width/zoom changed since the previous layout; paint runs on every call.
    """

    def __init__(
        self,
        config: Optional[GanttConfig] = None,
        viewport: Optional[ViewportState] = None,
        interaction: Optional[InteractionState] = None,
    ) -> None:
        self.config = config or GanttConfig()
        self.viewport = viewport or ViewportState()
        self.interaction = interaction or InteractionState()
        self.today: Optional[date] = None
        self.surface: Optional[QImage] = None
        self.layout_count = 0
        self.paint_count = 0
        self._items: List[Item] = []
        self._groups: Optional[List[Group]] = None
        self._items_generation = 0
        self._viewport_generation = 0
        self._laid_out: Optional[Tuple[int, int]] = None
        self._layout = LayoutResult()
        self._clamp_viewport()

    # --- State updates ----------------------------------------------------

    def set_items(self, items: Sequence[Item], groups: Optional[Sequence[Group]] = None) -> None:
        """Replace the item list; layout is recomputed on the next paint."""
        self._items = list(items)
        self._groups = list(groups) if groups is not None else None
        self._items_generation += 1

    def set_viewport_size(self, width: float, height: float, device_pixel_ratio: Optional[float] = None) -> None:
        previous_width = self.viewport.width_px
        self.viewport.width_px = width
        self.viewport.height_px = height
        if device_pixel_ratio is not None:
            self.viewport.device_pixel_ratio = device_pixel_ratio
        self._clamp_viewport()
        if self.viewport.width_px != previous_width:
            self._viewport_generation += 1

    def set_zoom(self, zoom_level: float) -> None:
        if zoom_level != self.viewport.zoom_level:
            self.viewport.zoom_level = zoom_level
            self._viewport_generation += 1

    def set_pan_offset(self, pan_offset: float) -> None:
        self.viewport.pan_offset_px = pan_offset

    def set_scroll_offset(self, scroll_offset: float) -> None:
        self.viewport.vertical_scroll_px = max(0.0, scroll_offset)

    def _clamp_viewport(self) -> None:
        self.viewport.width_px = max(float(self.viewport.width_px), float(self.config.min_viewport_width))
        self.viewport.height_px = max(float(self.viewport.height_px), float(self.config.min_viewport_height))
        if not self.viewport.device_pixel_ratio or self.viewport.device_pixel_ratio <= 0:
            self.viewport.device_pixel_ratio = 1.0

    # --- Layout -----------------------------------------------------------

    @property
    def is_layout_stale(self) -> bool:
        return self._laid_out != (self._items_generation, self._viewport_generation)

    @property
    def items(self) -> List[Item]:
        return list(self._items)

    @property
    def bars(self) -> List[RenderableBar]:
        return self.layout().bars

    @property
    def last_layout(self) -> LayoutResult:
        """Result of the most recent layout pass, never recomputed here."""
        return self._layout

    def layout(self) -> LayoutResult:
        """Recompute derived geometry if the items or viewport changed."""
        if not self.is_layout_stale:
            return self._layout
        config = self.config
        drawable: List[Item] = []
        skipped: List[Item] = []
        for item in self._items:
            if item.span.is_valid():
                drawable.append(item)
            else:
                skipped.append(item)
                logger.warning(
                    "Skipping item %r: end %s is before start %s", item.id, item.span.end, item.span.start
                )

        unit = time_unit_for_zoom(self.viewport.zoom_level) if config.auto_division_unit else TimeUnit.MONTH
        scale = calculate_scale(
            drawable,
            self.viewport.width_px,
            config.left_margin,
            buffer_days=config.date_buffer_days,
            zoom_level=self.viewport.zoom_level,
            unit=unit,
            min_width=config.min_viewport_width,
        )
        result = LayoutResult(skipped=skipped)
        if scale is not None:
            rows = assign_rows(drawable, self._groups, empty_group_policy=config.empty_group_policy)
            result.scale = scale
            result.rows = rows
            for item in drawable:
                row = rows.row_for(item.id)
                if row is None:
                    continue
                geometry = calculate_bar(
                    item, scale, clip_policy=config.bar_clip_policy, min_width=config.min_bar_width
                )
                result.bars.append(
                    RenderableBar(item=item, row=row, geometry=geometry, theme_color=config.theme_color(item.theme_index))
                )
            result.quarters = quarter_cells(scale)
            result.months = month_cells(scale)
            result.weeks = week_cells(scale)

        self._layout = result
        self._laid_out = (self._items_generation, self._viewport_generation)
        self.layout_count += 1
        logger.debug(
            "Layout #%d: %d bars, %d rows, %d skipped",
            self.layout_count,
            len(result.bars),
            result.rows.total_rows,
            len(skipped),
        )
        return result

    def content_height(self) -> float:
        """Logical surface height: header plus every row, at least the viewport."""
        rows = self.layout().rows.total_rows
        return max(self.config.header_height + max(rows, 1) * self.config.row_height, self.viewport.height_px)

    def surface_size(self) -> Tuple[float, float]:
        return self.viewport.width_px, self.content_height()

    def paint_set(self) -> List[RenderableBar]:
        return visible_bars_for_viewport(
            self.layout().bars, self.viewport.vertical_scroll_px, self.viewport.height_px, self.config
        )

    # --- Paint ------------------------------------------------------------

    def _ensure_surface(self) -> Optional[QImage]:
        width, height = self.surface_size()
        dpr = self.viewport.device_pixel_ratio
        physical_w = int(math.ceil(width * dpr))
        physical_h = int(math.ceil(height * dpr))
        surface = self.surface
        if (
            surface is None
            or surface.width() != physical_w
            or surface.height() != physical_h
            or surface.devicePixelRatio() != dpr
        ):
            surface = QImage(physical_w, physical_h, QImage.Format.Format_ARGB32_Premultiplied)
            if surface.isNull():
                logger.warning("Could not allocate a %dx%d drawing surface", physical_w, physical_h)
                self.surface = None
                return None
            surface.setDevicePixelRatio(dpr)
            self.surface = surface
        return surface

    def paint(self) -> bool:
        """Paint the whole chart; returns False when no surface could be drawn on."""
        layout = self.layout()
        surface = self._ensure_surface()
        if surface is None:
            return False
        painter = QPainter()
        if not painter.begin(surface):
            logger.warning("Drawing context unavailable; skipping paint")
            return False
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            self._paint(painter, layout)
        finally:
            painter.end()
        self.paint_count += 1
        return True

    def _paint(self, painter: QPainter, layout: LayoutResult) -> None:
        width, height = self.surface_size()
        painter.fillRect(QRectF(0, 0, width, height), SURFACE_BACKGROUND)
        if layout.scale is None:
            self._draw_empty_state(painter, width, height)
            return
        self._draw_header(painter, layout, width)
        self._draw_grid(painter, layout, width, height)
        self._draw_today_line(painter, layout.scale, height)
        self._draw_group_labels(painter, layout.rows)
        hovered = self.interaction.hovered_item_id
        for bar in self.paint_set():
            self._draw_bar(painter, bar, bar.item_id == hovered)

    def _draw_empty_state(self, painter: QPainter, width: float, height: float) -> None:
        painter.setPen(QColor(self.config.text_color))
        painter.setFont(_font(14, bold=True))
        middle = height / 2
        painter.drawText(QRectF(0, middle - 30, width, 28), Qt.AlignmentFlag.AlignCenter, EMPTY_MESSAGE)
        painter.setFont(_font(12))
        painter.drawText(QRectF(0, middle + 2, width, 24), Qt.AlignmentFlag.AlignCenter, EMPTY_HINT)

    def _offscreen(self, start_x: float, end_x: float, width: float) -> bool:
        return end_x < self.config.left_margin - OFFSCREEN_SLACK or start_x > width + OFFSCREEN_SLACK

    def _draw_header(self, painter: QPainter, layout: LayoutResult, width: float) -> None:
        config = self.config
        pan = self.viewport.pan_offset_px
        grid = QColor(config.grid_color)
        text = QColor(config.text_color)
        painter.fillRect(QRectF(0, 0, width, config.header_height), QColor(config.header_background))

        painter.setPen(QPen(grid, 1))
        for y in (config.quarter_row_height, config.quarter_row_height + config.month_row_height, config.header_height):
            painter.drawLine(QPointF(0, y), QPointF(width, y))

        timeline = QRectF(config.left_margin, 0, max(width - config.left_margin, 0), config.header_height)
        bands = (
            (layout.quarters, 0, config.quarter_row_height, _font(13, bold=True), 2),
            (layout.months, config.quarter_row_height, config.month_row_height, _font(12), 1),
            (layout.weeks, config.quarter_row_height + config.month_row_height, config.week_row_height, _font(11), 1),
        )
        for cells, top, band_height, font, line_width in bands:
            painter.setFont(font)
            for cell in cells:
                start_x = cell.start_x + pan
                end_x = cell.end_x + pan
                if self._offscreen(start_x, end_x, width):
                    continue
                rect = QRectF(start_x, top, end_x - start_x, band_height)
                painter.save()
                painter.setClipRect(rect.intersected(timeline))
                painter.setPen(QPen(grid, line_width))
                painter.drawRect(rect)
                painter.setPen(text)
                painter.drawText(rect.adjusted(1, 1, -1, -1), Qt.AlignmentFlag.AlignCenter, cell.label)
                painter.restore()

    def _draw_grid(self, painter: QPainter, layout: LayoutResult, width: float, height: float) -> None:
        config = self.config
        pan = self.viewport.pan_offset_px
        painter.setPen(QPen(QColor(config.grid_color), 0.5))
        for division in layout.scale.divisions:
            x = division.x + pan
            if self._offscreen(x, x, width):
                continue
            painter.drawLine(QPointF(x, config.header_height), QPointF(x, height))
        for row in range(layout.rows.total_rows + 1):
            y = config.header_height + row * config.row_height
            painter.drawLine(QPointF(0, y), QPointF(width, y))

    def _draw_today_line(self, painter: QPainter, scale: ScaleModel, height: float) -> None:
        today = self.today or date.today()
        if not scale.contains(today):
            return
        x = scale.x_for_date(today) + self.viewport.pan_offset_px
        pen = QPen(QColor(self.config.today_color), 2)
        pen.setStyle(Qt.PenStyle.CustomDashLine)
        pen.setDashPattern([2.5, 2.5])  # 5px dash, 5px gap at width 2
        painter.save()
        painter.setPen(pen)
        painter.drawLine(QPointF(x, 0), QPointF(x, height))
        painter.restore()

    def _draw_group_labels(self, painter: QPainter, rows: RowAssignment) -> None:
        # Every band is drawn, even when its items are culled by virtual scrolling.
        config = self.config
        painter.setFont(_font(14, bold=True))
        for band in rows.bands:
            top = config.header_height + band.first_row * config.row_height
            rect = QRectF(0, top, config.label_width, band.row_count * config.row_height)
            painter.fillRect(rect, LABEL_BACKGROUND)
            painter.setPen(QPen(QColor(config.grid_color), 1))
            painter.drawRect(rect)
            painter.save()
            painter.setClipRect(QRectF(8, top, max(config.label_width - 16, 0), rect.height()))
            painter.setPen(QColor(config.text_color))
            painter.drawText(
                QRectF(12, top, max(config.label_width - 20, 0), rect.height()),
                Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
                band.name,
            )
            painter.restore()

    def bar_color(self, bar: RenderableBar) -> str:
        progress = bar.item.progress
        if progress is not None and progress.status:
            return self.config.status_color(progress.status)
        return bar.theme_color

    def _draw_bar(self, painter: QPainter, bar: RenderableBar, hovered: bool) -> None:
        config = self.config
        x, y, width, height = bar_rect(bar, config, self.viewport.pan_offset_px)
        rect = QRectF(x, y, width, height)

        painter.save()
        painter.setOpacity(config.hover_opacity if hovered else 1.0)
        painter.fillRect(rect, QColor(self.bar_color(bar)))
        painter.restore()

        progress = bar.item.progress
        if progress is not None and progress.percent_complete > 0:
            painter.fillRect(QRectF(x, y, width * progress.percent_complete / 100, height), PROGRESS_OVERLAY)
            if width > config.progress_text_min_width:
                painter.setFont(_font(10, bold=True))
                painter.setPen(BAR_TEXT_COLOR)
                painter.drawText(
                    QRectF(x, y + 4, width - 6, height - 4),
                    Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignTop,
                    f"{progress.percent_complete:g}%",
                )

        painter.setPen(QPen(BAR_TEXT_COLOR, 2))
        painter.drawRect(rect)

        painter.save()
        painter.setClipRect(QRectF(x + 4, y, max(width - 8, 0), height))
        painter.setFont(_font(12, bold=True))
        painter.setPen(BAR_TEXT_COLOR)
        painter.drawText(
            QRectF(x + 8, y, max(width - 8, 0), height),
            Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
            bar.item.name,
        )
        painter.restore()
