"""Tunable constants for layout, painting and redraw scheduling."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Tuple

ROW_HEIGHT = 40
ROW_PADDING = 8
QUARTER_ROW_HEIGHT = 30
MONTH_ROW_HEIGHT = 30
WEEK_ROW_HEIGHT = 50
LEFT_MARGIN = 200  # reserved for group labels
LABEL_WIDTH = 180
DATE_BUFFER_DAYS = 7
VIRTUAL_SCROLL_THRESHOLD = 50
POINTER_DEBOUNCE_MS = 50
RESIZE_DEBOUNCE_MS = 150
FRAME_INTERVAL_MS = 16
MIN_VIEWPORT_WIDTH = 320
MIN_VIEWPORT_HEIGHT = 300
MIN_BAR_WIDTH = 2.0
PROGRESS_TEXT_MIN_WIDTH = 60
HOVER_OPACITY = 0.7
DRAG_THRESHOLD_PX = 3
MIN_ZOOM_LEVEL = 0.1
MAX_ZOOM_LEVEL = 10.0
ZOOM_STEP = 0.2

GRID_COLOR = "#D5D9D9"
TEXT_COLOR = "#0F1111"
HEADER_BACKGROUND = "#f5f5f5"
TODAY_COLOR = "#B12704"
DEFAULT_STATUS_COLOR = "#D5D9D9"

STATUS_COLORS: Dict[str, str] = {
    "not-started": "#D5D9D9",
    "in-progress": "#007185",
    "blocked": "#B12704",
    "complete": "#067D62",
    "on-hold": "#565959",
    "at-risk": "#C7511F",
}

THEME_COLORS: Tuple[str, ...] = (
    "#FF9900",
    "#007185",
    "#067D62",
    "#C7511F",
    "#146EB4",
    "#008296",
    "#B12704",
    "#565959",
)


class EmptyGroupPolicy(Enum):
    """What to do with a group that has no drawable items."""

    RESERVE_ROW = "reserve_row"
    HIDE = "hide"


class BarClipPolicy(Enum):
    """How bars extending past the scale range are placed."""

    CLAMP_TO_RANGE = "clamp"
    RAW = "raw"


@dataclass(frozen=True)
class GanttConfig:
    """Single configuration structure handed to every engine component."""

    row_height: int = ROW_HEIGHT
    row_padding: int = ROW_PADDING
    quarter_row_height: int = QUARTER_ROW_HEIGHT
    month_row_height: int = MONTH_ROW_HEIGHT
    week_row_height: int = WEEK_ROW_HEIGHT
    left_margin: int = LEFT_MARGIN
    label_width: int = LABEL_WIDTH
    date_buffer_days: int = DATE_BUFFER_DAYS
    virtual_scroll_threshold: int = VIRTUAL_SCROLL_THRESHOLD
    pointer_debounce_ms: int = POINTER_DEBOUNCE_MS
    resize_debounce_ms: int = RESIZE_DEBOUNCE_MS
    frame_interval_ms: int = FRAME_INTERVAL_MS
    min_viewport_width: int = MIN_VIEWPORT_WIDTH
    min_viewport_height: int = MIN_VIEWPORT_HEIGHT
    min_bar_width: float = MIN_BAR_WIDTH
    progress_text_min_width: float = PROGRESS_TEXT_MIN_WIDTH
    hover_opacity: float = HOVER_OPACITY
    drag_threshold_px: float = DRAG_THRESHOLD_PX
    min_zoom_level: float = MIN_ZOOM_LEVEL
    max_zoom_level: float = MAX_ZOOM_LEVEL
    zoom_step: float = ZOOM_STEP
    auto_division_unit: bool = False
    empty_group_policy: EmptyGroupPolicy = EmptyGroupPolicy.RESERVE_ROW
    bar_clip_policy: BarClipPolicy = BarClipPolicy.CLAMP_TO_RANGE
    status_colors: Dict[str, str] = field(default_factory=lambda: dict(STATUS_COLORS))
    default_status_color: str = DEFAULT_STATUS_COLOR
    theme_colors: Tuple[str, ...] = THEME_COLORS
    grid_color: str = GRID_COLOR
    text_color: str = TEXT_COLOR
    header_background: str = HEADER_BACKGROUND
    today_color: str = TODAY_COLOR

    def __post_init__(self) -> None:
        sizes = {
            "row_height": self.row_height,
            "quarter_row_height": self.quarter_row_height,
            "month_row_height": self.month_row_height,
            "week_row_height": self.week_row_height,
            "min_viewport_width": self.min_viewport_width,
            "min_viewport_height": self.min_viewport_height,
        }
        for name, value in sizes.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.row_padding * 2 >= self.row_height:
            raise ValueError("row_padding leaves no room for the bar")
        if self.left_margin < 0 or self.date_buffer_days < 0:
            raise ValueError("left_margin and date_buffer_days must not be negative")
        if self.virtual_scroll_threshold < 0:
            raise ValueError("virtual_scroll_threshold must not be negative")
        if self.pointer_debounce_ms < 0 or self.resize_debounce_ms < 0 or self.frame_interval_ms < 0:
            raise ValueError("timer intervals must not be negative")
        if not 0 < self.min_zoom_level <= self.max_zoom_level:
            raise ValueError("zoom limits must satisfy 0 < min <= max")
        if not self.theme_colors:
            raise ValueError("theme_colors must not be empty")

    @property
    def header_height(self) -> int:
        return self.quarter_row_height + self.month_row_height + self.week_row_height

    @property
    def bar_height(self) -> int:
        return self.row_height - self.row_padding * 2

    def status_color(self, status: str) -> str:
        """Map a status tag onto the palette, falling back to the neutral color."""
        return self.status_colors.get(status, self.default_status_color)

    def theme_color(self, index: int) -> str:
        return self.theme_colors[index % len(self.theme_colors)]

    def replace(self, **changes) -> "GanttConfig":
        return replace(self, **changes)
