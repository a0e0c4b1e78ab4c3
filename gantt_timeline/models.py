"""Data models shared across the timeline engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

Instant = Union[date, datetime]


class NodeKind(Enum):
    """Explicit tag for the level a roadmap node lives on."""

    THEME = "theme"
    PRODUCT = "product"
    FEATURE = "feature"


def as_datetime(value: Instant) -> datetime:
    """Promote a plain date to midnight so mixed spans compare cleanly."""
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def as_date(value: Instant) -> date:
    """Drop the time of day; layout works in whole days."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass(frozen=True)
class TimeSpan:
    """Start/end pair describing an item's duration."""

    start: Instant
    end: Instant

    def is_valid(self) -> bool:
        return as_datetime(self.start) <= as_datetime(self.end)

    def overlaps(self, other: "TimeSpan") -> bool:
        """Return True when the two spans share time (touching ends do not)."""
        return as_datetime(self.start) < as_datetime(other.end) and as_datetime(other.start) < as_datetime(
            self.end
        )


@dataclass(frozen=True)
class Progress:
    """Status information reported for a feature."""

    status: str = ""
    percent_complete: float = 0
    last_update_time: Optional[Instant] = None
    last_update_summary: Optional[str] = None

    def __post_init__(self) -> None:
        clamped = max(0, min(100, self.percent_complete))
        object.__setattr__(self, "percent_complete", clamped)


@dataclass(frozen=True)
class Item:
    """A dated bar owned by the caller; the engine only reads it."""

    id: str
    parent_group_id: str
    name: str
    span: TimeSpan
    progress: Optional[Progress] = None
    kind: NodeKind = NodeKind.FEATURE
    theme_index: int = 0
    payload: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Group:
    """A labelled band of rows, one per parent of the drawn items."""

    id: str
    name: str
    theme_index: int = 0


@dataclass
class ViewportState:
    """Viewport dimensions and offsets owned by the engine."""

    width_px: float = 1200
    height_px: float = 400
    pan_offset_px: float = 0
    vertical_scroll_px: float = 0
    device_pixel_ratio: float = 1.0
    zoom_level: float = 1.0


@dataclass
class InteractionState:
    """Pointer state mutated only by the interaction controller."""

    hovered_item_id: Optional[str] = None
    dragging: bool = False
    drag_anchor_x: float = 0
    drag_anchor_pan_offset: float = 0
    drag_moved: bool = False
    suppress_click: bool = False
