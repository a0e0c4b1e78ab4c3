"""Bar geometry: turn an item's span into a horizontal pixel extent."""
from __future__ import annotations

from dataclasses import dataclass

from .config import BarClipPolicy
from .models import Item, as_date
from .scale import ScaleModel, days_between


@dataclass(frozen=True)
class BarGeometry:
    """Pixel extent of a bar in surface coordinates, before the pan offset."""

    item_id: str
    x: float
    width: float

    @property
    def right(self) -> float:
        return self.x + self.width


def calculate_bar(
    item: Item,
    scale: ScaleModel,
    *,
    clip_policy: BarClipPolicy = BarClipPolicy.CLAMP_TO_RANGE,
    min_width: float = 2.0,
) -> BarGeometry:
    """Compute ``x`` and ``width`` for ``item`` against ``scale``."""
    start = as_date(item.span.start)
    end = as_date(item.span.end)
    if clip_policy is BarClipPolicy.CLAMP_TO_RANGE:
        start = min(max(start, scale.range_start), scale.range_end)
        end = min(max(end, scale.range_start), scale.range_end)
    x = scale.left_margin + days_between(scale.range_start, start) * scale.pixels_per_day
    width = max(days_between(start, end) * scale.pixels_per_day, min_width)
    return BarGeometry(item_id=item.id, x=x, width=width)
