"""Zoom helpers for the timeline view."""
from __future__ import annotations

from .config import MAX_ZOOM_LEVEL, MIN_ZOOM_LEVEL, ZOOM_STEP
from .scale import TimeUnit


def time_unit_for_zoom(zoom_level: float) -> TimeUnit:
    """Finer divisions as the view zooms in."""
    if zoom_level >= 4.0:
        return TimeUnit.DAY
    if zoom_level >= 2.0:
        return TimeUnit.WEEK
    if zoom_level >= 0.5:
        return TimeUnit.MONTH
    return TimeUnit.QUARTER


def clamp_zoom(zoom_level: float, minimum: float = MIN_ZOOM_LEVEL, maximum: float = MAX_ZOOM_LEVEL) -> float:
    return max(minimum, min(maximum, zoom_level))


def apply_zoom(
    current: float,
    zoom_in: bool,
    *,
    step: float = ZOOM_STEP,
    minimum: float = MIN_ZOOM_LEVEL,
    maximum: float = MAX_ZOOM_LEVEL,
) -> float:
    """Step the zoom level one notch in or out, within the allowed bounds."""
    target = current + step if zoom_in else current - step
    return round(clamp_zoom(target, minimum, maximum), 6)


def pan_days_from_pixels(pixel_offset: float, pixels_per_day: float) -> float:
    """Translate a horizontal pixel drag into a number of days."""
    if pixels_per_day <= 0:
        return 0.0
    return pixel_offset / pixels_per_day


def zoom_anchor_pan(pan_offset: float, anchor_x: float, old_zoom: float, new_zoom: float, left_margin: float) -> float:
    """Pan offset keeping the content under ``anchor_x`` stationary across a zoom."""
    if old_zoom <= 0:
        return pan_offset
    content_x = anchor_x - pan_offset - left_margin
    ratio = new_zoom / old_zoom
    return anchor_x - left_margin - content_x * ratio
