"""Timeline scale calculation: pixels per day and calendar divisions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .models import Instant, Item, as_date

logger = logging.getLogger(__name__)

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
WEEK_CELL_BUFFER_DAYS = 14


class TimeUnit(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"


@dataclass(frozen=True)
class Division:
    """A calendar boundary on the time axis."""

    date: date
    x: float
    label: str


@dataclass(frozen=True)
class HeaderCell:
    """A labelled header rectangle spanning [start_x, end_x)."""

    start: date
    start_x: float
    end_x: float
    label: str

    @property
    def width(self) -> float:
        return self.end_x - self.start_x


@dataclass(frozen=True)
class WeekCell(HeaderCell):
    week_number: int = 0


@dataclass(frozen=True)
class ScaleModel:
    """Mapping from calendar time to surface x; replaced wholesale, never patched."""

    range_start: date
    range_end: date
    total_days: int
    pixels_per_day: float
    left_margin: float
    unit: TimeUnit
    divisions: Tuple[Division, ...]

    def x_for_date(self, value: Instant) -> float:
        """Surface x (before pan offset) of the day containing ``value``."""
        return self.left_margin + days_between(self.range_start, value) * self.pixels_per_day

    def date_for_x(self, x: float) -> date:
        """Inverse of :meth:`x_for_date`, rounded to the nearest whole day."""
        days = round((x - self.left_margin) / self.pixels_per_day)
        return self.range_start + timedelta(days=days)

    def contains(self, value: Instant) -> bool:
        return self.range_start <= as_date(value) <= self.range_end

    @property
    def timeline_width(self) -> float:
        return self.total_days * self.pixels_per_day


def days_between(start: Instant, end: Instant) -> int:
    """Whole days from ``start`` to ``end``; the time of day is ignored."""
    return (as_date(end) - as_date(start)).days


def week_start(value: Instant) -> date:
    """Monday on or before ``value``."""
    day = as_date(value)
    return day - timedelta(days=day.weekday())


def month_start(value: Instant) -> date:
    day = as_date(value)
    return date(day.year, day.month, 1)


def quarter_start(value: Instant) -> date:
    day = as_date(value)
    return date(day.year, (day.month - 1) // 3 * 3 + 1, 1)


def add_months(value: date, months: int) -> date:
    """Shift a first-of-month date by whole months."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def iso_week_number(value: Instant) -> int:
    """ISO-8601 week number; week 1 holds the year's first Thursday."""
    day = as_date(value)
    thursday = day + timedelta(days=3 - day.weekday())
    year_start = date(thursday.year, 1, 1)
    return (thursday - year_start).days // 7 + 1


def format_label(value: date, unit: TimeUnit) -> str:
    month = MONTH_NAMES[value.month - 1]
    if unit is TimeUnit.DAY:
        return f"{month} {value.day}"
    if unit is TimeUnit.WEEK:
        return f"Week of {month} {value.day}"
    if unit is TimeUnit.MONTH:
        return f"{month} {value.year}"
    return f"Q{(value.month - 1) // 3 + 1} {value.year}"


def _align(value: date, unit: TimeUnit) -> date:
    if unit is TimeUnit.WEEK:
        return week_start(value)
    if unit is TimeUnit.MONTH:
        return month_start(value)
    if unit is TimeUnit.QUARTER:
        return quarter_start(value)
    return value


def _advance(value: date, unit: TimeUnit) -> date:
    if unit is TimeUnit.DAY:
        return value + timedelta(days=1)
    if unit is TimeUnit.WEEK:
        return value + timedelta(days=7)
    if unit is TimeUnit.MONTH:
        return add_months(value, 1)
    return add_months(value, 3)


def calculate_date_range(
    items: Iterable[Item], padding_days: int, today: Optional[date] = None
) -> Tuple[date, date]:
    """Span covering every item, padded on both sides.

    With no items the current month is returned.
    """
    starts: List[date] = []
    ends: List[date] = []
    for item in items:
        starts.append(as_date(item.span.start))
        ends.append(as_date(item.span.end))
    if not starts:
        first = month_start(today or date.today())
        return first, add_months(first, 1)
    padding = timedelta(days=padding_days)
    return min(starts) - padding, max(ends) + padding


def generate_divisions(
    range_start: date, range_end: date, unit: TimeUnit, left_margin: float, pixels_per_day: float
) -> List[Division]:
    divisions: List[Division] = []
    current = _align(range_start, unit)
    while current <= range_end:
        x = left_margin + days_between(range_start, current) * pixels_per_day
        divisions.append(Division(date=current, x=x, label=format_label(current, unit)))
        current = _advance(current, unit)
    return divisions


def calculate_scale(
    items: Iterable[Item],
    viewport_width: float,
    left_margin: float,
    *,
    buffer_days: int = 7,
    unit: TimeUnit = TimeUnit.MONTH,
    zoom_level: float = 1.0,
    min_width: float = 320,
    date_range: Optional[Tuple[Instant, Instant]] = None,
) -> Optional[ScaleModel]:
    """Build the scale for ``items`` laid out across ``viewport_width`` pixels.

    Returns None when there is nothing to lay out (no items and no explicit
    ``date_range``). The viewport width is clamped to ``min_width`` so the
    pixels-per-day factor never degenerates.
    """
    items = list(items)
    if date_range is None:
        if not items:
            return None
        range_start, range_end = calculate_date_range(items, buffer_days)
    else:
        range_start, range_end = as_date(date_range[0]), as_date(date_range[1])
        if range_end < range_start:
            range_start, range_end = range_end, range_start

    width = max(float(viewport_width), float(min_width))
    available = max(width - left_margin, 1.0) * max(zoom_level, 0.0001)
    total_days = max(1, days_between(range_start, range_end))
    pixels_per_day = available / total_days

    divisions = generate_divisions(range_start, range_end, unit, left_margin, pixels_per_day)
    logger.debug(
        "Scale %s..%s: %d days, %.3f px/day, %d %s divisions",
        range_start,
        range_end,
        total_days,
        pixels_per_day,
        len(divisions),
        unit.value,
    )
    return ScaleModel(
        range_start=range_start,
        range_end=range_end,
        total_days=total_days,
        pixels_per_day=pixels_per_day,
        left_margin=left_margin,
        unit=unit,
        divisions=tuple(divisions),
    )


def _unit_cells(scale: ScaleModel, unit: TimeUnit) -> List[HeaderCell]:
    cells: List[HeaderCell] = []
    current = _align(scale.range_start, unit)
    while current <= scale.range_end:
        following = _advance(current, unit)
        cells.append(
            HeaderCell(
                start=current,
                start_x=scale.x_for_date(current),
                end_x=scale.x_for_date(following),
                label=format_label(current, unit),
            )
        )
        current = following
    return cells


def month_cells(scale: ScaleModel) -> List[HeaderCell]:
    return _unit_cells(scale, TimeUnit.MONTH)


def quarter_cells(scale: ScaleModel) -> List[HeaderCell]:
    return _unit_cells(scale, TimeUnit.QUARTER)


def week_cells(scale: ScaleModel, buffer_days: int = WEEK_CELL_BUFFER_DAYS) -> List[WeekCell]:
    """Week-aligned header cells labelled with ISO week numbers.

    Cells start on the Monday on or before ``range_start`` and step by exactly
    seven days until past ``range_end`` plus ``buffer_days``.
    """
    cells: List[WeekCell] = []
    limit = scale.range_end + timedelta(days=buffer_days)
    current = week_start(scale.range_start)
    span = 7 * scale.pixels_per_day
    while current <= limit:
        start_x = scale.x_for_date(current)
        number = iso_week_number(current)
        cells.append(
            WeekCell(start=current, start_x=start_x, end_x=start_x + span, label=str(number), week_number=number)
        )
        current += timedelta(days=7)
    return cells
