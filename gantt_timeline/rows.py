"""Row assignment: pack dated items into non-overlapping rows per group."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .config import EmptyGroupPolicy
from .models import Group, Item, as_datetime

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupBand:
    """Contiguous row block owned by one parent group."""

    group_id: str
    name: str
    first_row: int
    last_row: int
    theme_index: int = 0

    @property
    def row_count(self) -> int:
        return self.last_row - self.first_row + 1


@dataclass
class RowAssignment:
    """Per-item row index plus the row band of every group."""

    rows: Dict[str, int] = field(default_factory=dict)
    bands: List[GroupBand] = field(default_factory=list)
    total_rows: int = 0

    def row_for(self, item_id: str) -> Optional[int]:
        return self.rows.get(item_id)

    @property
    def max_row(self) -> int:
        return self.total_rows - 1

    def band_for(self, group_id: str) -> Optional[GroupBand]:
        for band in self.bands:
            if band.group_id == group_id:
                return band
        return None


def pack_bucket(items: Sequence[Item]) -> List[int]:
    """First-fit interval packing in the order the items are given.

    Each lane remembers the end of the item placed last; an item reuses the
    first lane whose end is at or before its start. Returns the local lane
    index for every item, in input order.
    """
    lane_ends: List[datetime] = []
    lanes: List[int] = []
    for item in items:
        start = as_datetime(item.span.start)
        end = as_datetime(item.span.end)
        for index, lane_end in enumerate(lane_ends):
            if lane_end <= start:
                lane_ends[index] = end
                lanes.append(index)
                break
        else:
            lane_ends.append(end)
            lanes.append(len(lane_ends) - 1)
    return lanes


def _bucket(items: Iterable[Item], groups: Optional[Sequence[Group]]) -> List[Tuple[Group, List[Item]]]:
    buckets: Dict[str, Tuple[Group, List[Item]]] = {}
    for group in groups or ():
        buckets.setdefault(group.id, (group, []))
    for item in items:
        if item.parent_group_id not in buckets:
            buckets[item.parent_group_id] = (
                Group(id=item.parent_group_id, name=item.parent_group_id, theme_index=item.theme_index),
                [],
            )
        buckets[item.parent_group_id][1].append(item)
    return list(buckets.values())


def assign_rows(
    items: Iterable[Item],
    groups: Optional[Sequence[Group]] = None,
    *,
    empty_group_policy: EmptyGroupPolicy = EmptyGroupPolicy.RESERVE_ROW,
) -> RowAssignment:
    """Assign every item a global row index, stacking groups vertically.

    Groups keep the order of ``groups`` (or first appearance among ``items``
    when no explicit order is supplied). Each group's lanes are offset by a
    running row counter so bands never interleave.
    """
    assignment = RowAssignment()
    next_row = 0
    for group, bucket in _bucket(items, groups):
        if not bucket and empty_group_policy is EmptyGroupPolicy.HIDE:
            continue
        lanes = pack_bucket(bucket)
        for item, lane in zip(bucket, lanes):
            assignment.rows[item.id] = next_row + lane
        used = max(1, max(lanes, default=-1) + 1)
        assignment.bands.append(
            GroupBand(
                group_id=group.id,
                name=group.name,
                first_row=next_row,
                last_row=next_row + used - 1,
                theme_index=group.theme_index,
            )
        )
        next_row += used
    assignment.total_rows = next_row
    logger.debug("Assigned %d items to %d rows in %d groups", len(assignment.rows), next_row, len(assignment.bands))
    return assignment
