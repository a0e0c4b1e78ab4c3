"""Roadmap tree (theme > product > feature) and its flattening into items."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from .models import Group, Instant, Item, NodeKind, Progress, TimeSpan

logger = logging.getLogger(__name__)

_CHILD_KIND = {NodeKind.THEME: NodeKind.PRODUCT, NodeKind.PRODUCT: NodeKind.FEATURE}


@dataclass
class RoadmapNode:
    """One node of the caller's roadmap, tagged with its level."""

    kind: NodeKind
    id: str
    name: str
    start: Optional[Instant] = None
    end: Optional[Instant] = None
    children: List["RoadmapNode"] = field(default_factory=list)
    collapsed: bool = False
    progress: Optional[Progress] = None
    payload: Any = None

    def add(self, child: "RoadmapNode") -> "RoadmapNode":
        """Attach a child of the next level down and return it."""
        expected = _CHILD_KIND.get(self.kind)
        if child.kind is not expected:
            raise ValueError(f"A {self.kind.value} cannot contain a {child.kind.value}")
        self.children.append(child)
        return child


def flatten_roadmap(themes: Sequence[RoadmapNode]) -> Tuple[List[Group], List[Item]]:
    """Turn themes into one group per product and one item per feature.

    Groups keep the order they are presented in. Collapsed themes and
    products contribute nothing; features without both dates are left out.
    """
    groups: List[Group] = []
    items: List[Item] = []
    for theme_index, theme in enumerate(themes):
        if theme.kind is not NodeKind.THEME:
            raise ValueError(f"Expected a theme at the top level, got {theme.kind.value}")
        if theme.collapsed:
            continue
        for product in theme.children:
            if product.collapsed:
                continue
            groups.append(Group(id=product.id, name=product.name, theme_index=theme_index))
            for feature in product.children:
                if feature.start is None or feature.end is None:
                    logger.debug("Feature %s has no schedule; not drawn", feature.id)
                    continue
                items.append(
                    Item(
                        id=feature.id,
                        parent_group_id=product.id,
                        name=feature.name,
                        span=TimeSpan(feature.start, feature.end),
                        progress=feature.progress,
                        kind=feature.kind,
                        theme_index=theme_index,
                        payload=feature.payload if feature.payload is not None else feature,
                    )
                )
    return groups, items
