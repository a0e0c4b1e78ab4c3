"""CSV persistence helpers for roadmaps."""
from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .hierarchy import RoadmapNode
from .models import Instant, NodeKind, Progress, as_date

_VERSION_PREFIX = "#roadmap"
_FORMAT_VERSION = 1
_ROADMAP_HEADER = ["theme", "product", "feature", "start", "end", "status", "percent_complete", "last_update", "summary"]


def save_roadmap(path: Path | str, themes: Iterable[RoadmapNode]) -> None:
    """Persist the roadmap tree to CSV, one row per feature.

    Themes without products and products without features get a row with the
    missing cells left blank so they survive a reload.
    """
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow([_VERSION_PREFIX, _FORMAT_VERSION])
        writer.writerow(_ROADMAP_HEADER)
        blank = [""] * (len(_ROADMAP_HEADER) - 2)
        for theme in themes:
            if not theme.children:
                writer.writerow([theme.name, ""] + blank)
            for product in theme.children:
                if not product.children:
                    writer.writerow([theme.name, product.name] + blank)
                for feature in product.children:
                    progress = feature.progress
                    writer.writerow([
                        theme.name,
                        product.name,
                        feature.name,
                        _serialize_optional_date(feature.start),
                        _serialize_optional_date(feature.end),
                        progress.status if progress else "",
                        f"{progress.percent_complete:g}" if progress else "",
                        _serialize_optional_instant(progress.last_update_time) if progress else "",
                        (progress.last_update_summary or "") if progress else "",
                    ])


def load_roadmap(path: Path | str) -> List[RoadmapNode]:
    """Load a roadmap tree from CSV."""
    csv_path = Path(path)
    with csv_path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        version_line = next(reader, None)
        if not version_line or version_line[0] != _VERSION_PREFIX:
            raise ValueError("Invalid roadmap CSV: missing version line")

        header = next(reader, None)
        if header != _ROADMAP_HEADER:
            raise ValueError("Invalid roadmap CSV: missing roadmap header")

        themes: Dict[str, RoadmapNode] = {}
        products: Dict[Tuple[str, str], RoadmapNode] = {}
        for index, row in enumerate(reader):
            if len(row) < len(_ROADMAP_HEADER):
                continue
            (
                theme_name,
                product_name,
                feature_name,
                start_raw,
                end_raw,
                status,
                percent_raw,
                last_update_raw,
                summary,
            ) = row[: len(_ROADMAP_HEADER)]
            if not theme_name:
                continue
            theme = themes.get(theme_name)
            if theme is None:
                theme = RoadmapNode(kind=NodeKind.THEME, id=f"theme-{len(themes) + 1}", name=theme_name)
                themes[theme_name] = theme
            if not product_name:
                continue
            product = products.get((theme_name, product_name))
            if product is None:
                product = theme.add(
                    RoadmapNode(kind=NodeKind.PRODUCT, id=f"product-{len(products) + 1}", name=product_name)
                )
                products[(theme_name, product_name)] = product
            if not feature_name:
                continue
            progress = None
            if status or percent_raw or last_update_raw or summary:
                progress = Progress(
                    status=status,
                    percent_complete=_parse_optional_float(percent_raw) or 0,
                    last_update_time=_parse_optional_instant(last_update_raw),
                    last_update_summary=summary or None,
                )
            product.add(
                RoadmapNode(
                    kind=NodeKind.FEATURE,
                    id=f"feature-{index + 1}",
                    name=feature_name,
                    start=_parse_optional_date(start_raw),
                    end=_parse_optional_date(end_raw),
                    progress=progress,
                )
            )

        return list(themes.values())


def _serialize_optional_date(value) -> str:
    return "" if value is None else as_date(value).isoformat()


def _parse_optional_date(value: str) -> Optional[date]:
    text = value.strip() if value is not None else ""
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def _serialize_optional_instant(value: Optional[Instant]) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat(timespec="minutes")
    return value.isoformat()


def _parse_optional_instant(value: str) -> Optional[Instant]:
    """Dates stay dates; anything with a time component becomes a datetime."""
    text = value.strip() if value is not None else ""
    if not text:
        return None
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _parse_optional_float(value: str) -> Optional[float]:
    text = value.strip() if value is not None else ""
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None
