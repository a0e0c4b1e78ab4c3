"""Export helpers for PNG and JSON snapshots."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .models import Item, as_date
from .renderer import RenderPipeline

JSON_FORMAT_VERSION = 1


def export_as_png(path: Path | str, pipeline: RenderPipeline) -> None:
    """Render the chart and save the surface (at device resolution) as PNG."""
    png_path = Path(path)
    png_path.parent.mkdir(parents=True, exist_ok=True)
    if not pipeline.paint() or pipeline.surface is None:
        raise RuntimeError("Nothing could be rendered for export")
    if not pipeline.surface.save(str(png_path), "PNG"):
        raise OSError(f"Could not write PNG to {png_path}")


def export_as_json(path: Path | str, items: Iterable[Item]) -> None:
    """Write a JSON snapshot of the items as the engine sees them."""
    json_path = Path(path)
    json_path.parent.mkdir(parents=True, exist_ok=True)
    document = {"version": JSON_FORMAT_VERSION, "items": [_item_to_dict(item) for item in items]}
    with json_path.open("w", encoding="utf-8") as handle:
        json.dump(document, handle, indent=2)


def _item_to_dict(item: Item) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "id": item.id,
        "parent_group_id": item.parent_group_id,
        "name": item.name,
        "kind": item.kind.value,
        "start": as_date(item.span.start).isoformat(),
        "end": as_date(item.span.end).isoformat(),
    }
    progress = item.progress
    if progress is not None:
        details: Dict[str, Any] = {"status": progress.status, "percent_complete": progress.percent_complete}
        if progress.last_update_time is not None:
            details["last_update_time"] = as_date(progress.last_update_time).isoformat()
        if progress.last_update_summary:
            details["last_update_summary"] = progress.last_update_summary
        record["progress"] = details
    return record


def load_json_snapshot(path: Path | str) -> List[Dict[str, Any]]:
    """Read back the item records written by :func:`export_as_json`."""
    with Path(path).open("r", encoding="utf-8") as handle:
        document = json.load(handle)
    if document.get("version") != JSON_FORMAT_VERSION:
        raise ValueError("Unsupported JSON snapshot version")
    return list(document.get("items", []))
