from datetime import date, datetime
from pathlib import Path

import pytest

from gantt_timeline.hierarchy import RoadmapNode
from gantt_timeline.models import NodeKind, Progress
from gantt_timeline.storage import load_roadmap, save_roadmap


def _theme(theme_id: str, name: str) -> RoadmapNode:
    return RoadmapNode(kind=NodeKind.THEME, id=theme_id, name=name)


def _product(product_id: str, name: str) -> RoadmapNode:
    return RoadmapNode(kind=NodeKind.PRODUCT, id=product_id, name=name)


def _feature(feature_id: str, name: str, start=None, end=None, progress=None) -> RoadmapNode:
    return RoadmapNode(kind=NodeKind.FEATURE, id=feature_id, name=name, start=start, end=end, progress=progress)


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "roadmap.csv"
    theme = _theme("theme-1", "Growth")
    checkout = theme.add(_product("product-1", "Checkout"))
    checkout.add(_feature("feature-1", "One-click", date(2024, 1, 1), date(2024, 2, 15)))
    checkout.add(
        _feature(
            "feature-2",
            "Gift cards",
            date(2024, 2, 1),
            date(2024, 3, 1),
            Progress(status="in-progress", percent_complete=35, last_update_summary="API done"),
        )
    )
    search = theme.add(_product("product-2", "Search"))
    search.add(_feature("feature-3", "Facets", date(2024, 3, 4), date(2024, 4, 30)))

    save_roadmap(path, [theme])
    loaded = load_roadmap(path)

    assert loaded == [theme]


def test_save_roadmap_writes_blank_cells_for_missing_values(tmp_path: Path) -> None:
    path = tmp_path / "draft.csv"
    theme = _theme("theme-1", "Platform")
    product = theme.add(_product("product-1", "Billing"))
    product.add(_feature("feature-1", "Invoices", start=date(2024, 5, 1)))
    theme.add(_product("product-2", "Empty"))

    save_roadmap(path, [theme])

    text = path.read_text().splitlines()
    assert text[0] == "#roadmap,1"
    assert text[1] == "theme,product,feature,start,end,status,percent_complete,last_update,summary"
    assert text[2] == "Platform,Billing,Invoices,2024-05-01,,,,,"
    assert text[3] == "Platform,Empty,,,,,,,"


def test_products_without_features_survive_a_reload(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    theme = _theme("theme-1", "Platform")
    theme.add(_product("product-1", "Empty"))

    save_roadmap(path, [theme])
    loaded = load_roadmap(path)

    assert [product.name for product in loaded[0].children] == ["Empty"]
    assert loaded[0].children[0].children == []


def test_themes_without_products_survive_a_reload(tmp_path: Path) -> None:
    path = tmp_path / "themes.csv"
    empty = _theme("theme-1", "Empty theme")
    theme = _theme("theme-2", "Theme")
    theme.add(_product("product-1", "Product")).add(_feature("feature-2", "F", date(2024, 1, 1), date(2024, 1, 5)))

    save_roadmap(path, [empty, theme])
    loaded = load_roadmap(path)

    assert [node.name for node in loaded] == ["Empty theme", "Theme"]
    assert loaded == [empty, theme]


def test_last_update_time_survives_a_reload(tmp_path: Path) -> None:
    path = tmp_path / "updates.csv"
    theme = _theme("theme-1", "Theme")
    product = theme.add(_product("product-1", "Product"))
    product.add(
        _feature(
            "feature-1",
            "Timed",
            date(2024, 1, 1),
            date(2024, 1, 5),
            Progress(status="blocked", percent_complete=10, last_update_time=datetime(2024, 1, 3, 9, 0)),
        )
    )
    product.add(
        _feature(
            "feature-2",
            "Dated",
            date(2024, 1, 2),
            date(2024, 1, 9),
            Progress(status="complete", percent_complete=100, last_update_time=date(2024, 1, 8)),
        )
    )

    save_roadmap(path, [theme])
    text = path.read_text().splitlines()
    loaded = load_roadmap(path)

    assert text[2] == "Theme,Product,Timed,2024-01-01,2024-01-05,blocked,10,2024-01-03T09:00,"
    timed, dated = loaded[0].children[0].children
    assert timed.progress.last_update_time == datetime(2024, 1, 3, 9, 0)
    assert dated.progress.last_update_time == date(2024, 1, 8)
    assert loaded == [theme]


def test_load_tolerates_bad_dates_and_percentages(tmp_path: Path) -> None:
    path = tmp_path / "messy.csv"
    path.write_text(
        "#roadmap,1\n"
        "theme,product,feature,start,end,status,percent_complete,summary\n"
        "Ops,Infra,Migrate,2024-13-01,2024-06-01,blocked,lots,2024-02-30,\n"
        "Ops,Infra,Short row\n"
        ",Infra,No theme,2024-01-01,2024-01-02,,,,\n",
        encoding="utf-8",
    )

    themes = load_roadmap(path)

    assert len(themes) == 1
    features = themes[0].children[0].children
    assert [feature.name for feature in features] == ["Migrate"]
    assert features[0].start is None
    assert features[0].end == date(2024, 6, 1)
    assert features[0].progress == Progress(status="blocked", percent_complete=0)


@pytest.mark.parametrize(
    "content, message",
    [
        ("", "version line"),
        ("name,start,end\n", "version line"),
        ("#roadmap,1\nname,start,end\n", "roadmap header"),
    ],
)
def test_load_rejects_foreign_files(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "foreign.csv"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        load_roadmap(path)
