from datetime import date
from pathlib import Path

import pytest
from PyQt6.QtCore import QPoint, Qt
from PyQt6.QtTest import QTest
from PyQt6.QtWidgets import QApplication

from gantt_timeline.app import MainWindow
from gantt_timeline.chart import GanttChartView
from gantt_timeline.hierarchy import RoadmapNode
from gantt_timeline.models import Item, NodeKind, TimeSpan
from gantt_timeline.storage import save_roadmap


def _item(item_id, start, end):
    return Item(id=item_id, parent_group_id="g1", name=item_id, span=TimeSpan(start, end))


@pytest.fixture
def view(qapp: QApplication, config):
    chart = GanttChartView(config)
    chart.resize(1000, 500)
    chart.show()
    QTest.qWaitForWindowExposed(chart)
    chart.set_items(
        [
            _item("A", date(2024, 1, 1), date(2024, 1, 11)),
            _item("B", date(2024, 1, 6), date(2024, 1, 21)),
        ]
    )
    chart.scheduler.flush()
    yield chart
    chart.dispose()
    chart.close()


def test_view_paints_surface_matching_viewport(view: GanttChartView) -> None:
    viewport = view.viewport().size()

    assert view.pipeline.surface is not None
    assert view.viewport_state.width_px == max(viewport.width(), view.config.min_viewport_width)
    assert [bar.row for bar in view.pipeline.bars] == [0, 1]


def test_click_on_bar_emits_selection(view: GanttChartView) -> None:
    selected = []
    view.item_selected.connect(selected.append)

    QTest.mouseClick(view.viewport(), Qt.MouseButton.LeftButton, pos=QPoint(210, 130))

    assert [item.id for item in selected] == ["A"]


def test_double_click_emits_activation(view: GanttChartView) -> None:
    activated = []
    view.item_activated.connect(activated.append)

    QTest.mouseDClick(view.viewport(), Qt.MouseButton.LeftButton, pos=QPoint(210, 130))

    assert [item.id for item in activated] == ["A"]


def test_zoom_relayouts_and_reset_restores(view: GanttChartView) -> None:
    before = view.pipeline.layout_count
    ppd = view.pipeline.layout().scale.pixels_per_day

    view.zoom_in()
    view.scheduler.flush()

    assert view.viewport_state.zoom_level == pytest.approx(1.2)
    assert view.pipeline.layout_count == before + 1
    assert view.pipeline.layout().scale.pixels_per_day == pytest.approx(ppd * 1.2)

    QTest.keyClick(view, Qt.Key.Key_Home)
    assert view.viewport_state.zoom_level == 1.0
    assert view.viewport_state.pan_offset_px == 0


def test_dispose_stops_further_paints(view: GanttChartView) -> None:
    painted = view.pipeline.paint_count

    view.dispose()
    view.request_redraw()
    view._render_frame()
    QTest.qWait(100)

    assert view.scheduler.is_disposed
    assert view.pipeline.paint_count == painted


def test_main_window_loads_roadmap(qapp: QApplication, tmp_path: Path) -> None:
    path = tmp_path / "roadmap.csv"
    theme = RoadmapNode(kind=NodeKind.THEME, id="theme-1", name="Growth")
    product = theme.add(RoadmapNode(kind=NodeKind.PRODUCT, id="product-1", name="Checkout"))
    product.add(
        RoadmapNode(kind=NodeKind.FEATURE, id="feature-1", name="Wallet", start=date(2024, 1, 1), end=date(2024, 2, 1))
    )
    save_roadmap(path, [theme])

    window = MainWindow()
    try:
        window.load_path(path)

        assert window.current_path == path
        assert [item.name for item in window.chart.pipeline.items] == ["Wallet"]
    finally:
        window.chart.dispose()
        window.close()
