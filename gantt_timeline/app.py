"""Main PyQt application entry point."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from PyQt6.QtGui import QAction, QCloseEvent, QKeySequence
from PyQt6.QtWidgets import QApplication, QFileDialog, QMainWindow, QMessageBox

from .chart import GanttChartView
from .exporters import export_as_json, export_as_png
from .hierarchy import RoadmapNode
from .logging_config import setup_logging
from .models import Item
from .storage import load_roadmap

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Primary window with menus and the timeline view."""

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Gantt Timeline")
        self.current_path: Optional[Path] = None
        self.themes: List[RoadmapNode] = []
        self.chart = GanttChartView()
        # Surface selection/activation in the status bar.
        self.chart.item_selected.connect(self._handle_item_selected)
        self.chart.item_activated.connect(self._handle_item_activated)
        self.setCentralWidget(self.chart)
        self._build_menu()
        self.resize(1200, 700)

    def _build_menu(self) -> None:
        """Create File/View menus along with shortcuts."""
        menu = self.menuBar()
        file_menu = menu.addMenu("File")

        open_action = QAction("Open", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.action_open)
        file_menu.addAction(open_action)

        export_action = QAction("Export", self)
        export_action.triggered.connect(self.action_export)
        file_menu.addAction(export_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menu.addMenu("View")
        zoom_in_action = QAction("Zoom In", self)
        zoom_in_action.setShortcut(QKeySequence.StandardKey.ZoomIn)
        zoom_in_action.triggered.connect(lambda: self.chart.zoom_in())
        view_menu.addAction(zoom_in_action)

        zoom_out_action = QAction("Zoom Out", self)
        zoom_out_action.setShortcut(QKeySequence.StandardKey.ZoomOut)
        zoom_out_action.triggered.connect(lambda: self.chart.zoom_out())
        view_menu.addAction(zoom_out_action)

        reset_action = QAction("Reset View", self)
        reset_action.setShortcut("Ctrl+0")
        reset_action.triggered.connect(self.chart.reset_view)
        view_menu.addAction(reset_action)

    def load_path(self, path: Path | str) -> None:
        """Load a roadmap CSV and hand it to the chart."""
        self.themes = load_roadmap(path)
        self.chart.set_roadmap(self.themes)
        self.current_path = Path(path)
        self.statusBar().showMessage(f"Loaded roadmap from {path}", 3000)

    # Menu actions ------------------------------------------------------
    def action_open(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open roadmap", filter="CSV Files (*.csv)")
        if not path:
            return
        try:
            self.load_path(path)
        except (OSError, ValueError) as exc:  # pragma: no cover - interactive guard
            logger.exception("Failed to open %s", path)
            QMessageBox.critical(self, "Open failed", str(exc))

    def action_export(self) -> None:
        """Export the chart as a PNG image or the items as a JSON snapshot."""
        path, selected_filter = QFileDialog.getSaveFileName(
            self,
            "Export roadmap",
            filter="PNG Images (*.png);;JSON Files (*.json)",
        )
        if not path:
            return
        try:
            if path.lower().endswith(".json") or "JSON" in selected_filter:
                export_as_json(path, self.chart.pipeline.items)
                self.statusBar().showMessage(f"Exported JSON to {path}", 3000)
            else:
                export_as_png(path, self.chart.pipeline)
                self.statusBar().showMessage(f"Exported PNG to {path}", 3000)
        except (OSError, RuntimeError) as exc:  # pragma: no cover - interactive guard
            logger.exception("Export to %s failed", path)
            QMessageBox.critical(self, "Export failed", str(exc))

    def _handle_item_selected(self, item: Item) -> None:
        self.statusBar().showMessage(f"Selected {item.name}", 3000)

    def _handle_item_activated(self, item: Item) -> None:
        self.statusBar().showMessage(f"Opened {item.name}", 3000)

    def closeEvent(self, event: QCloseEvent) -> None:  # pragma: no cover - requires UI
        """Stop pending redraws before the window goes away."""
        self.chart.dispose()
        event.accept()


def run(argv: Optional[List[str]] = None) -> None:
    """Entry point used by `python -m gantt_timeline`."""
    parser = argparse.ArgumentParser(prog="gantt-timeline")
    parser.add_argument("roadmap", nargs="?", help="roadmap CSV to open on start")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args, qt_args = parser.parse_known_args(sys.argv[1:] if argv is None else argv)

    setup_logging(debug_mode=args.debug)
    app = QApplication([sys.argv[0], *qt_args])
    window = MainWindow()
    if args.roadmap:
        window.load_path(args.roadmap)
    window.show()
    app.exec()


if __name__ == "__main__":
    run()
