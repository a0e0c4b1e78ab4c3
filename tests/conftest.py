import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from gantt_timeline.config import GanttConfig  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """Provide a shared QApplication for tests that paint or instantiate widgets."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def config() -> GanttConfig:
    """Defaults without the date buffer so the scale range hugs the items."""
    return GanttConfig(date_buffer_days=0)
