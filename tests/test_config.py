import pytest

from gantt_timeline.config import GanttConfig, STATUS_COLORS


def test_derived_sizes() -> None:
    config = GanttConfig()

    assert config.header_height == 110
    assert config.bar_height == 24


def test_status_colors_fall_back_to_neutral() -> None:
    config = GanttConfig()

    assert config.status_color("complete") == STATUS_COLORS["complete"]
    assert config.status_color("mystery") == config.default_status_color


def test_theme_colors_cycle() -> None:
    config = GanttConfig(theme_colors=("#111111", "#222222"))

    assert config.theme_color(0) == "#111111"
    assert config.theme_color(3) == "#222222"


def test_replace_returns_a_new_validated_config() -> None:
    config = GanttConfig()

    tighter = config.replace(row_height=30, row_padding=5)

    assert tighter.bar_height == 20
    assert config.row_height == 40
    with pytest.raises(ValueError):
        config.replace(row_padding=20)


@pytest.mark.parametrize(
    "changes",
    [
        {"row_height": 0},
        {"week_row_height": -5},
        {"min_viewport_width": 0},
        {"date_buffer_days": -1},
        {"resize_debounce_ms": -1},
        {"virtual_scroll_threshold": -1},
        {"min_zoom_level": 0},
        {"min_zoom_level": 5, "max_zoom_level": 2},
        {"theme_colors": ()},
    ],
)
def test_invalid_values_are_rejected(changes) -> None:
    with pytest.raises(ValueError):
        GanttConfig(**changes)
