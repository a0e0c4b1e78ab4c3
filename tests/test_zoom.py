import pytest

from gantt_timeline.scale import TimeUnit
from gantt_timeline.zoom import apply_zoom, clamp_zoom, pan_days_from_pixels, time_unit_for_zoom, zoom_anchor_pan


@pytest.mark.parametrize(
    "zoom, unit",
    [
        (0.1, TimeUnit.QUARTER),
        (0.49, TimeUnit.QUARTER),
        (0.5, TimeUnit.MONTH),
        (1.0, TimeUnit.MONTH),
        (2.0, TimeUnit.WEEK),
        (4.0, TimeUnit.DAY),
        (10.0, TimeUnit.DAY),
    ],
)
def test_time_unit_gets_finer_when_zooming_in(zoom, unit) -> None:
    assert time_unit_for_zoom(zoom) is unit


def test_zoom_steps_and_stays_within_bounds() -> None:
    assert apply_zoom(1.0, True) == pytest.approx(1.2)
    assert apply_zoom(1.0, False) == pytest.approx(0.8)
    assert apply_zoom(0.2, False) == pytest.approx(0.1)
    assert apply_zoom(9.9, True) == pytest.approx(10.0)
    assert clamp_zoom(42) == 10.0
    assert clamp_zoom(-1) == 0.1


def test_repeated_steps_do_not_drift() -> None:
    level = 1.0
    for _ in range(5):
        level = apply_zoom(level, True)
    for _ in range(5):
        level = apply_zoom(level, False)

    assert level == 1.0


def test_pan_pixels_translate_to_days() -> None:
    assert pan_days_from_pixels(-150, 50) == -3
    assert pan_days_from_pixels(100, 0) == 0.0


def test_zoom_keeps_anchor_content_in_place() -> None:
    left_margin = 200
    pan = -100
    anchor_x = 700
    content_x = anchor_x - pan - left_margin

    new_pan = zoom_anchor_pan(pan, anchor_x, 1.0, 2.0, left_margin)

    assert left_margin + content_x * 2.0 + new_pan == pytest.approx(anchor_x)
    assert zoom_anchor_pan(pan, anchor_x, 0, 2.0, left_margin) == pan
