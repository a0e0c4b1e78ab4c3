from datetime import date, timedelta

from hypothesis import given, settings
from hypothesis import strategies as st

from gantt_timeline.config import EmptyGroupPolicy
from gantt_timeline.models import Group, Item, TimeSpan
from gantt_timeline.rows import assign_rows, pack_bucket

BASE = date(2024, 1, 1)


def _item(item_id, start, end, group="g1"):
    return Item(id=item_id, parent_group_id=group, name=item_id, span=TimeSpan(start, end))


def _day(offset: int) -> date:
    return BASE + timedelta(days=offset)


def test_overlapping_items_get_separate_rows_and_free_row_is_reused() -> None:
    items = [
        _item("A", date(2024, 1, 1), date(2024, 1, 10)),
        _item("B", date(2024, 1, 5), date(2024, 1, 15)),
        _item("C", date(2024, 1, 11), date(2024, 1, 20)),
    ]

    assignment = assign_rows(items)

    assert assignment.rows == {"A": 0, "B": 1, "C": 0}
    assert assignment.total_rows == 2


def test_touching_spans_share_a_row() -> None:
    items = [_item("A", _day(0), _day(5)), _item("B", _day(5), _day(9))]

    assert assign_rows(items).rows == {"A": 0, "B": 0}


def test_out_of_order_input_still_packs_without_overlap() -> None:
    items = [
        _item("late", _day(20), _day(30)),
        _item("early", _day(0), _day(10)),
        _item("middle", _day(8), _day(22)),
    ]

    rows = assign_rows(items).rows

    assert rows["late"] == 0
    assert rows["early"] == 1
    assert rows["middle"] == 2


def test_groups_stack_in_presented_order() -> None:
    groups = [Group(id="late", name="Late product"), Group(id="early", name="Early product")]
    items = [
        _item("e1", _day(0), _day(5), group="early"),
        _item("l1", _day(30), _day(40), group="late"),
        _item("l2", _day(35), _day(45), group="late"),
    ]

    assignment = assign_rows(items, groups)

    assert [band.group_id for band in assignment.bands] == ["late", "early"]
    assert assignment.rows == {"l1": 0, "l2": 1, "e1": 2}
    late, early = assignment.bands
    assert (late.first_row, late.last_row) == (0, 1)
    assert (early.first_row, early.last_row) == (2, 2)
    assert late.name == "Late product"


def test_groups_without_explicit_order_follow_first_appearance() -> None:
    items = [
        _item("x", _day(0), _day(5), group="second"),
        _item("y", _day(0), _day(5), group="first"),
        _item("z", _day(0), _day(5), group="second"),
    ]

    assignment = assign_rows(items)

    assert [band.group_id for band in assignment.bands] == ["second", "first"]
    assert assignment.rows == {"x": 0, "z": 1, "y": 2}


def test_items_in_different_groups_may_overlap_in_time() -> None:
    items = [_item("a", _day(0), _day(10), group="g1"), _item("b", _day(0), _day(10), group="g2")]

    assignment = assign_rows(items)

    assert assignment.rows == {"a": 0, "b": 1}
    assert assignment.band_for("g2").row_count == 1


def test_empty_group_reserves_a_label_row_by_default() -> None:
    groups = [Group(id="g1", name="One"), Group(id="empty", name="Nothing yet"), Group(id="g2", name="Two")]
    items = [_item("a", _day(0), _day(3), group="g1"), _item("b", _day(0), _day(3), group="g2")]

    assignment = assign_rows(items, groups)

    assert assignment.rows == {"a": 0, "b": 2}
    assert assignment.band_for("empty").first_row == 1
    assert assignment.total_rows == 3


def test_empty_group_can_be_hidden() -> None:
    groups = [Group(id="g1", name="One"), Group(id="empty", name="Nothing yet"), Group(id="g2", name="Two")]
    items = [_item("a", _day(0), _day(3), group="g1"), _item("b", _day(0), _day(3), group="g2")]

    assignment = assign_rows(items, groups, empty_group_policy=EmptyGroupPolicy.HIDE)

    assert assignment.rows == {"a": 0, "b": 1}
    assert assignment.band_for("empty") is None
    assert assignment.total_rows == 2


def test_many_short_items_pack_tightly() -> None:
    # Ten back-to-back one-day items plus ten copies overlapping pairwise.
    items = [_item(f"s{i}", _day(i), _day(i + 1)) for i in range(10)]
    items += [_item(f"d{i}", _day(i), _day(i + 1)) for i in range(10)]

    lanes = pack_bucket(items)

    assert set(lanes) == {0, 1}
    assert lanes[:10] == [0] * 10
    assert lanes[10:] == [1] * 10


def test_no_items_yields_no_rows() -> None:
    assignment = assign_rows([])

    assert assignment.rows == {}
    assert assignment.bands == []
    assert assignment.total_rows == 0


spans = st.tuples(
    st.sampled_from(["g1", "g2", "g3"]),
    st.integers(min_value=0, max_value=60),
    st.integers(min_value=0, max_value=15),
)


@settings(max_examples=200, deadline=None)
@given(st.lists(spans, max_size=40))
def test_no_two_overlapping_items_in_a_group_share_a_row(raw) -> None:
    items = [_item(f"i{n}", _day(start), _day(start + length), group) for n, (group, start, length) in enumerate(raw)]

    assignment = assign_rows(items)

    for a in items:
        for b in items:
            if a.id >= b.id or a.parent_group_id != b.parent_group_id:
                continue
            if a.span.overlaps(b.span):
                assert assignment.rows[a.id] != assignment.rows[b.id]


@settings(max_examples=200, deadline=None)
@given(st.lists(spans, max_size=40))
def test_group_bands_are_contiguous_and_disjoint(raw) -> None:
    items = [_item(f"i{n}", _day(start), _day(start + length), group) for n, (group, start, length) in enumerate(raw)]

    assignment = assign_rows(items)

    next_row = 0
    for band in assignment.bands:
        assert band.first_row == next_row
        used = {assignment.rows[item.id] for item in items if item.parent_group_id == band.group_id}
        assert used == set(range(band.first_row, band.last_row + 1))
        next_row = band.last_row + 1
    assert assignment.total_rows == next_row
