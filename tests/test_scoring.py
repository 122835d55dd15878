import pytest

from conftest import full_marks
from skillcheck.domain.items import CARE_ITEMS, ONE_COLOR_ITEMS, TIME_ITEMS, item_by_id
from skillcheck.domain.ranking import classify
from skillcheck.domain.scoring import (
    category_sum,
    discipline_percentage,
    discipline_score,
    discipline_total,
    group_totals,
    item_percentage,
    item_score,
    overall_total,
)


def test_item_score_clamps_into_allocation():
    item = item_by_id("1-1")  # allocation 10
    assert item_score({"care_1_1": 7}, item) == 7
    assert item_score({"care_1_1": "7"}, item) == 7
    assert item_score({"care_1_1": 15}, item) == 10
    assert item_score({"care_1_1": -5}, item) == 0
    assert item_score({"care_1_1": "abc"}, item) == 0
    assert item_score({}, item) == 0
    assert item_score(None, item) == 0


@pytest.mark.parametrize(
    "raw, points",
    [("22分", 30.0), ("23:00", 22.5), ("24 minutes", 15.0), ("30", 7.5), (None, 0.0), ("", 0.0)],
)
def test_time_item_score_follows_timetable_rank(raw, points):
    item = item_by_id("33-1")  # allocation 30, timetable 22/23/24
    assert item_score({"time_33_1": raw}, item) == pytest.approx(points)


def test_category_sum_selectors():
    record = {"color_14_1": 10, "color_14_2": 20, "color_15_1": 20, "color_26_1": 5}
    assert category_sum(record, ONE_COLOR_ITEMS, "14") == 30.0
    assert category_sum(record, ONE_COLOR_ITEMS, 14) == 30.0
    assert category_sum(record, ONE_COLOR_ITEMS, (14, 15)) == 50.0
    assert category_sum(record, ONE_COLOR_ITEMS, [14, 15]) == 50.0
    assert category_sum(record, ONE_COLOR_ITEMS, [None, 14]) == 30.0
    assert category_sum(record, ONE_COLOR_ITEMS, (20, None)) == 5.0
    assert category_sum(record, ONE_COLOR_ITEMS, None) == 55.0
    assert category_sum(record, ONE_COLOR_ITEMS, "99") == 0.0
    assert category_sum(None, CARE_ITEMS, (1, 3)) == 0.0


def test_discipline_total_prefers_stored_field():
    assert discipline_total({"care_score": 300, "care_1_1": 10}, CARE_ITEMS) == 300
    assert discipline_total({"care_score": "300"}, CARE_ITEMS) == 300
    assert discipline_total({"care_score": -5}, CARE_ITEMS) == 0
    assert discipline_total({"care_score": "n/a", "care_1_1": 10}, CARE_ITEMS) == 10
    assert discipline_total({"care_1_1": 10, "care_1_2": 15}, CARE_ITEMS) == 25
    assert discipline_total({}, CARE_ITEMS) == 0


def test_full_marks_reach_every_maximum():
    record = full_marks()
    assert discipline_score(record, "care") == 410
    assert discipline_score(record, "one_color") == 610
    assert discipline_score(record, "gradation") == 170
    assert discipline_score(record, "time") == 300
    assert discipline_total(record, TIME_ITEMS) == 300
    assert overall_total(record) == 1320


def test_overall_total_excludes_gradation():
    record = {"care_score": 300, "color_score": 400, "art_score": 150, "time_score": 200}
    assert overall_total(record) == 900
    assert overall_total({**record, "total_score": 1000}) == 1000
    assert overall_total({**record, "total_score": "abc"}) == 900
    assert overall_total(None) == 0.0


def test_percentages():
    item = item_by_id("1-2")  # allocation 20
    assert item_percentage({"care_1_2": 15}, item) == 75.0
    assert item_percentage({"care_1_2": 40}, item) == 100.0
    assert item_percentage({}, item) == 0.0
    assert discipline_percentage(85, "gradation") == 50.0
    assert discipline_percentage(500, "care") == 100.0
    assert discipline_percentage(None, "care") == 0.0
    assert discipline_percentage(660, "total") == 50.0


@pytest.mark.parametrize(
    "item_id, raw, expected",
    [
        ("1-2", -5, 0.0),
        ("1-2", 1e12, 100.0),
        ("1-2", 10**400, 100.0),
        ("1-2", "n/a", 0.0),
        ("1-2", float("inf"), 0.0),
        ("33-1", "22分30秒", 75.0),
        ("33-1", "-", 0.0),
        ("33-1", "9" * 400, 0.0),
    ],
)
def test_item_percentage_stays_in_range(item_id, raw, expected):
    item = item_by_id(item_id)
    percentage = item_percentage({item.key: raw}, item)
    assert 0.0 <= percentage <= 100.0
    assert percentage == expected


def test_huge_stored_totals_do_not_raise():
    assert discipline_total({"care_score": 10**400}, CARE_ITEMS) > 410
    assert discipline_percentage(10**400, "care") == 100.0
    assert classify(discipline_total({"care_score": 10**400}, CARE_ITEMS), "care") == "AAA"


def test_group_totals_in_display_order():
    record = {"care_1_1": 10, "care_4_1": 20, "care_7_1": 20, "care_13_3": 10}
    totals = group_totals(record, "care")
    assert list(totals) == ["File finish", "Shape", "Cuticle"]
    assert totals == {"File finish": 10.0, "Shape": 20.0, "Cuticle": 30.0}
    assert group_totals(record, "total") == {}


def test_single_item_care_record_ranks_b():
    record = {item.key: 0 for item in CARE_ITEMS}
    record["care_1_2"] = 20
    total = discipline_total(record, CARE_ITEMS)
    assert total == 20
    assert classify(total, "care") == "B"
    assert classify(discipline_total(full_marks(), CARE_ITEMS), "care") == "AAA"


def test_missing_items_leave_other_categories_intact():
    record = {item.key: item.allocation for item in ONE_COLOR_ITEMS[10:]}
    assert category_sum(record, ONE_COLOR_ITEMS, "20") == 50
    assert category_sum(record, ONE_COLOR_ITEMS, (20, 27)) == 320
    assert discipline_total(record, ONE_COLOR_ITEMS) == 610 - 150
