"""
Unit tests for services.tracking
"""
from services.tracking import calorie_series, meal_calories, weight_series

TRACK = [
    {"date": "2024-05-01", "breakfast": {"Poha": 250, "Total calories": 250}, "lunch": "dal rice",
     "dinner": {"Total calories": 500}, "weight": "70"},
    {"date": "2024-05-01", "breakfast": "tea", "lunch": "salad", "dinner": "soup", "weight": "69.5"},
    {"date": "2024-05-02", "breakfast": {"Total calories": "300"}, "lunch": {"Total calories": 400},
     "dinner": "skipped", "weight": "69"},
    {"breakfast": "no date"},
]


def test_meal_calories_handles_text_and_bad_values():
    assert meal_calories("dal rice") == 0
    assert meal_calories({"Total calories": "abc"}) == 0
    assert meal_calories({"Total calories": 412.0}) == 412


def test_weight_series_groups_by_date():
    assert weight_series(TRACK) == {"2024-05-01": ["70", "69.5"], "2024-05-02": ["69"]}


def test_calorie_series_sums_photo_meals():
    # second 2024-05-01 entry has only typed meals and replaces the first
    assert calorie_series(TRACK) == {"2024-05-01": 0, "2024-05-02": 700}


def test_empty_track():
    assert weight_series([]) == {}
    assert calorie_series([]) == {}
