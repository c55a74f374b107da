"""Chart series from the meal track log."""

from __future__ import annotations

from services.meal_scan import MEALS

TOTAL_KEY = "Total calories"


def meal_calories(meal) -> int:
    """Total calories of a photo-analysed meal; typed meals count as 0."""
    if not isinstance(meal, dict):
        return 0
    try:
        return int(float(meal.get(TOTAL_KEY) or 0))
    except (TypeError, ValueError):
        return 0


def weight_series(track: list[dict]) -> dict[str, list]:
    out: dict[str, list] = {}
    for entry in track:
        if "weight" in entry and "date" in entry:
            out.setdefault(entry["date"], []).append(entry["weight"])
    return out


def calorie_series(track: list[dict]) -> dict[str, int]:
    """Calories per date; a later entry for the same date replaces the earlier one."""
    out: dict[str, int] = {}
    for entry in track:
        if "date" not in entry:
            continue
        out[entry["date"]] = sum(meal_calories(entry.get(m)) for m in MEALS)
    return out
