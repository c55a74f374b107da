"""Daily calorie target (Mifflin-St Jeor)."""

ACTIVITY_FACTORS = {
    "little": 1.2,
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
}


def calculate_bmr(weight, height, age, gender):
    """
    Basal Metabolic Rate in kcal/day.

    Args:
        weight: Weight in kg
        height: Height in cm
        age: Age in years
        gender: 'male' or anything else
    """
    base = (10 * weight) + (6.25 * height) - (5 * age)
    return base + 5 if (gender or "").lower() == "male" else base - 161


def daily_calorie_target(user):
    """Calories/day to move from current toward target weight, or None if data is missing."""
    try:
        weight = float(user["weight"])
        height = float(user["height"])
        age = int(user["age"])
    except (KeyError, TypeError, ValueError):
        return None

    bmr = calculate_bmr(weight, height, age, user.get("gender"))
    calories = bmr * ACTIVITY_FACTORS.get((user.get("activity_level") or "").lower(), 1.2)

    try:
        target = float(user.get("target_weight"))
    except (TypeError, ValueError):
        target = weight
    if target < weight:
        calories -= 500
    elif target > weight:
        calories += 300
    return round(calories)
