"""BMI and health score calculation."""

ACTIVITY_PENALTIES = {
    "little": 15,
    "moderate": 5,
    "active": 0,
}


def calculate_bmi(weight, height):
    """
    Body mass index rounded to 2 decimals.

    Args:
        weight: Weight in kg
        height: Height in cm

    Returns:
        BMI, or 0 when height is missing
    """
    height_m = float(height or 0) / 100.0
    if height_m <= 0:
        return 0
    return round(float(weight or 0) / (height_m * height_m), 2)


def count_conditions(diseases):
    """Number of listed medical conditions in a comma separated string."""
    items = [d.strip().lower() for d in (diseases or "").split(",")]
    return len([d for d in items if d and d != "none"])


def calculate_health_score(user, bmi):
    """
    Health score on a 0-10 scale.

    Starts from 100 and deducts for BMI outside the normal range, age,
    low activity, each medical condition and the gap to the target weight.

    Args:
        user: Dict with age, activity_level, diseases, weight, target_weight
        bmi: Body mass index

    Returns:
        Integer 0-10
    """
    score = 100

    # Normal BMI range is 18.5-24.9
    if bmi < 18.5:
        score -= 10
    elif 25 <= bmi < 30:
        score -= 10
    elif bmi >= 30:
        score -= 20

    age = int(user.get("age") or 0)
    if age > 60:
        score -= 10
    elif age < 18:
        score -= 5

    score -= ACTIVITY_PENALTIES.get((user.get("activity_level") or "").lower(), 0)

    score -= count_conditions(user.get("diseases")) * 5

    weight_diff = abs(float(user.get("weight") or 0) - float(user.get("target_weight") or 0))
    if weight_diff > 20:
        score -= 15
    elif weight_diff > 10:
        score -= 10
    elif weight_diff > 5:
        score -= 5

    score = max(0, min(100, score))
    return score // 10
