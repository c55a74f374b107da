"""
Unit tests for services.health_score and services.bmr
"""
import pytest

from services.bmr import calculate_bmr, daily_calorie_target
from services.health_score import calculate_bmi, calculate_health_score, count_conditions


class TestCalculateBmi:
    def test_rounds_to_two_decimals(self):
        assert calculate_bmi(70, 175) == 22.86

    def test_zero_height_returns_zero(self):
        assert calculate_bmi(70, 0) == 0

    def test_accepts_strings(self):
        assert calculate_bmi("81", "180") == 25.0


class TestCountConditions:
    @pytest.mark.parametrize("diseases,expected", [
        ("", 0),
        (None, 0),
        ("none", 0),
        ("diabetes", 1),
        ("diabetes, hypertension,", 2),
    ])
    def test_counts_listed_conditions(self, diseases, expected):
        assert count_conditions(diseases) == expected


class TestCalculateHealthScore:
    def test_healthy_user_scores_ten(self):
        user = {"age": 30, "activity_level": "active", "diseases": "", "weight": 70, "target_weight": 70}
        assert calculate_health_score(user, calculate_bmi(70, 175)) == 10

    def test_every_penalty_applies(self):
        # obese -20, age -10, little -15, two conditions -10, gap 25kg -15
        user = {
            "age": 65,
            "activity_level": "Little",
            "diseases": "diabetes,hypertension",
            "weight": 95,
            "target_weight": 70,
        }
        assert calculate_health_score(user, calculate_bmi(95, 170)) == 3

    def test_teen_underweight_moderate(self):
        user = {"age": 16, "activity_level": "moderate", "diseases": "none", "weight": 49, "target_weight": 55}
        assert calculate_health_score(user, calculate_bmi(49, 170)) == 7

    def test_score_never_negative(self):
        user = {
            "age": 70,
            "activity_level": "little",
            "diseases": ",".join(["x"] * 30),
            "weight": 150,
            "target_weight": 70,
        }
        assert calculate_health_score(user, 45) == 0


class TestCalorieTarget:
    def test_bmr_male(self):
        assert calculate_bmr(70, 175, 30, "male") == pytest.approx(1648.75)

    def test_bmr_female(self):
        assert calculate_bmr(70, 175, 30, "Female") == pytest.approx(1482.75)

    def test_weight_loss_target(self):
        user = {"weight": 70, "height": 175, "age": 30, "gender": "male",
                "activity_level": "moderate", "target_weight": 65}
        assert daily_calorie_target(user) == 2056

    def test_weight_gain_target(self):
        user = {"weight": "60", "height": "180", "age": "30", "gender": "male",
                "activity_level": "little", "target_weight": "70"}
        # (600 + 1125 - 150 + 5) * 1.2 + 300
        assert daily_calorie_target(user) == 2196

    def test_missing_data_returns_none(self):
        assert daily_calorie_target({"weight": 70}) is None
