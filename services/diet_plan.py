"""Diet plan and quick tip generation."""

from __future__ import annotations

import logging

from services.bmr import daily_calorie_target
from services.llm import answer
from services.tracking import calorie_series

logger = logging.getLogger(__name__)

PLANNER_SYSTEM = """You are Blissful Bites, a friendly Indian nutritionist who specializes in traditional Indian vegetarian diets. Write a personalized Indian diet plan in a warm, conversational tone. Consider:

1. Current Stats:
   - Weight, height, and BMI
   - Activity level
   - Any health conditions

2. Goals:
   - Weight goals (loss/gain/maintenance)
   - Fitness objectives
   - Following authentic Indian vegetarian cuisine

For the diet plan:
- Suggest authentic, home-cooked Indian vegetarian meals
- Include regional dishes from across India (North, South, East, West)
- Recommend common Indian ingredients and preparations
- Balance traditional wisdom with modern nutritional science
- Keep portions realistic for an Indian household
- Include common Indian measurements (katori, chammach)

IMPORTANT FORMATTING:
- Write in complete sentences like you're speaking to a friend
- DO NOT use asterisks, bullet points, or markdown formatting
- Create clear meal sections with natural transitions
- Mention specific dishes by name (various dals, sabzis, rotis, idli, dosa, etc.)
- Include both everyday meals and some special dishes
- Suggest freshly made items, not packaged foods"""

TIP_SYSTEM = (
    'You are an expert nutritionist, named "Blissful Bites", where you assess users data '
    "(along with the calories if they have been tracking) and suggest very very short diet "
    "plans (in a nutshell, in few lines) accordingly."
)


def _as_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return "" if value is None else str(value)


def build_user_prompt(data: dict) -> str:
    """User block for the planner; keys follow the details form (``tweight``, ``disease``...)."""
    target = daily_calorie_target({
        "weight": data.get("weight"),
        "height": data.get("height"),
        "age": data.get("age"),
        "gender": data.get("gender"),
        "activity_level": data.get("activityLevel"),
        "target_weight": data.get("tweight"),
    })
    lines = [
        f"Name: {_as_text(data.get('name'))}",
        f"Age: {_as_text(data.get('age'))}",
        f"Gender: {_as_text(data.get('gender'))}",
        f"Activity Level: {_as_text(data.get('activityLevel'))}",
        f"Goals: {_as_text(data.get('goals'))}",
        f"Height: {_as_text(data.get('height'))} cm",
        f"Weight: {_as_text(data.get('weight'))} kg",
        f"Target Weight: {_as_text(data.get('tweight'))} kg",
        f"Medical Conditions: {_as_text(data.get('disease')) or 'None'}",
    ]
    if target:
        lines.append(f"Daily Calorie Target: about {target} kcal")
    return (
        "Generate a detailed diet plan for:\n" + "\n".join(lines) + "\n\n"
        "Please provide a detailed daily diet plan including breakfast, lunch, dinner, and snacks. "
        "Include portion sizes and timing. Consider their medical conditions and fitness goals."
    )


def generate_diet_plan(data: dict) -> str:
    prompt = build_user_prompt(data)
    logger.debug("[genDietPlan] Prompt: %s", prompt)
    return answer(f"User Data:\n{prompt}", system=PLANNER_SYSTEM)


def generate_diet_tip(details: dict, track: list[dict]) -> str:
    """Short suggestion from stored details plus the last week of tracked calories."""
    recent = list(calorie_series(track).items())[-7:]
    user_data = (
        f"Age: {details.get('age')}, Gender: {details.get('gender')}, "
        f"Height: {details.get('height')} cm, Weight: {details.get('weight')} kg, "
        f"Target weight: {details.get('target_weight')} kg, "
        f"Activity: {details.get('activity_level')}, Goals: {details.get('goals')}, "
        f"Conditions: {details.get('diseases') or 'None'}\n"
        f"Tracked calories by date: {dict(recent) if recent else 'not tracking yet'}"
    )
    return answer(user_data, system=TIP_SYSTEM)
