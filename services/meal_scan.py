"""Meal photo calorie estimation.

Each uploaded photo goes to the vision model on its own worker thread; the
per-field results are then merged with any typed-in meal descriptions.
"""

from __future__ import annotations

import io
import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor

from PIL import Image, UnidentifiedImageError

from services.llm import AIServiceError, describe_image

logger = logging.getLogger(__name__)

MEALS = ("breakfast", "lunch", "dinner")

CALORIE_PROMPT = """As a precision nutritionist, analyze this food image and provide detailed nutritional information. Focus on:

1. Identify all visible food items
2. Calculate accurate calorie content for each item
3. Consider portion sizes and preparation methods
4. Account for visible ingredients and likely preparation methods

Provide the analysis in this exact JSON format:
{
    "Food Item 1": calories (integer),
    "Food Item 2": calories (integer),
    ...
    "Total calories": sum_of_all_calories (integer)
}

Requirements:
- Use precise calorie values
- Include ALL visible food items
- Consider serving sizes
- Include ONLY the JSON output, no additional text
- Ensure all calorie values are integers
- Always include the "Total calories" field"""

_FORMATS = {"PNG": "png", "WEBP": "webp", "JPEG": "jpeg"}
_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class MissingMealError(ValueError):
    def __init__(self, meal: str):
        super().__init__(f"{meal.capitalize()} missing")
        self.meal = meal


def detect_image_type(data: bytes) -> str:
    """Image subtype for the data URI; anything unrecognised is sent as png."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
        return "png"
    return _FORMATS.get(fmt or "", "png")


def parse_calorie_json(text: str) -> dict:
    """Pull the calorie object out of a model reply (bare or fenced JSON)."""
    m = _FENCE.search(text or "")
    body = m.group(1) if m else (text or "")
    start, end = body.find("{"), body.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("no JSON object in model response")
    data = json.loads(body[start:end + 1])
    if not isinstance(data, dict):
        raise ValueError("model response is not a JSON object")
    return data


def analyze_meal_image(field: str, data: bytes):
    """Returns ``(field, calories_dict)``; the dict is None when analysis failed."""
    image_type = detect_image_type(data)
    logger.info("[mealScan] %s: %d bytes, type %s", field, len(data), image_type)
    try:
        reply = describe_image(CALORIE_PROMPT, data, image_type)
        result = parse_calorie_json(reply)
    except (AIServiceError, ValueError) as e:
        logger.error("[mealScan] Analysis failed for %s: %s", field, e)
        return field, None
    logger.info("[mealScan] Parsed meal data for %s", field)
    return field, result


def analyze_meal_uploads(files: list[tuple[str, bytes]]) -> dict:
    """Analyze every ``(field, bytes)`` upload concurrently, one thread each.

    Returns ``{field: result}``; when a field carries several files the last
    upload in the list wins.
    """
    if not files:
        return {}
    results = {}
    with ThreadPoolExecutor(max_workers=len(files)) as pool:
        futures = [pool.submit(analyze_meal_image, field, data) for field, data in files]
        for fut in futures:
            field, result = fut.result()
            logger.info("[trackMeal] Processed image for: %s", field)
            if result is not None:
                results[field] = result
    return results


def merge_meals(texts: dict, images: dict) -> dict:
    """Pick each meal from its photo result or, failing that, its text."""
    merged = {}
    for meal in MEALS:
        image_result = images.get(f"{meal}_img")
        text = (texts.get(meal) or "").strip()
        if image_result is not None:
            merged[meal] = image_result
        elif text:
            merged[meal] = text
        else:
            raise MissingMealError(meal)
    return merged
