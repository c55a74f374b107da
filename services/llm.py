"""LLM wrapper.

Primary: Groq (OpenAI-compatible) chat + vision when GROQ_API_KEY is set.
Fallback: Gemini generateContent when GEMINI_API_KEY is set.

When neither provider produces an answer an AIServiceError is raised; the
route handlers turn that into an HTTP 500.
"""

from __future__ import annotations

import base64
import json
import logging

import requests

import config

logger = logging.getLogger(__name__)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class AIServiceError(RuntimeError):
    """No AI provider could answer the request."""


def groq_chat(messages: list[dict], *, model: str | None = None, max_tokens: int = 2048) -> str:
    key = config.GROQ_API_KEY
    if not key:
        raise AIServiceError("groq AI client not initialized")
    payload = {
        "model": model or config.GROQ_MODEL,
        "messages": messages,
        "temperature": 0.4,
        "max_tokens": max_tokens,
    }
    headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json"}
    try:
        r = requests.post(GROQ_URL, headers=headers, data=json.dumps(payload), timeout=config.AI_TIMEOUT)
    except requests.RequestException as e:
        logger.error("[Groq] Failed to send request: %s", e)
        raise AIServiceError(f"groq request failed: {e}") from e
    if r.status_code != 200:
        logger.error("[Groq] API request failed with status %d: %s", r.status_code, r.text[:500])
        raise AIServiceError(f"API request failed with status {r.status_code}")
    try:
        choices = (r.json() or {}).get("choices") or []
        if not choices:
            raise AIServiceError("no response from Groq API")
        content = (choices[0].get("message") or {}).get("content")
    except (ValueError, TypeError, AttributeError) as e:
        logger.error("[Groq] Unreadable response body: %s", e)
        raise AIServiceError("invalid response from Groq API") from e
    if not content or not isinstance(content, str):
        raise AIServiceError("empty response from Groq API")
    logger.info("[Groq] Response generated successfully")
    return content


def gemini_generate(parts: list[dict], *, model: str | None = None) -> str:
    key = config.GEMINI_API_KEY
    if not key:
        raise AIServiceError("gemini AI client not initialized")
    url = GEMINI_URL.format(model=model or config.GEMINI_MODEL)
    payload = {"contents": [{"parts": parts}]}
    try:
        r = requests.post(url, params={"key": key}, json=payload, timeout=config.AI_TIMEOUT)
        r.raise_for_status()
    except requests.RequestException as e:
        logger.error("[Gemini] GenerateContent error: %s", e)
        raise AIServiceError(f"gemini request failed: {e}") from e
    try:
        text = r.json()["candidates"][0]["content"]["parts"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.error("[Gemini] Unreadable response body: %s", e)
        raise AIServiceError("invalid AI response format") from e
    if not isinstance(text, str):
        raise AIServiceError("invalid AI response format")
    logger.info("[Gemini] Content generated successfully")
    return text


def _providers_configured() -> bool:
    return bool(config.GROQ_API_KEY or config.GEMINI_API_KEY)


def answer(prompt: str, *, system: str | None = None) -> str:
    """Plain text completion, Groq first then Gemini."""
    if not _providers_configured():
        raise AIServiceError("no AI provider configured")
    msg = []
    if system:
        msg.append({"role": "system", "content": system})
    msg.append({"role": "user", "content": prompt})
    errors = []
    if config.GROQ_API_KEY:
        try:
            return groq_chat(msg).strip()
        except AIServiceError as e:
            errors.append(str(e))
    if config.GEMINI_API_KEY:
        text = f"{system}\n\n{prompt}" if system else prompt
        try:
            return gemini_generate([{"text": text}]).strip()
        except AIServiceError as e:
            errors.append(str(e))
    raise AIServiceError("; ".join(errors))


def describe_image(prompt: str, image: bytes, image_type: str) -> str:
    """Ask a vision model about one image; returns the raw model text."""
    if not _providers_configured():
        raise AIServiceError("no AI provider configured")
    b64 = base64.b64encode(image).decode("ascii")
    errors = []
    if config.GROQ_API_KEY:
        msg = [{
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:image/{image_type};base64,{b64}"}},
            ],
        }]
        try:
            return groq_chat(msg, model=config.GROQ_VISION_MODEL, max_tokens=1024)
        except AIServiceError as e:
            errors.append(str(e))
    if config.GEMINI_API_KEY:
        parts = [
            {"text": prompt},
            {"inline_data": {"mime_type": f"image/{image_type}", "data": b64}},
        ]
        try:
            return gemini_generate(parts)
        except AIServiceError as e:
            errors.append(str(e))
    raise AIServiceError("; ".join(errors))
