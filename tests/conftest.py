"""
Shared pytest fixtures: a throwaway sqlite file per test and AI keys unset.
"""
import io

import pytest
from PIL import Image

import config
import database


@pytest.fixture(autouse=True)
def no_ai_keys(monkeypatch):
    monkeypatch.setattr(config, "GROQ_API_KEY", "")
    monkeypatch.setattr(config, "GEMINI_API_KEY", "")


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    path = str(tmp_path / "test.db")
    monkeypatch.setattr(database, "DATABASE_PATH", path)
    database.init_database()
    return path


@pytest.fixture
def user_form():
    return {
        "email": "asha@example.com",
        "name": "Asha",
        "gender": "female",
        "age": "30",
        "activityLevel": "active",
        "goals": "lose weight",
        "height": "160",
        "weight": "60",
        "tweight": "58",
        "disease": "",
        "healthscore": "9",
    }


def image_bytes(fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 120, 40)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return image_bytes("PNG")
