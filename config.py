import os
from dotenv import load_dotenv

# cred.env holds the deployment secrets; .env is picked up for local runs.
load_dotenv("cred.env")
load_dotenv()

ENV = os.getenv("ENV", "development")
DEBUG = os.getenv("DEBUG", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

HOST = os.getenv("HOST", "localhost")
PORT = int(os.getenv("PORT", "8080"))

SECRET_KEY = os.getenv("SECRET_KEY", "blissfulbites-dev-secret")
SESSION_SECRET = os.getenv("SESSION_SECRET", SECRET_KEY)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./blissfulbites.db")
DATABASE_PATH = os.getenv("DATABASE_PATH", DATABASE_URL.replace("sqlite:///", "", 1) if DATABASE_URL.startswith("sqlite:///") else "blissfulbites.db")

# Auth backend: "db" (user_credentials table) or "json" (users.json file)
AUTH_BACKEND = os.getenv("AUTH_BACKEND", "db").lower()
USERS_JSON_PATH = os.getenv("USERS_JSON_PATH", "users.json")

# Comma separated; empty leaves /admin and /dm open
ADMIN_EMAILS = [e.strip().lower() for e in os.getenv("ADMIN_EMAILS", "").split(",") if e.strip()]

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
GROQ_VISION_MODEL = os.getenv("GROQ_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

AI_TIMEOUT = float(os.getenv("AI_TIMEOUT", "60"))
