import json
import logging
import sqlite3
from contextlib import contextmanager

import config

logger = logging.getLogger(__name__)

DATABASE_PATH = config.DATABASE_PATH

USER_DETAIL_COLUMNS = (
    "name", "gender", "age", "activity_level", "goals", "height", "weight",
    "target_weight", "diseases", "email", "diet_plan", "healthscore", "track", "dm",
)


def init_database():
    """Create tables if they are missing."""
    conn = sqlite3.connect(DATABASE_PATH)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS user_credentials (
            email TEXT PRIMARY KEY,
            password TEXT NOT NULL
        )
    """)
    logger.info("[DB] user_credentials table ready")

    # One row per user, keyed by login email
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS user_details (
            email TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            gender TEXT NOT NULL,
            age INTEGER NOT NULL,
            activity_level TEXT NOT NULL,
            goals TEXT NOT NULL,
            height REAL NOT NULL,
            weight REAL NOT NULL,
            target_weight REAL NOT NULL,
            diseases TEXT NOT NULL,
            diet_plan TEXT,
            healthscore INTEGER NOT NULL,
            track TEXT,
            dm TEXT,
            FOREIGN KEY (email) REFERENCES user_credentials(email)
        )
    """)
    logger.info("[DB] user_details table ready")

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS contact_messages (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT,
            email TEXT,
            message TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    conn.commit()
    conn.close()
    logger.info("[DB] All database migrations completed successfully")


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


# --- credentials ---

def credentials_exist(email: str) -> bool:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM user_credentials WHERE email = ?", (email,))
        return cur.fetchone()[0] > 0


def create_credentials(email: str, password_hash: str):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("INSERT INTO user_credentials (email, password) VALUES (?, ?)", (email, password_hash))
        conn.commit()


def get_password_hash(email: str):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT password FROM user_credentials WHERE email = ?", (email,))
        row = cur.fetchone()
        return row["password"] if row else None


# --- user details ---

def check_email_exists(email: str) -> bool:
    """True when the user has already submitted the details form."""
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT COUNT(*) FROM user_details WHERE email = ?", (email,))
        return cur.fetchone()[0] > 0


def join_multi(value) -> str:
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return value or ""


def _number(values: dict, key: str, label: str, cast=float):
    try:
        return cast(values.get(key))
    except (TypeError, ValueError) as e:
        logger.warning("[DB] %s conversion error: %s", label, e)
        raise ValueError(f"invalid {label.lower()} format: {values.get(key)!r}") from e


def insert_user_data(values: dict) -> str:
    """Insert or update the details row for ``values['email']``.

    Form values arrive as strings; checkbox fields (``goals``, ``disease``)
    may be lists and are stored comma-joined. Raises ``ValueError`` when a
    numeric field can't be parsed.
    """
    email = values.get("email")
    if not isinstance(email, str) or not email:
        raise ValueError("invalid or missing email")
    logger.info("[DB] Processing data for email: %s", email)

    age = _number(values, "age", "Age", int)
    height = _number(values, "height", "Height")
    weight = _number(values, "weight", "Weight")
    target_weight = _number(values, "tweight", "Target weight")
    healthscore = _number(values, "healthscore", "Healthscore", int)

    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("""
            INSERT INTO user_details (
                email, name, gender, age, activity_level, goals,
                height, weight, target_weight, diseases, healthscore
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (email) DO UPDATE SET
                name = excluded.name,
                gender = excluded.gender,
                age = excluded.age,
                activity_level = excluded.activity_level,
                goals = excluded.goals,
                height = excluded.height,
                weight = excluded.weight,
                target_weight = excluded.target_weight,
                diseases = excluded.diseases,
                healthscore = excluded.healthscore
        """, (
            email, values.get("name", ""), values.get("gender", ""), age,
            values.get("activityLevel", ""), join_multi(values.get("goals")),
            height, weight, target_weight, join_multi(values.get("disease")), healthscore,
        ))
        conn.commit()

    logger.info("[DB] Successfully saved data for user: %s", email)
    return email


def get_user_details(email: str):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute(f"SELECT {', '.join(USER_DETAIL_COLUMNS)} FROM user_details WHERE email = ?", (email,))
        row = cur.fetchone()
        return dict(row) if row else None


def get_user_name(email: str):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT name FROM user_details WHERE email = ?", (email,))
        row = cur.fetchone()
        return row["name"] if row else None


def get_user_metrics(email: str):
    """Return ``(height_cm, weight_kg)`` or None."""
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT height, weight FROM user_details WHERE email = ?", (email,))
        row = cur.fetchone()
        return (row["height"], row["weight"]) if row else None


def get_healthscore(email: str):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT healthscore FROM user_details WHERE email = ?", (email,))
        row = cur.fetchone()
        return row["healthscore"] if row else None


def update_healthscore(email: str, healthscore: int):
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("UPDATE user_details SET healthscore = ? WHERE email = ?", (healthscore, email))
        conn.commit()


def read_all_users() -> list[dict]:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT * FROM user_details ORDER BY email")
        return [dict(r) for r in cur.fetchall()]


# --- meal track ---

def parse_track(raw) -> list[dict]:
    """Decode a stored track value.

    NULL gives an empty list and an older single-object value is wrapped
    into a one-element list.
    """
    if raw is None or raw == "":
        return []
    data = json.loads(raw)
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise ValueError(f"error parsing track data: unexpected {type(data).__name__}")


def fetch_track(email: str) -> list[dict]:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("SELECT track FROM user_details WHERE email = ?", (email,))
        row = cur.fetchone()
    if row is None:
        raise LookupError(f"no user details for {email}")
    return parse_track(row["track"])


def append_meals(values: dict):
    """Append one day entry to the user's track; ``email`` is popped from ``values``."""
    entry = dict(values)
    email = entry.pop("email", "")

    track = fetch_track(email)
    track.append(entry)

    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("UPDATE user_details SET track = ? WHERE email = ?", (json.dumps(track), email))
        conn.commit()


# --- diet plan / messages ---

def update_diet(email: str, diet: str, healthscore: int = 0) -> int:
    """Store a diet plan; a zero ``healthscore`` leaves the stored score alone."""
    with get_db() as conn:
        cur = conn.cursor()
        if healthscore == 0:
            cur.execute("UPDATE user_details SET diet_plan = ? WHERE email = ?", (diet, email))
        else:
            cur.execute(
                "UPDATE user_details SET diet_plan = ?, healthscore = ? WHERE email = ?",
                (diet, healthscore, email),
            )
        conn.commit()
        logger.info("[DB] Diet updated for %s (%d rows)", email, cur.rowcount)
        return cur.rowcount


def update_dm(email: str, message: str) -> int:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute("UPDATE user_details SET dm = ? WHERE email = ?", (message, email))
        conn.commit()
        return cur.rowcount


def save_contact_message(name: str, email: str, message: str) -> int:
    with get_db() as conn:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO contact_messages (name, email, message) VALUES (?, ?, ?)",
            (name, email, message),
        )
        conn.commit()
        return cur.lastrowid
