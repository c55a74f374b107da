"""Email/password auth.

Two backends share the same contract:
 - DBAuth: bcrypt hashes in the user_credentials table (default)
 - JSONAuth: bcrypt hashes in a users.json file, for running without a DB

Both serialize signup/login behind one lock.
"""

from __future__ import annotations

import json
import logging
import os
import threading

from passlib.context import CryptContext

import database

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(pw: str) -> str:
    return pwd_context.hash(pw)


def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return pwd_context.verify(pw, pw_hash)
    except (ValueError, TypeError):
        return False


class Auth:
    def login(self, username: str, password: str) -> bool:
        raise NotImplementedError

    def signup(self, username: str, password: str) -> bool:
        raise NotImplementedError


class JSONAuth(Auth):
    """Users kept in a JSON list of ``{"username", "password"}`` objects."""

    def __init__(self, path: str = "users.json"):
        self.path = path
        self.users: list[dict] = []
        self._lock = threading.Lock()
        try:
            self.load_users()
        except (OSError, ValueError) as e:
            logger.warning("[JSONAuth] Error loading users from %s: %s", path, e)

    def load_users(self):
        with open(self.path, "r", encoding="utf-8") as f:
            self.users = json.load(f) or []

    def save_users(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.users, f)

    def login(self, username: str, password: str) -> bool:
        with self._lock:
            for user in self.users:
                if user.get("username") == username:
                    return verify_password(password, user.get("password", ""))
            return False

    def signup(self, username: str, password: str) -> bool:
        with self._lock:
            if any(u.get("username") == username for u in self.users):
                return False
            self.users.append({"username": username, "password": hash_password(password)})
            try:
                self.save_users()
            except OSError as e:
                logger.error("[JSONAuth] Error saving user: %s", e)
                self.users.pop()
                return False
            return True


class DBAuth(Auth):
    def __init__(self):
        self._lock = threading.Lock()

    def signup(self, username: str, password: str) -> bool:
        with self._lock:
            try:
                if database.credentials_exist(username):
                    return False
                database.create_credentials(username, hash_password(password))
            except Exception as e:
                logger.error("[DBAuth] Error inserting user credentials: %s", e)
                return False
            return True

    def login(self, username: str, password: str) -> bool:
        with self._lock:
            try:
                pw_hash = database.get_password_hash(username)
            except Exception as e:
                logger.error("[DBAuth] Error querying user credentials: %s", e)
                return False
            if not pw_hash:
                return False
            return verify_password(password, pw_hash)


def get_auth(backend: str, users_path: str = "users.json") -> Auth:
    if backend == "json":
        return JSONAuth(os.path.abspath(users_path))
    return DBAuth()
