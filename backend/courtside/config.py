# backend/courtside/config.py
from __future__ import annotations
import os


def _csv(value: str) -> set[str]:
    return {part.strip() for part in value.split(",") if part.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/courtside.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",  # optional alternative location
        "sqlite:///courtside.sqlite3",  # default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Front-end origins allowed by the CORS hook
    CORS_ORIGINS = _csv(
        os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
        )
    )

    # Seconds between SSE keepalive comments on the notification stream
    NOTIFICATION_HEARTBEAT_SECONDS = int(os.environ.get("NOTIFICATION_HEARTBEAT_SECONDS", "15"))

    # Bootstrap defaults for `flask system init`
    SEED_OWNER_EMAIL = os.environ.get("SEED_OWNER_EMAIL", "owner@courtside.local")
    SEED_OWNER_PASSWORD = os.environ.get("SEED_OWNER_PASSWORD", "Password123!")
    SEED_TABLE_COUNT = int(os.environ.get("SEED_TABLE_COUNT", "10"))
