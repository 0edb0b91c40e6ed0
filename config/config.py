"""Settings shared by every environment module.

Each value reads an environment variable (``.env`` is loaded by the app
factory through python-dotenv) and falls back to a development default.
"""
import os
from datetime import date
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]


def env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def env_holidays(name: str = "HOLIDAYS") -> tuple:
    """Comma-separated ISO dates, e.g. ``2025-12-25,2026-01-01``."""
    raw = os.getenv(name, "")
    return tuple(date.fromisoformat(p.strip()) for p in raw.split(",") if p.strip())


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = int(os.getenv("DB_PORT", "3306"))
    DB_USER = os.getenv("DB_USER", "root")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_NAME = os.getenv("DB_NAME", "hr_records")

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", str(REPO_ROOT / "storage"))
    # A little above the largest single upload (5 travel documents of 5 MB).
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(30 * 1024 * 1024)))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    HOLIDAYS = env_holidays()

    HR_API_URL = os.getenv("HR_API_URL", "http://localhost:5000")
    HR_API_TIMEOUT = float(os.getenv("HR_API_TIMEOUT", "15"))

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
        }
