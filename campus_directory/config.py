"""Configuration for the campus directory service.

All values can be overridden via environment variables or a ``.env`` file in
the working directory. Store paths are never hard-coded credentials: point
them at separate files for the three-store layout, or at the same file to keep
every role in one partitioned database.
"""

import os
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv

load_dotenv()

# --- Directory Configuration ---

ROOT_DIR = Path(__file__).parent.parent.resolve()
DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))

# --- Store Configuration ---

ADMIN_DB_PATH: str = os.getenv("ADMIN_DB_PATH", str(DATA_DIR / "admin.db"))
TEACHER_DB_PATH: str = os.getenv("TEACHER_DB_PATH", str(DATA_DIR / "teacher.db"))
STUDENT_DB_PATH: str = os.getenv("STUDENT_DB_PATH", str(DATA_DIR / "student.db"))

# Uploaded spreadsheets are written here and removed once processed.
UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", str(DATA_DIR / "uploads"))

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", os.getenv("PORT", "5000")))


def _parse_origins(raw: str) -> List[str]:
    parts = [item.strip() for item in str(raw or "").split(",")]
    return [item for item in parts if item]


CORS_ALLOWED_ORIGINS: List[str] = _parse_origins(os.getenv("CORS_ALLOWED_ORIGINS", "*"))

# --- Logging ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def store_paths() -> Dict[str, str]:
    """Return the configured database path for each role."""
    return {
        "admin": ADMIN_DB_PATH,
        "teacher": TEACHER_DB_PATH,
        "student": STUDENT_DB_PATH,
    }
