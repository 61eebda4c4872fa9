"""
Runtime settings for the planner backend.

Values come from the process environment, with a `.env` file at the project
root loaded first so local runs do not need exported variables.
"""

import os

from dotenv import load_dotenv

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BACKEND_DIR)

load_dotenv(os.path.join(PROJECT_ROOT, ".env"))


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


def _env_path(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if not raw:
        return default
    if not os.path.isabs(raw):
        return os.path.join(PROJECT_ROOT, raw)
    return raw


DATA_PATH = _env_path("DATA_PATH", os.path.join(PROJECT_ROOT, "data"))
PLAN_PATH = _env_path("PLAN_PATH", os.path.join(PROJECT_ROOT, "planner_state.json"))

HISTORY_LIMIT = _env_int("HISTORY_LIMIT", 50)
FETCH_WORKERS = _env_int("FETCH_WORKERS", 8)

# Credit-load defaults for generated terms.
DEFAULT_CREDIT_HOURS = _env_int("DEFAULT_CREDIT_HOURS", 3)
MIN_CREDITS = _env_int("MIN_CREDITS", 12)
MAX_CREDITS = _env_int("MAX_CREDITS", 18)
DEGREE_CREDIT_TARGET = _env_int("DEGREE_CREDIT_TARGET", 120)
