"""Central Configuration for FitCoach."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Base Directory (Root of the project)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load Environment Variables
load_dotenv(BASE_DIR / ".env")


def _optional_int(name: str):
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return int(value)


# LLM Settings
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL_NAME = os.getenv("GEMINI_MODEL_NAME", "gemini-2.0-flash")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_MAX_OUTPUT_TOKENS = int(os.getenv("LLM_MAX_OUTPUT_TOKENS", "1000"))

# Persistence
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'fitcoach.db'}")

# Conversation Store Settings
MAX_HISTORY_MESSAGES = 20
STORE_MAX_USERS = _optional_int("STORE_MAX_USERS")      # LRU bound, None = unbounded
STORE_TTL_SECONDS = _optional_int("STORE_TTL_SECONDS")  # Idle expiry, None = never

# Plan Duration Rules (weeks)
MIN_PLAN_WEEKS = 4
MAX_PLAN_WEEKS = 52
DEFAULT_PLAN_WEEKS = 4
