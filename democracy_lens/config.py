import os
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional
from openai import OpenAI

# Go up one level from democracy_lens/ to root/
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
NYT_API_KEY = os.getenv("NYT_API_KEY", "")

DB_URL = os.getenv("DB_URL", "sqlite:///democracy_lens.db")
TIMEZONE = os.getenv("TIMEZONE", "UTC")

ENABLE_SCHEDULER = os.getenv("ENABLE_SCHEDULER", "true").lower() in ("1", "true", "yes")
FEED_REFRESH_MINUTES = int(os.getenv("FEED_REFRESH_MINUTES", "60"))

# Optional JSON file overriding the heuristic source table and keyword lists
BIAS_TABLE_PATH = os.getenv("BIAS_TABLE_PATH", "")

REQUESTS_TIMEOUT = float(os.getenv("REQUESTS_TIMEOUT", "15"))


def build_openai_client(api_key: Optional[str] = None) -> Optional[OpenAI]:
    """Return an OpenAI client, or None when no key is configured (fallback-only mode)."""
    key = api_key if api_key is not None else OPENAI_API_KEY
    if not key:
        return None
    return OpenAI(api_key=key)
