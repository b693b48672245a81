"""Environment variable loading and configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

VERSION = "1.1.0"


def get_env(key: str, default: str | None = None) -> str:
    """Get an environment variable or raise if missing and no default."""
    value = os.getenv(key, default)
    if value is None:
        raise ValueError(f"Missing required environment variable: {key}")
    return value


# Discovery source: "huggingface" (live listing) or "synthetic" (built-in catalogue)
PROVIDER = get_env("LLM_CHECKER_PROVIDER", "huggingface")

# Hugging Face listing endpoint
HF_API_URL = get_env("HF_API_URL", "https://huggingface.co/api/models")
HF_TOKEN = os.getenv("HF_TOKEN")  # optional, raises the anonymous rate limit
HF_POLL_LIMIT = int(get_env("HF_POLL_LIMIT", "20"))
HF_POLL_TASK = get_env("HF_POLL_TASK", "text-generation")
HF_TIMEOUT = float(get_env("HF_TIMEOUT", "30"))

# Cycle behaviour
VALIDATION_DELAY = float(get_env("VALIDATION_DELAY", "0.3"))  # seconds per record
POPULARITY_THRESHOLD = int(get_env("POPULARITY_THRESHOLD", "10000"))  # downloads

# Paths
EXPORT_DIR = Path(get_env("EXPORT_DIR", str(_PROJECT_ROOT / "data")))
