import os
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()

# --- Model gateway ---
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
MODEL_NAME = os.getenv("JOURNEY_MODEL", "claude-sonnet-4-5")
TEMPERATURE = float(os.getenv("JOURNEY_TEMPERATURE", "0.7"))
MAX_TOKENS = int(os.getenv("JOURNEY_MAX_TOKENS", "1500"))
REQUEST_TIMEOUT = float(os.getenv("JOURNEY_REQUEST_TIMEOUT", "60"))
MAX_ATTEMPTS = 3
RETRY_BACKOFF_SECONDS = 1.0

# --- Input screening ---
MAX_INPUT_CHARS = int(os.getenv("JOURNEY_MAX_INPUT_CHARS", "5000"))

# --- Output format ---
TABLE_COLUMNS = ["Email #", "Subject Line", "Day Delay"]
MAX_EMAIL_LENGTH = 220
READABILITY_LEVEL = "Grade6"

# --- Knowledge store ---
# Unset = embedded tables from knowledge_data.py
KNOWLEDGE_DIR = os.getenv("JOURNEY_KNOWLEDGE_DIR") or None

# --- Logging ---
LOG_DIR = Path(os.getenv("LOG_DIR", str(Path.home() / ".journey-copilot" / "logs")))


def validate_config():
    """Raise ConfigurationError if anything required for a model call is missing."""
    errors = []

    if not ANTHROPIC_API_KEY:
        errors.append("ANTHROPIC_API_KEY is not set")

    if not MODEL_NAME:
        errors.append("JOURNEY_MODEL is empty")

    if KNOWLEDGE_DIR and not Path(KNOWLEDGE_DIR).is_dir():
        errors.append(f"JOURNEY_KNOWLEDGE_DIR does not exist: {KNOWLEDGE_DIR}")

    if errors:
        raise ConfigurationError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))

    return True
