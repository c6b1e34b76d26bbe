"""Configuration management for the adaptive quiz engine."""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# --- Logging Setup ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("quizforge")

# Base paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))

# Database
DATABASE_PATH = Path(os.getenv("DATABASE_PATH", DATA_DIR / "quizforge.db"))
DATABASE_URL = os.getenv("DATABASE_URL", "")

# Static topic catalog shipped with the package
TOPIC_CATALOG_PATH = Path(
    os.getenv("TOPIC_CATALOG_PATH", Path(__file__).parent / "data" / "topics.yaml")
)

# Text-completion endpoint
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
COMPLETION_MODEL = os.getenv("COMPLETION_MODEL", "claude-sonnet-4-20250514")
COMPLETION_MAX_TOKENS = int(os.getenv("COMPLETION_MAX_TOKENS", "500"))
DEFAULT_USER_LEVEL = "intermediate"

# API retry settings
API_MAX_RETRIES = int(os.getenv("API_MAX_RETRIES", "3"))
API_RETRY_DELAY = float(os.getenv("API_RETRY_DELAY", "2"))  # seconds
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "30"))  # seconds per completion call

# Difficulty scale
MIN_DIFFICULTY = 1.0
MAX_DIFFICULTY = 10.0

# Content verification
MATH_VERIFY_MAX_DIFFICULTY = 7  # Above this, AI math answers are trusted
LINEAR_MAX_ATTEMPTS = 8         # Equation draws before dropping to the percent tier
MIN_STEM_LENGTH = 5             # Stem must be strictly longer than this

# Reward weights
KNOWLEDGE_WEIGHT = 0.6
EFFICIENCY_WEIGHT = 0.25
METACOGNITION_WEIGHT = 0.15
DEFAULT_CONFIDENCE = 0.5

# Mastery settings
MASTERY_THRESHOLD = 0.8         # masteryLevel required to unlock dependents
RECOMMENDATION_LIMIT = 5
MASTERY_WRITE_RETRIES = 10      # Attempts when another writer changed the same mastery row


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(require_api_key: bool = True) -> list[str]:
    """Validate configuration and return list of issues.

    Args:
        require_api_key: If True, treat missing API key as an error rather than a warning.

    Returns:
        List of warning strings for non-critical issues.

    Raises:
        ConfigurationError: If require_api_key is True and the key is missing.
    """
    issues = []

    if not ANTHROPIC_API_KEY:
        msg = "ANTHROPIC_API_KEY not set in environment"
        if require_api_key:
            raise ConfigurationError(
                f"{msg}. Copy .env.example to .env and add your API key."
            )
        issues.append(f"{msg}; every question will come from the fallback generator")

    if not TOPIC_CATALOG_PATH.exists():
        issues.append(f"Topic catalog does not exist: {TOPIC_CATALOG_PATH}")

    if API_TIMEOUT <= 0:
        issues.append(f"API_TIMEOUT must be positive, got {API_TIMEOUT}")

    return issues


def get_database_url() -> str:
    """Get SQLAlchemy database URL."""
    if DATABASE_URL:
        return DATABASE_URL
    return f"sqlite:///{DATABASE_PATH}"
