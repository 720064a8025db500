import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_REGISTRY_PATH = PROJECT_ROOT / "config" / "model_registry.yaml"
DEFAULT_GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration from environment variables (and .env if present)."""
        env_path = PROJECT_ROOT / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Completion provider
        self.GROQ_API_KEY = (os.getenv("GROQ_API_KEY") or "").strip() or None
        self.GROQ_API_URL = os.getenv("GROQ_API_URL", DEFAULT_GROQ_URL)
        self.COMPLETION_TIMEOUT_S = _env_float("COMPLETION_TIMEOUT_S", 60.0)
        self.DEFAULT_MAX_TOKENS = _env_int("DEFAULT_MAX_TOKENS", 4096)
        self.MODEL_REGISTRY_PATH = os.getenv("MODEL_REGISTRY_PATH") or str(DEFAULT_REGISTRY_PATH)

        # Answer generation
        self.BASE_TEMPERATURE = _env_float("BASE_TEMPERATURE", 0.7)
        self.REFINE_TEMPERATURE = _env_float("REFINE_TEMPERATURE", 0.5)
        self.REFINE_ROUNDS = _env_int("REFINE_ROUNDS", 3)

        # Search
        self.SEARCH_TIMEOUT_S = _env_float("SEARCH_TIMEOUT_S", 10.0)
        self.SEARCH_USER_AGENT = os.getenv("SEARCH_USER_AGENT", "Claritool/1.0")
        self.WIKI_PRIMARY_LANG = os.getenv("WIKI_PRIMARY_LANG", "pt")
        self.WIKI_SECONDARY_LANG = os.getenv("WIKI_SECONDARY_LANG", "en")
        self.SEARCH_CACHE_TTL_SECONDS = _env_int("SEARCH_CACHE_TTL_SECONDS", 3600)

        # Admin + activity log
        self.MONITOR_SECRET = (os.getenv("MONITOR_SECRET") or "").strip() or None
        self.ACTIVITY_MAX_ENTRIES = _env_int("ACTIVITY_MAX_ENTRIES", 200)
        self.ACTIVITY_DB_PATH = (os.getenv("ACTIVITY_DB_PATH") or "").strip() or None

    def validate(self) -> list[str]:
        """
        Report configuration problems.

        Returns:
            Human-readable problems; an empty list means the config is usable.
        """
        problems = []
        if not self.GROQ_API_KEY:
            problems.append("GROQ_API_KEY is not set; chat endpoints will return 500")
        if not self.MONITOR_SECRET:
            problems.append("MONITOR_SECRET is not set; /api/logs will reject every request")
        if self.REFINE_ROUNDS < 0:
            problems.append("REFINE_ROUNDS must be >= 0")
        if self.ACTIVITY_MAX_ENTRIES <= 0:
            problems.append("ACTIVITY_MAX_ENTRIES must be positive")
        if not Path(self.MODEL_REGISTRY_PATH).exists():
            problems.append(f"Model registry not found at {self.MODEL_REGISTRY_PATH}")
        return problems


def get_config() -> Config:
    """Return the process-wide Config (built on first use)."""
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def reset_config() -> None:
    """Drop the cached Config so the next get_config() re-reads the environment."""
    if hasattr(get_config, "_instance"):
        delattr(get_config, "_instance")
