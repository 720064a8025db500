import pytest

from config.config import reset_config
from orchestrator.model_registry import ModelRegistry

CONFIG_ENV_VARS = (
    "GROQ_API_KEY",
    "GROQ_API_URL",
    "MONITOR_SECRET",
    "MODEL_REGISTRY_PATH",
    "REFINE_ROUNDS",
    "ACTIVITY_DB_PATH",
    "ACTIVITY_MAX_ENTRIES",
    "SEARCH_CACHE_TTL_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate every test from the developer's environment and cached config."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "GROQ_API_KEY": "test-groq-key",
        "MONITOR_SECRET": "s3cret",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    reset_config()
    return env_vars


@pytest.fixture
def registry():
    return ModelRegistry.from_dict(
        {
            "pools": {
                "text": [
                    {"id": "text-a", "name": "Text A"},
                    {"id": "text-b", "name": "Text B"},
                    {"id": "text-c", "name": "Text C"},
                ],
                "vision": [
                    {"id": "vision-a", "name": "Vision A"},
                    {"id": "vision-b", "name": "Vision B"},
                ],
            }
        }
    )
