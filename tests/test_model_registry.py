import pytest

from config.config import DEFAULT_REGISTRY_PATH
from orchestrator.model_registry import ModelRegistry
from orchestrator.routing_types import ModelCapability

IMAGE_CONVERSATION = [
    {
        "role": "user",
        "content": [
            {"type": "text", "text": "O que tem nesta imagem?"},
            {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
        ],
    }
]


def test_shipped_registry_loads():
    registry = ModelRegistry.from_yaml(str(DEFAULT_REGISTRY_PATH))

    text_pool = registry.pool(ModelCapability.TEXT)
    vision_pool = registry.pool(ModelCapability.VISION)

    assert text_pool[0].id == "llama-3.3-70b-versatile"
    assert text_pool[0].display_name == "Llama 3.3 70B"
    assert vision_pool
    assert all(m.capability == ModelCapability.VISION for m in vision_pool)


def test_text_conversation_uses_text_pool(registry):
    pool = registry.select_pool([{"role": "user", "content": "Oi"}])
    assert [m.id for m in pool] == ["text-a", "text-b", "text-c"]


def test_image_conversation_uses_vision_pool(registry):
    pool = registry.select_pool(IMAGE_CONVERSATION)
    assert [m.id for m in pool] == ["vision-a", "vision-b"]


def test_preferred_model_moves_to_front(registry):
    pool = registry.select_pool([{"role": "user", "content": "Oi"}], preferred_model="text-c")
    assert [m.id for m in pool] == ["text-c", "text-a", "text-b"]


def test_preferred_model_from_other_pool_is_ignored(registry):
    pool = registry.select_pool(IMAGE_CONVERSATION, preferred_model="text-a")
    assert [m.id for m in pool] == ["vision-a", "vision-b"]


def test_unknown_preferred_model_is_ignored(registry):
    pool = registry.select_pool([{"role": "user", "content": "Oi"}], preferred_model="gpt-99")
    assert [m.id for m in pool] == ["text-a", "text-b", "text-c"]


def test_display_name_falls_back_to_id(registry):
    assert registry.display_name("text-b") == "Text B"
    assert registry.display_name("mystery-model") == "mystery-model"


def test_disabled_models_are_skipped():
    registry = ModelRegistry.from_dict(
        {
            "pools": {
                "text": [
                    {"id": "a", "name": "A", "enabled": False},
                    {"id": "b", "name": "B"},
                ]
            }
        }
    )
    assert [m.id for m in registry.pool(ModelCapability.TEXT)] == ["b"]
    assert registry.pool(ModelCapability.VISION) == []
    assert registry.find_model("a") is not None


@pytest.mark.parametrize(
    "data",
    [
        {"pools": {"text": []}},
        {"pools": {"audio": [{"id": "x"}]}},
        {"pools": {"text": [{"name": "no id"}]}},
        {"pools": {"text": [{"id": "dup"}], "vision": [{"id": "dup"}]}},
    ],
)
def test_invalid_registries_are_rejected(data):
    with pytest.raises(ValueError):
        ModelRegistry.from_dict(data)
