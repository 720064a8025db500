import pytest

from config.config import Config
from db import ActivityRecorder, InMemoryKeyValueStore
from models.errors import ConfigurationError, ExhaustionError, OverloadError
from orchestrator.core import ClaritoolOrchestrator
from tools.web import SearchAggregator
from tools.web.research_pack import SEARCH_CONTEXT_HEADER
from tests.fakes import FakeCompletionClient, FakeEncyclopediaClient, FakeInstantClient

MESSAGES = [{"role": "user", "content": "Explique a gravidade"}]


def make_orchestrator(registry, client, *, refine_rounds: int = 3) -> ClaritoolOrchestrator:
    config = Config()
    config.REFINE_ROUNDS = refine_rounds
    return ClaritoolOrchestrator(
        registry=registry,
        client=client,
        search_service=SearchAggregator(
            instant_client=FakeInstantClient(), encyclopedia_client=FakeEncyclopediaClient()
        ),
        recorder=ActivityRecorder(InMemoryKeyValueStore()),
        config=config,
    )


@pytest.mark.asyncio
async def test_quick_chat_returns_provenance_and_logs_activity(registry):
    client = FakeCompletionClient({"text-a": ["A gravidade atrai massas."]})
    orchestrator = make_orchestrator(registry, client)

    result = await orchestrator.chat(MESSAGES, system="Seja didatico.")
    await orchestrator.drain_background_tasks()

    assert result.to_payload() == {
        "result": "A gravidade atrai massas.",
        "usedModel": "text-a",
        "usedModelName": "Text A",
        "mode": "quick",
    }
    assert client.calls[0]["messages"][0] == {"role": "system", "content": "Seja didatico."}
    assert client.calls[0]["temperature"] == 0.7

    logs = await orchestrator.recorder.entries()
    assert len(logs) == 1
    assert logs[0]["endpoint"] == "/api/chat"
    assert logs[0]["model"] == "Text A"
    assert logs[0]["query"] == "Explique a gravidade"


@pytest.mark.asyncio
async def test_search_context_is_injected_into_system_message(registry):
    client = FakeCompletionClient({"text-a": ["ok"]})
    orchestrator = make_orchestrator(registry, client)

    await orchestrator.chat(MESSAGES, system="Sys", search_context="Wikipedia (G): forca.")

    system = client.calls[0]["messages"][0]
    assert system["role"] == "system"
    assert system["content"] == f"Sys\n\n{SEARCH_CONTEXT_HEADER}\nWikipedia (G): forca."


@pytest.mark.asyncio
async def test_no_system_message_without_system_or_context(registry):
    client = FakeCompletionClient({"text-a": ["ok"]})
    orchestrator = make_orchestrator(registry, client)

    await orchestrator.chat(MESSAGES)

    assert client.calls[0]["messages"] == MESSAGES


@pytest.mark.asyncio
async def test_think_mode_runs_refinement_rounds(registry):
    client = FakeCompletionClient(
        {
            "text-a": [OverloadError("busy"), "r1", "r2", "r3"],
            "text-b": ["base from b"],
        }
    )
    orchestrator = make_orchestrator(registry, client, refine_rounds=3)

    result = await orchestrator.chat(MESSAGES, mode="think")

    assert result.text == "r3"
    assert result.mode == "think"
    assert result.refinement_rounds == 3
    assert result.model_id == "text-a"
    assert client.called_models == ["text-a", "text-b", "text-a", "text-a", "text-a"]
    assert all(c["temperature"] == 0.5 for c in client.calls[2:])


@pytest.mark.asyncio
async def test_think_mode_refinement_failure_keeps_base_answer(registry):
    busy = [OverloadError("busy")]
    client = FakeCompletionClient({"text-a": ["base", OverloadError("busy")], "text-b": busy, "text-c": busy})
    orchestrator = make_orchestrator(registry, client)

    result = await orchestrator.chat(MESSAGES, mode="think")

    assert result.text == "base"
    assert result.model_id == "text-a"
    assert result.refinement_rounds == 0


@pytest.mark.asyncio
async def test_exhaustion_raises_with_last_error(registry):
    busy = [OverloadError("Model overloaded")]
    client = FakeCompletionClient({"text-a": busy, "text-b": busy, "text-c": busy})
    orchestrator = make_orchestrator(registry, client)

    with pytest.raises(ExhaustionError, match="Model overloaded"):
        await orchestrator.chat(MESSAGES)
    await orchestrator.drain_background_tasks()

    assert await orchestrator.recorder.entries() == []


@pytest.mark.asyncio
async def test_missing_client_is_configuration_error(registry):
    orchestrator = make_orchestrator(registry, None)

    with pytest.raises(ConfigurationError, match="API key not configured"):
        await orchestrator.chat(MESSAGES)


@pytest.mark.asyncio
async def test_empty_conversation_is_rejected(registry):
    orchestrator = make_orchestrator(registry, FakeCompletionClient())

    with pytest.raises(ValueError, match="messages is required"):
        await orchestrator.chat([])


@pytest.mark.asyncio
async def test_legacy_chat_logs_legacy_mode(registry):
    client = FakeCompletionClient({"text-a": ["ok"]})
    orchestrator = make_orchestrator(registry, client)

    result = await orchestrator.legacy_chat(MESSAGES)
    await orchestrator.drain_background_tasks()

    assert "mode" not in result.to_payload(include_mode=False)
    logs = await orchestrator.recorder.entries()
    assert logs[0]["mode"] == "legacy"
    assert logs[0]["endpoint"] == "/"


@pytest.mark.asyncio
async def test_aclose_closes_completion_client(registry):
    client = FakeCompletionClient()
    orchestrator = make_orchestrator(registry, client)

    await orchestrator.aclose()

    assert client.closed


@pytest.mark.asyncio
async def test_image_conversation_stays_on_vision_pool_through_refinement(registry):
    client = FakeCompletionClient(
        {
            "vision-a": [OverloadError("busy"), "r1", "r2", "r3"],
            "vision-b": ["base from vision-b"],
        }
    )
    orchestrator = make_orchestrator(registry, client, refine_rounds=3)
    image_messages = [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "Explique este grafico"},
                {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
            ],
        }
    ]

    result = await orchestrator.chat(image_messages, mode="think", preferred_model="text-a")
    await orchestrator.drain_background_tasks()

    assert result.text == "r3"
    assert result.model_id == "vision-a"
    assert client.called_models == ["vision-a", "vision-b", "vision-a", "vision-a", "vision-a"]
    assert all(model.startswith("vision-") for model in client.called_models)
