import pytest

from models.errors import OverloadError
from orchestrator.fallback_manager import FallbackDispatcher
from orchestrator.refinement import (
    DEFAULT_PERSONA,
    EMPTY_REFINEMENT_MESSAGE,
    REFINE_INSTRUCTION,
    RefinementLoop,
    build_refinement_conversation,
    clean_refined_output,
)
from orchestrator.routing_types import ModelCapability
from tests.fakes import FakeCompletionClient

CONVERSATION = [{"role": "user", "content": "O que e um buraco negro?"}]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Aqui está a versão melhorada: O céu é azul.", "O céu é azul."),
        ("Aqui está a versão melhorada: Um buraco negro é...", "Um buraco negro é..."),
        ("Here is the improved version:\n\nA black hole is...", "A black hole is..."),
        ("Versão final: Resposta.", "Resposta."),
        ("--- \nResposta direta.", "Resposta direta."),
        ("  Um buraco negro é uma regiao do espaco.  ", "Um buraco negro é uma regiao do espaco."),
    ],
)
def test_clean_refined_output(raw, expected):
    assert clean_refined_output(raw) == expected


def test_clean_refined_output_leaves_plain_text_alone():
    text = "Segue uma explicacao: a luz nao escapa."
    assert clean_refined_output(text) == text


def test_refinement_conversation_layout():
    conv = build_refinement_conversation(CONVERSATION, "resposta 1", None)

    assert conv[0] == {"role": "system", "content": DEFAULT_PERSONA}
    assert conv[1] == CONVERSATION[0]
    assert conv[-2] == {"role": "assistant", "content": "resposta 1"}
    assert conv[-1] == {"role": "user", "content": REFINE_INSTRUCTION}


@pytest.mark.asyncio
async def test_three_rounds_feed_previous_answer(registry):
    client = FakeCompletionClient({"text-a": ["Versão melhorada: r1", "r2", "r3"]})
    loop = RefinementLoop(FallbackDispatcher(client), temperature=0.5)

    report = await loop.run("base", CONVERSATION, "Sistema", registry.pool(ModelCapability.TEXT), rounds=3)

    assert report.text == "r3"
    assert report.rounds_completed == 3
    assert not report.stopped_early
    assert report.model.id == "text-a"
    # each round sees the cleaned output of the previous one
    assert [c["messages"][-2]["content"] for c in client.calls] == ["base", "r1", "r2"]
    assert all(c["temperature"] == 0.5 for c in client.calls)
    assert client.calls[0]["messages"][0] == {"role": "system", "content": "Sistema"}


@pytest.mark.asyncio
async def test_failed_round_keeps_last_good_answer(registry):
    overloaded = [OverloadError("Model overloaded")]
    client = FakeCompletionClient(
        {
            "text-a": ["r1", OverloadError("Model text-a overloaded")],
            "text-b": overloaded,
            "text-c": overloaded,
        }
    )
    loop = RefinementLoop(FallbackDispatcher(client))

    report = await loop.run("base", CONVERSATION, None, registry.pool(ModelCapability.TEXT), rounds=3)

    assert report.text == "r1"
    assert report.rounds_completed == 1
    assert report.stopped_early
    assert report.model.id == "text-a"
    assert report.last_error == "Model overloaded"


@pytest.mark.asyncio
async def test_first_round_failure_returns_base_answer(registry):
    overloaded = [OverloadError("busy")]
    client = FakeCompletionClient({"text-a": overloaded, "text-b": overloaded, "text-c": overloaded})
    loop = RefinementLoop(FallbackDispatcher(client))

    text, model = await loop.refine("base", CONVERSATION, None, registry.pool(ModelCapability.TEXT))

    assert text == "base"
    assert model is None


@pytest.mark.asyncio
async def test_zero_rounds_makes_no_calls(registry):
    client = FakeCompletionClient()
    loop = RefinementLoop(FallbackDispatcher(client))

    report = await loop.run("base", CONVERSATION, None, registry.pool(ModelCapability.TEXT), rounds=0)

    assert report.text == "base"
    assert client.calls == []


@pytest.mark.asyncio
async def test_boilerplate_only_round_keeps_previous_answer(registry):
    client = FakeCompletionClient({"text-a": ["Aqui está a versão melhorada:"]})
    loop = RefinementLoop(FallbackDispatcher(client))

    report = await loop.run("good base", CONVERSATION, None, registry.pool(ModelCapability.TEXT), rounds=1)

    assert report.text == "good base"
    assert report.model is None
    assert report.rounds_completed == 0
    assert report.stopped_early
    assert report.last_error == EMPTY_REFINEMENT_MESSAGE


@pytest.mark.asyncio
async def test_boilerplate_only_later_round_keeps_last_good_answer(registry):
    client = FakeCompletionClient({"text-a": ["r1", "Versão final:", "r3"]})
    loop = RefinementLoop(FallbackDispatcher(client))

    report = await loop.run("base", CONVERSATION, None, registry.pool(ModelCapability.TEXT), rounds=3)

    assert report.text == "r1"
    assert report.model.id == "text-a"
    assert report.rounds_completed == 1
    assert len(client.calls) == 2
