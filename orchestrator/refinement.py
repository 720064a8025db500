"""
"Think more" refinement: ask the pool to rewrite its own answer a few times.

Each round feeds the previous answer back as an assistant turn followed by a
fixed self-critique instruction, then strips any meta-commentary the model
prepends ("here is the improved version:" and friends).
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from models.conversation import Conversation
from models.dispatch import DispatchExhausted
from orchestrator.fallback_manager import FallbackDispatcher
from orchestrator.routing_types import ModelDescriptor
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ROUNDS = 3
REFINE_TEMPERATURE = 0.5
DEFAULT_PERSONA = "Voce e um assistente educacional."
EMPTY_REFINEMENT_MESSAGE = "Empty response after cleaning"

REFINE_INSTRUCTION = """Reescreva completamente sua resposta anterior de forma melhorada:
- Corrija imprecisoes factuais
- Melhore clareza e didatica com analogias melhores
- Adicione exemplos concretos que faltaram
- Mantenha o tom amigavel e educativo
- Mantenha a mesma lingua
- Escreva diretamente a resposta final, SEM mencionar revisao, melhoria ou reescrita"""

_NOISE_PATTERNS = (
    re.compile(
        r"^(aqui est[aá]|segue|veja|confira)\s*(a\s*)?(vers[aã]o|resposta)\s*"
        r"(melhorada|revisada|final|aprimorada|corrigida)[:.!\s]*",
        re.IGNORECASE,
    ),
    re.compile(
        r"^(here\s+is|here's)\s*(the|my)?\s*(improved|revised|final|rewritten|updated|corrected)\s*"
        r"(version|answer|response)[:.!\s]*",
        re.IGNORECASE,
    ),
    re.compile(r"^(reescrevendo|revisando|melhorando|aprimorando|rewriting|revising)[:.!\s]*", re.IGNORECASE),
    re.compile(r"^(com base na revis[aã]o|ap[oó]s (a )?revis[aã]o|based on the revision)[,:.!\s]*", re.IGNORECASE),
    re.compile(r"^(vers[aã]o (final|melhorada|revisada)|(final|improved|revised) version)[:.!\s]*", re.IGNORECASE),
    re.compile(r"^---+\s*"),
)


def clean_refined_output(text: str) -> str:
    """
    Strip leading boilerplate that announces a rewrite.

    Best-effort: patterns are applied once each, in order, to the trimmed text.
    Text without such a prefix comes back unchanged apart from outer whitespace.
    """
    cleaned = (text or "").strip()
    for pattern in _NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned, count=1)
    return cleaned.strip()


def build_refinement_conversation(
    conversation: Conversation, current_answer: str, system_preamble: str | None
) -> Conversation:
    return [
        {"role": "system", "content": system_preamble or DEFAULT_PERSONA},
        *conversation,
        {"role": "assistant", "content": current_answer},
        {"role": "user", "content": REFINE_INSTRUCTION},
    ]


@dataclass(frozen=True)
class RefinementReport:
    text: str
    model: ModelDescriptor | None
    rounds_completed: int
    stopped_early: bool = False
    last_error: str | None = None


class RefinementLoop:
    def __init__(
        self,
        dispatcher: FallbackDispatcher,
        *,
        temperature: float = REFINE_TEMPERATURE,
        max_tokens: int | None = None,
    ):
        self._dispatcher = dispatcher
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def refine(
        self,
        base_answer: str,
        conversation: Conversation,
        system_preamble: str | None,
        pool: Sequence[ModelDescriptor],
        rounds: int = DEFAULT_ROUNDS,
    ) -> tuple[str, ModelDescriptor | None]:
        """
        Run up to `rounds` refinement rounds.

        Returns the final answer and the model that produced it; the model is
        None when no round succeeded (the base answer is returned as is).
        """
        report = await self.run(base_answer, conversation, system_preamble, pool, rounds)
        return report.text, report.model

    async def run(
        self,
        base_answer: str,
        conversation: Conversation,
        system_preamble: str | None,
        pool: Sequence[ModelDescriptor],
        rounds: int = DEFAULT_ROUNDS,
    ) -> RefinementReport:
        by_id = {m.id: m for m in pool}
        answer = base_answer
        model: ModelDescriptor | None = None
        completed = 0

        for round_index in range(max(0, rounds)):
            outcome = await self._dispatcher.dispatch(
                pool,
                build_refinement_conversation(conversation, answer, system_preamble),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
            if isinstance(outcome, DispatchExhausted):
                cleaned, error = "", outcome.last_error
            else:
                cleaned = clean_refined_output(outcome.text)
                # an answer made only of rewrite boilerplate counts as no answer
                error = None if cleaned else EMPTY_REFINEMENT_MESSAGE

            if error is not None:
                logger.warning(
                    "Refinement round failed; keeping last good answer",
                    extra={
                        "extra_fields": {
                            "round": round_index + 1,
                            "rounds_completed": completed,
                            "last_error": error,
                        }
                    },
                )
                return RefinementReport(
                    text=answer,
                    model=model,
                    rounds_completed=completed,
                    stopped_early=True,
                    last_error=error,
                )

            answer = cleaned
            model = by_id.get(outcome.model_id)
            completed += 1

        logger.info("Refinement finished", extra={"extra_fields": {"rounds_completed": completed}})
        return RefinementReport(text=answer, model=model, rounds_completed=completed)
