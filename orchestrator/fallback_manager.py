import time
from collections.abc import Sequence
from dataclasses import dataclass

from api.base_client import BaseCompletionClient
from models.conversation import Conversation
from models.dispatch import (
    GENERIC_EXHAUSTION_MESSAGE,
    AttemptRecord,
    DispatchExhausted,
    DispatchOutcome,
    DispatchSuccess,
)
from models.errors import CompletionError, ExhaustionError
from orchestrator.routing_types import ModelDescriptor
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FallbackPolicy:
    temperature: float = 0.7
    max_tokens: int = 4096


class FallbackDispatcher:
    """
    Strict linear fallback across an ordered model pool.

    Each candidate gets exactly one attempt per dispatch, in pool order; the
    first success wins and no later candidate is called. Candidates are never
    raced against each other.
    """

    def __init__(self, client: BaseCompletionClient, policy: FallbackPolicy | None = None):
        self._client = client
        self._policy = policy or FallbackPolicy()

    async def dispatch(
        self,
        pool: Sequence[ModelDescriptor],
        conversation: Conversation,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> DispatchOutcome:
        temperature = self._policy.temperature if temperature is None else temperature
        max_tokens = self._policy.max_tokens if max_tokens is None else max_tokens

        attempts: list[AttemptRecord] = []
        last_error: str | None = None

        for candidate in pool:
            start = time.perf_counter()
            try:
                result = await self._client.complete(
                    candidate.id,
                    conversation,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
            except CompletionError as exc:
                latency_ms = int((time.perf_counter() - start) * 1000)
                last_error = exc.message
                attempts.append(
                    AttemptRecord(
                        model_id=candidate.id,
                        ok=False,
                        error_code=exc.code,
                        message=exc.message,
                        latency_ms=latency_ms,
                    )
                )
                logger.warning(
                    "Model attempt failed, falling back",
                    extra={
                        "extra_fields": {
                            "model": candidate.id,
                            "error_code": exc.code,
                            "error_message": exc.message,
                            "attempt": len(attempts),
                            "pool_size": len(pool),
                        }
                    },
                )
                continue

            attempts.append(
                AttemptRecord(model_id=candidate.id, ok=True, latency_ms=result.latency_ms)
            )
            logger.info(
                "Dispatch succeeded",
                extra={
                    "extra_fields": {
                        "model": candidate.id,
                        "attempt": len(attempts),
                        "fallback_used": len(attempts) > 1,
                    }
                },
            )
            return DispatchSuccess(
                text=result.text,
                model_id=candidate.id,
                model_name=candidate.display_name,
                attempts=tuple(attempts),
            )

        logger.error(
            "All candidates exhausted",
            extra={
                "extra_fields": {
                    "pool": [c.id for c in pool],
                    "last_error": last_error,
                }
            },
        )
        return DispatchExhausted(
            last_error=last_error or GENERIC_EXHAUSTION_MESSAGE,
            attempts=tuple(attempts),
        )

    async def dispatch_or_raise(
        self,
        pool: Sequence[ModelDescriptor],
        conversation: Conversation,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> DispatchSuccess:
        """Like dispatch(), but raise ExhaustionError instead of returning DispatchExhausted."""
        outcome = await self.dispatch(
            pool, conversation, temperature=temperature, max_tokens=max_tokens
        )
        if isinstance(outcome, DispatchExhausted):
            raise ExhaustionError(outcome.last_error)
        return outcome
