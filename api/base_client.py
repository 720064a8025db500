import time
from abc import ABC, abstractmethod
from typing import Any

from models.conversation import Conversation
from models.dispatch import CompletionResult


class BaseCompletionClient(ABC):
    """
    Abstract base class for chat-completion clients.

    A client performs exactly one request per call and either returns a
    CompletionResult or raises a CompletionError subclass describing why the
    attempt failed (NetworkError, OverloadError, ProviderError,
    MalformedResponseError, EmptyAnswerError). It never retries.
    """

    @abstractmethod
    async def complete(
        self,
        model_id: str,
        messages: Conversation,
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> CompletionResult:
        """
        Issue one chat-completion request to one model.

        Args:
            model_id: Provider model identifier
            messages: Conversation in OpenAI message format
            temperature: Sampling temperature
            max_tokens: Maximum output tokens

        Returns:
            CompletionResult with the extracted answer text

        Raises:
            CompletionError: classified failure of this single attempt
        """

    async def aclose(self) -> None:
        """Release transport resources. Default: nothing to release."""

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.perf_counter() - start_time) * 1000)

    @staticmethod
    def _extract_error_message(body: Any) -> str | None:
        """
        Pull a human-readable message out of an OpenAI-style error body.

        Accepts {"error": {"message": ...}}, {"error": "..."} and {"message": ...}.
        """
        if not isinstance(body, dict):
            return None
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        if isinstance(error, str) and error.strip():
            return error.strip()
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
        return None
