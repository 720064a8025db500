import json
import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from models.conversation import Conversation
from models.dispatch import CompletionResult
from models.errors import (
    EmptyAnswerError,
    MalformedResponseError,
    NetworkError,
    OverloadError,
    ProviderError,
)
from utils.logger import get_logger

from .base_client import BaseCompletionClient

logger = get_logger(__name__)

GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"


class _ChoiceMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    content: str | None = None


class _Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: _ChoiceMessage | None = None
    finish_reason: str | None = None


class _CompletionBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    choices: list[_Choice]


class GroqClient(BaseCompletionClient):
    """
    Groq chat-completions client (OpenAI-compatible HTTP API).

    One POST per call, bearer-token auth. The response is parsed and validated
    before any field is read, and every failure mode is mapped to a typed
    CompletionError.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = GROQ_URL,
        timeout_s: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ValueError("Groq API key is required")
        self.api_key = api_key
        self.base_url = base_url
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def complete(
        self,
        model_id: str,
        messages: Conversation,
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> CompletionResult:
        start_time = time.perf_counter()
        payload = {
            "model": model_id,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            response = await self.client.post(self.base_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise NetworkError(f"Network error: {str(exc) or type(exc).__name__}", model_id=model_id) from exc

        if response.status_code == 429:
            raise OverloadError(f"Model {model_id} overloaded", model_id=model_id)

        if not response.is_success:
            raise ProviderError(
                self._status_error_message(response, model_id),
                model_id=model_id,
                status_code=response.status_code,
            )

        body = self._parse_body(response, model_id)
        choice = body.choices[0] if body.choices else None
        text = choice.message.content if choice and choice.message else None
        if not text or not text.strip():
            raise EmptyAnswerError("Empty response from model", model_id=model_id)

        latency_ms = self._measure_latency(start_time)
        logger.debug(
            "Groq completion successful",
            extra={"extra_fields": {"model": model_id, "latency_ms": latency_ms}},
        )
        return CompletionResult(
            text=text,
            model_id=model_id,
            finish_reason=choice.finish_reason,
            latency_ms=latency_ms,
        )

    def _status_error_message(self, response: httpx.Response, model_id: str) -> str:
        try:
            body: Any = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        return self._extract_error_message(body) or f"Error {response.status_code} from model {model_id}"

    @staticmethod
    def _parse_body(response: httpx.Response, model_id: str) -> _CompletionBody:
        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedResponseError("Invalid response from API", model_id=model_id) from exc
        try:
            return _CompletionBody.model_validate(data)
        except ValidationError as exc:
            raise MalformedResponseError("Invalid response from API", model_id=model_id) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
