"""
ClaritoolOrchestrator - business layer shared by the HTTP server and the CLI.

Key guarantees:
- Front-ends stay thin (no provider or search imports there)
- Activity logging is fire-and-forget and can never fail or delay a response
- A failed refinement round never fails the request
"""

import asyncio
from typing import Any

import httpx

from api.base_client import BaseCompletionClient
from api.groq_client import GroqClient
from config.config import Config, get_config
from db import ActivityEntry, ActivityRecorder, create_store
from models.conversation import Conversation, last_user_preview, with_system_message
from models.dispatch import ChatResult
from models.errors import ConfigurationError
from orchestrator.fallback_manager import FallbackDispatcher, FallbackPolicy
from orchestrator.model_registry import ModelRegistry
from orchestrator.refinement import RefinementLoop
from orchestrator.routing_types import ChatMode
from tools.web import SearchAggregator, SearchResult, build_system_preamble, create_search_service
from utils.logger import get_logger

logger = get_logger(__name__)


class ClaritoolOrchestrator:
    def __init__(
        self,
        *,
        registry: ModelRegistry,
        client: BaseCompletionClient | None,
        search_service: SearchAggregator,
        recorder: ActivityRecorder,
        config: Config,
    ):
        self._registry = registry
        self._client = client
        self._search_service = search_service
        self._recorder = recorder
        self._config = config
        self._background_tasks: set[asyncio.Task] = set()

        self._dispatcher: FallbackDispatcher | None = None
        self._refinement: RefinementLoop | None = None
        if client is not None:
            self._dispatcher = FallbackDispatcher(
                client,
                FallbackPolicy(
                    temperature=config.BASE_TEMPERATURE,
                    max_tokens=config.DEFAULT_MAX_TOKENS,
                ),
            )
            self._refinement = RefinementLoop(
                self._dispatcher,
                temperature=config.REFINE_TEMPERATURE,
                max_tokens=config.DEFAULT_MAX_TOKENS,
            )

    @classmethod
    def from_config(cls, config: Config | None = None) -> "ClaritoolOrchestrator":
        """Wire the production collaborators from configuration."""
        config = config or get_config()
        for problem in config.validate():
            logger.warning(f"Configuration problem: {problem}")

        client = None
        if config.GROQ_API_KEY:
            client = GroqClient(
                config.GROQ_API_KEY,
                base_url=config.GROQ_API_URL,
                timeout_s=config.COMPLETION_TIMEOUT_S,
            )

        return cls(
            registry=ModelRegistry.from_yaml(config.MODEL_REGISTRY_PATH),
            client=client,
            search_service=create_search_service(
                config,
                httpx.AsyncClient(timeout=config.SEARCH_TIMEOUT_S, follow_redirects=True),
            ),
            recorder=ActivityRecorder(create_store(config), max_entries=config.ACTIVITY_MAX_ENTRIES),
            config=config,
        )

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    @property
    def recorder(self) -> ActivityRecorder:
        return self._recorder

    # ---------- helpers ----------

    def _require_dispatcher(self) -> FallbackDispatcher:
        if self._dispatcher is None:
            raise ConfigurationError("API key not configured")
        return self._dispatcher

    def _schedule_activity(self, entry: ActivityEntry) -> None:
        """Record an activity entry in the background; the caller never waits on it."""
        try:
            task = asyncio.get_running_loop().create_task(self._recorder.record(entry))
        except RuntimeError:
            logger.warning("No running event loop; activity entry dropped")
            return
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def drain_background_tasks(self) -> None:
        """Wait for pending activity writes (shutdown and tests)."""
        if self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    # ---------- operations ----------

    async def chat(
        self,
        messages: Conversation,
        *,
        system: str | None = None,
        mode: str = ChatMode.QUICK.value,
        search_context: str | None = None,
        preferred_model: str | None = None,
        endpoint: str = "/api/chat",
    ) -> ChatResult:
        """
        Answer a conversation.

        Raises:
            ValueError: empty conversation
            ConfigurationError: no completion credentials configured
            ExhaustionError: every model in the pool failed for the base answer
        """
        if not messages:
            raise ValueError("messages is required")
        dispatcher = self._require_dispatcher()

        preamble = build_system_preamble(system, search_context)
        conversation = with_system_message(messages, preamble)
        pool = self._registry.select_pool(messages, preferred_model)

        logger.info(
            "Chat request",
            extra={
                "extra_fields": {
                    "endpoint": endpoint,
                    "mode": mode,
                    "pool": [m.id for m in pool],
                    "message_count": len(messages),
                    "search_context": bool(search_context),
                }
            },
        )

        base = await dispatcher.dispatch_or_raise(pool, conversation)
        text, model_id, model_name = base.text, base.model_id, base.model_name
        attempts = base.attempts
        rounds_completed = 0

        if mode == ChatMode.THINK.value and self._refinement is not None:
            report = await self._refinement.run(
                text, messages, preamble, pool, rounds=self._config.REFINE_ROUNDS
            )
            text = report.text
            rounds_completed = report.rounds_completed
            if report.model is not None:
                model_id, model_name = report.model.id, report.model.display_name

        self._schedule_activity(
            ActivityEntry.create(
                endpoint=endpoint,
                mode=mode,
                model=model_name,
                query=last_user_preview(messages),
            )
        )

        return ChatResult(
            text=text,
            model_id=model_id,
            model_name=model_name,
            mode=mode,
            refinement_rounds=rounds_completed,
            attempts=attempts,
        )

    async def legacy_chat(
        self,
        messages: Conversation,
        *,
        system: str | None = None,
        preferred_model: str | None = None,
    ) -> ChatResult:
        """Single-pass answer for the legacy root endpoint."""
        return await self.chat(
            messages,
            system=system,
            mode=ChatMode.LEGACY.value,
            preferred_model=preferred_model,
            endpoint="/",
        )

    async def search(self, query: str) -> SearchResult:
        return await self._search_service.search(query)

    async def activity_stats(self, since: str | None = None) -> dict[str, Any]:
        return await self._recorder.stats(since=since)

    async def aclose(self) -> None:
        await self.drain_background_tasks()
        if self._client is not None:
            await self._client.aclose()
        http_client = getattr(self._search_service.instant_client, "client", None)
        if isinstance(http_client, httpx.AsyncClient):
            await http_client.aclose()
