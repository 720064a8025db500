from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from models.conversation import Conversation, has_image_content
from orchestrator.routing_types import ModelCapability, ModelDescriptor
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ModelRegistry:
    _pools: dict[ModelCapability, list[ModelDescriptor]]

    @classmethod
    def from_yaml(cls, path: str | None = None) -> "ModelRegistry":
        registry_path = Path(path) if path else Path(__file__).resolve().parent.parent / "config" / "model_registry.yaml"
        if not registry_path.exists():
            raise ValueError(f"Model registry not found at {registry_path}")

        data = yaml.safe_load(registry_path.read_text(encoding="utf-8"))
        if not data or "pools" not in data:
            raise ValueError("Invalid model registry: missing pools")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "ModelRegistry":
        pools: dict[ModelCapability, list[ModelDescriptor]] = {cap: [] for cap in ModelCapability}
        seen: dict[str, ModelCapability] = {}

        for pool_name, models in (data.get("pools") or {}).items():
            try:
                capability = ModelCapability(pool_name)
            except ValueError:
                raise ValueError(f"Unknown pool {pool_name!r} in model registry") from None
            if not isinstance(models, list):
                raise ValueError(f"Invalid models list for pool {pool_name}")

            for model in models:
                if not isinstance(model, dict) or not model.get("id"):
                    raise ValueError(f"Missing model id in pool {pool_name}")
                model_id = str(model["id"]).strip()
                if model_id in seen:
                    raise ValueError(
                        f"Model {model_id} listed in both {seen[model_id].value} and {capability.value} pools"
                    )
                seen[model_id] = capability
                pools[capability].append(
                    ModelDescriptor(
                        id=model_id,
                        display_name=str(model.get("name") or model_id),
                        capability=capability,
                        enabled=bool(model.get("enabled", True)),
                    )
                )

        if not pools[ModelCapability.TEXT]:
            raise ValueError("Invalid model registry: text pool is empty")
        return cls(_pools=pools)

    def pool(self, capability: ModelCapability) -> list[ModelDescriptor]:
        """Enabled models for a capability, in fallback order."""
        return [m for m in self._pools.get(capability, []) if m.enabled]

    def find_model(self, model_id: str) -> ModelDescriptor | None:
        model_norm = (model_id or "").strip()
        if not model_norm:
            return None
        for models in self._pools.values():
            for candidate in models:
                if candidate.id == model_norm:
                    return candidate
        return None

    def display_name(self, model_id: str) -> str:
        candidate = self.find_model(model_id)
        return candidate.display_name if candidate else model_id

    def list_enabled_models(self) -> list[ModelDescriptor]:
        out: list[ModelDescriptor] = []
        for capability in ModelCapability:
            out.extend(self.pool(capability))
        return out

    def select_pool(
        self, conversation: Conversation, preferred_model: str | None = None
    ) -> list[ModelDescriptor]:
        """
        Pick the capability pool for a conversation.

        Image-bearing conversations go to the vision pool, everything else to
        the text pool. A preferred model from the chosen pool is moved to the
        front; fallback to the rest of the pool still applies.
        """
        capability = ModelCapability.VISION if has_image_content(conversation) else ModelCapability.TEXT
        candidates = self.pool(capability)

        preferred = (preferred_model or "").strip()
        if not preferred:
            return candidates

        match = next((m for m in candidates if m.id == preferred), None)
        if match is None:
            logger.warning(
                "Preferred model not in selected pool; ignoring",
                extra={"extra_fields": {"preferred_model": preferred, "pool": capability.value}},
            )
            return candidates

        return [match, *[m for m in candidates if m.id != preferred]]
