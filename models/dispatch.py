from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

GENERIC_EXHAUSTION_MESSAGE = "All models are busy. Please try again shortly."


@dataclass(frozen=True)
class CompletionResult:
    """Validated success body of a single completion call."""

    text: str
    model_id: str
    finish_reason: str | None = None
    latency_ms: int = 0


@dataclass(frozen=True)
class AttemptRecord:
    model_id: str
    ok: bool
    error_code: str | None = None
    message: str | None = None
    latency_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model_id,
            "ok": self.ok,
            "error_code": self.error_code,
            "message": self.message,
            "latency_ms": self.latency_ms,
        }


@dataclass(frozen=True)
class DispatchSuccess:
    text: str
    model_id: str
    model_name: str
    attempts: tuple[AttemptRecord, ...] = ()

    @property
    def fallback_used(self) -> bool:
        return len(self.attempts) > 1


@dataclass(frozen=True)
class DispatchExhausted:
    last_error: str = GENERIC_EXHAUSTION_MESSAGE
    attempts: tuple[AttemptRecord, ...] = ()


DispatchOutcome = DispatchSuccess | DispatchExhausted


@dataclass(frozen=True)
class ChatResult:
    """Final answer of a chat request plus provenance."""

    text: str
    model_id: str
    model_name: str
    mode: str
    refinement_rounds: int = 0
    attempts: tuple[AttemptRecord, ...] = ()
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )

    def to_payload(self, *, include_mode: bool = True) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "result": self.text,
            "usedModel": self.model_id,
            "usedModelName": self.model_name,
        }
        if include_mode:
            payload["mode"] = self.mode
        return payload
