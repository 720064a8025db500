"""Pydantic request models for FastAPI endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ContentPart(BaseModel):
    """One part of multi-part message content (text or image reference)."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1)
    text: str | None = None
    image_url: dict[str, Any] | str | None = None


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str | list[ContentPart]

    def to_provider_dict(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {
            "role": self.role,
            "content": [part.model_dump(exclude_none=True) for part in self.content],
        }


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(..., min_length=1)
    system: str | None = None
    mode: Literal["quick", "think"] = "quick"
    search_context: str | None = Field(None, alias="searchContext")
    model: str | None = None

    def conversation(self) -> list[dict[str, Any]]:
        return [m.to_provider_dict() for m in self.messages]


class LegacyChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(..., min_length=1)
    system: str | None = None
    model: str | None = None

    def conversation(self) -> list[dict[str, Any]]:
        return [m.to_provider_dict() for m in self.messages]


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
