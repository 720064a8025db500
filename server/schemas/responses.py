"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from models.dispatch import ChatResult
from tools.web import SearchResult, format_search_context


class LegacyChatResponseDTO(BaseModel):
    result: str
    usedModel: str
    usedModelName: str

    @classmethod
    def from_chat_result(cls, cr: ChatResult):
        return cls(result=cr.text, usedModel=cr.model_id, usedModelName=cr.model_name)


class ChatResponseDTO(LegacyChatResponseDTO):
    mode: str

    @classmethod
    def from_chat_result(cls, cr: ChatResult):
        return cls(result=cr.text, usedModel=cr.model_id, usedModelName=cr.model_name, mode=cr.mode)


class InstantAnswerDTO(BaseModel):
    title: str
    text: str
    source: str | None = None
    url: str | None = None


class EncyclopediaSummaryDTO(BaseModel):
    title: str
    text: str
    url: str | None = None


class RelatedLinkDTO(BaseModel):
    text: str
    url: str | None = None


class SearchResponseDTO(BaseModel):
    instant: InstantAnswerDTO | None = None
    wiki: EncyclopediaSummaryDTO | None = None
    related: list[RelatedLinkDTO] = Field(default_factory=list)

    @classmethod
    def from_search_result(cls, sr: SearchResult):
        return cls.model_validate(sr.to_dict())


class SearchWithContextResponseDTO(SearchResponseDTO):
    context: str = ""

    @classmethod
    def from_search_result(cls, sr: SearchResult):
        return cls.model_validate({**sr.to_dict(), "context": format_search_context(sr)})


class ActivityStatsDTO(BaseModel):
    total: int
    today: int
    logs: list[dict[str, Any]] = Field(default_factory=list)


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
