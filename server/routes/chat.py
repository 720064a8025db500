"""Chat endpoints: /api/chat and the legacy root endpoint."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from orchestrator.core import ClaritoolOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import ChatRequest, LegacyChatRequest
from server.schemas.responses import ChatResponseDTO, LegacyChatResponseDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Chat"])


@router.post("/api/chat", response_model=ChatResponseDTO)
async def chat(
    request: ChatRequest,
    http_request: Request,
    orchestrator: ClaritoolOrchestrator = Depends(get_orchestrator),
):
    """Answer a conversation in quick or think (refined) mode."""
    try:
        result = await orchestrator.chat(
            request.conversation(),
            system=request.system,
            mode=request.mode,
            search_context=request.search_context,
            preferred_model=request.model,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info(
        "Chat answered",
        extra={
            "extra_fields": {
                "request_id": getattr(http_request.state, "request_id", "unknown"),
                "model": result.model_id,
                "mode": result.mode,
                "refinement_rounds": result.refinement_rounds,
                "attempts": [a.to_dict() for a in result.attempts],
            }
        },
    )
    return ChatResponseDTO.from_chat_result(result)


@router.post("/", response_model=LegacyChatResponseDTO)
async def legacy_chat(
    request: LegacyChatRequest,
    orchestrator: ClaritoolOrchestrator = Depends(get_orchestrator),
):
    """Single-pass answer without mode, search context or refinement."""
    try:
        result = await orchestrator.legacy_chat(
            request.conversation(),
            system=request.system,
            preferred_model=request.model,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return LegacyChatResponseDTO.from_chat_result(result)
