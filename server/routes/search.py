"""Search endpoints: /api/search (with prompt context) and legacy /search."""

from fastapi import APIRouter, Depends, HTTPException, status

from orchestrator.core import ClaritoolOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import SearchRequest
from server.schemas.responses import SearchResponseDTO, SearchWithContextResponseDTO

router = APIRouter(tags=["Search"])


async def _run_search(orchestrator: ClaritoolOrchestrator, query: str):
    try:
        return await orchestrator.search(query)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/api/search", response_model=SearchWithContextResponseDTO)
async def search(
    request: SearchRequest,
    orchestrator: ClaritoolOrchestrator = Depends(get_orchestrator),
):
    result = await _run_search(orchestrator, request.query)
    return SearchWithContextResponseDTO.from_search_result(result)


@router.post("/search", response_model=SearchResponseDTO)
async def legacy_search(
    request: SearchRequest,
    orchestrator: ClaritoolOrchestrator = Depends(get_orchestrator),
):
    result = await _run_search(orchestrator, request.query)
    return SearchResponseDTO.from_search_result(result)
