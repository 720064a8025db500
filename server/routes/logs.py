"""Activity log endpoint for the monitoring view."""

from fastapi import APIRouter, Depends, Query

from orchestrator.core import ClaritoolOrchestrator
from server.dependencies import get_orchestrator, require_monitor_secret
from server.schemas.responses import ActivityStatsDTO

router = APIRouter(prefix="/api", tags=["Logs"])


@router.get("/logs", response_model=ActivityStatsDTO)
async def get_logs(
    since: str | None = Query(None, description="ISO timestamp; only newer entries are listed"),
    _: str = Depends(require_monitor_secret),
    orchestrator: ClaritoolOrchestrator = Depends(get_orchestrator),
):
    """Return activity totals and recent entries, newest first."""
    stats = await orchestrator.activity_stats(since=since)
    return ActivityStatsDTO(**stats)
