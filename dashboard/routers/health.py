from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from dashboard.routers.dependencies import get_manager
from dashboard.schemas import HealthResponse
from orchestrator.job_manager import JobManager

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request, manager: JobManager = Depends(get_manager)):
    """
    Liveness check with uptime and the number of scans in flight.
    """
    started_at = request.app.state.started_at
    uptime = (datetime.now(timezone.utc) - started_at).total_seconds()
    return HealthResponse(
        status="healthy",
        uptime_seconds=uptime,
        active_runs=manager.get_stats()["active_runs"],
    )
