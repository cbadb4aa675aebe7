import logging

from fastapi import APIRouter, Depends, HTTPException

from dashboard.routers.dependencies import get_manager
from dashboard.schemas import MarketOverviewData, MarketOverviewResponse
from data_sources.exceptions import DataSourceError
from orchestrator.job_manager import JobManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/market", tags=["Market"])


@router.get("/global", response_model=MarketOverviewResponse)
async def market_global(manager: JobManager = Depends(get_manager)):
    """
    Whole-market totals: listed tokens, market cap, volume and 24h cap change.
    """
    try:
        overview = await manager.market_overview()
    except DataSourceError as e:
        logger.warning(f"[api] Market overview unavailable: {e.message}")
        raise HTTPException(status_code=502, detail=f"Market data unavailable: {e.message}")
    return MarketOverviewResponse(
        success=True,
        data=MarketOverviewData(**overview.to_dict()),
    )
