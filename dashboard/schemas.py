"""
Pydantic schemas for Dashboard API responses.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from orchestrator.models import ScrapingJob


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =======================
# COMMON
# =======================

class BaseResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)

# =======================
# 1. HEALTH
# =======================

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime = Field(default_factory=_utcnow)
    version: str = "1.0.0"
    uptime_seconds: float = 0
    active_runs: int = 0

# =======================
# 2. JOBS
# =======================

class JobCreated(BaseModel):
    job_id: str
    status: str

class JobCreatedResponse(BaseResponse):
    data: JobCreated

class TokenResult(BaseModel):
    id: str
    symbol: str
    name: str
    price: float
    market_cap: float
    volume_24h: float
    price_change_24h: float
    price_change_1h: float
    holders: int
    top_holders_percentage: Optional[float] = None
    explosion_score: Optional[float] = None
    surge_score: Optional[float] = None
    risk_level: Optional[str] = None
    social_metrics: Dict[str, Dict[str, Any]]
    technical_indicators: Dict[str, float]
    accumulation_patterns: int

class JobDetail(BaseModel):
    id: str
    status: str  # pending, running, completed, failed
    start_time: datetime
    end_time: Optional[datetime] = None
    error: Optional[str] = None
    total_tokens: int
    processed_tokens: int
    results: Optional[List[TokenResult]] = None

    @classmethod
    def from_job(cls, job: ScrapingJob) -> "JobDetail":
        results = None
        if job.results is not None:
            results = []
            for metrics in job.results:
                data = metrics.to_dict()
                data["accumulation_patterns"] = sum(
                    1 for p in metrics.volume_patterns if p.is_accumulation
                )
                del data["volume_patterns"]
                results.append(TokenResult(**data))

        return cls(
            id=job.id,
            status=job.status.value,
            start_time=job.start_time,
            end_time=job.end_time,
            error=job.error,
            total_tokens=job.total_tokens,
            processed_tokens=job.processed_tokens,
            results=results,
        )

class JobStatusResponse(BaseResponse):
    data: JobDetail

class JobListResponse(BaseResponse):
    data: List[JobDetail]

# =======================
# 3. MARKET
# =======================

class MarketOverviewData(BaseModel):
    active_tokens: int
    total_market_cap: float
    total_volume: float
    market_cap_change_24h: float

class MarketOverviewResponse(BaseResponse):
    data: MarketOverviewData
