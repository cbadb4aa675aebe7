import logging

from fastapi import APIRouter, Depends, HTTPException, status

from dashboard.routers.dependencies import get_manager
from dashboard.schemas import (
    JobCreated,
    JobCreatedResponse,
    JobDetail,
    JobListResponse,
    JobStatusResponse,
)
from orchestrator.job_manager import JobManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Scan Jobs"])


@router.post("", response_model=JobCreatedResponse, status_code=status.HTTP_202_ACCEPTED)
async def start_job(manager: JobManager = Depends(get_manager)):
    """
    Start a scan in the background and return its id immediately.
    """
    job_id = await manager.start()
    job = manager.status(job_id)
    logger.info(f"[api] Scan requested job={job_id}")
    return JobCreatedResponse(
        success=True,
        data=JobCreated(job_id=job_id, status=job.status.value),
    )


@router.get("", response_model=JobListResponse)
async def list_jobs(manager: JobManager = Depends(get_manager)):
    """
    Every retained job, oldest first, without results.
    """
    jobs = manager.list_jobs()
    for job in jobs:
        job.results = None
    return JobListResponse(
        success=True,
        data=[JobDetail.from_job(job) for job in jobs],
    )


@router.get("/{job_id}", response_model=JobStatusResponse)
async def get_job(job_id: str, manager: JobManager = Depends(get_manager)):
    """
    Status, progress and (once completed) the ranked results of one job.
    """
    job = manager.status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return JobStatusResponse(success=True, data=JobDetail.from_job(job))
