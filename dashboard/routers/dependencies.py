from fastapi import Request

from orchestrator.job_manager import JobManager


def get_manager(request: Request) -> JobManager:
    """The JobManager owned by the running app."""
    return request.app.state.manager
