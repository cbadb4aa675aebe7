"""
Orchestrator - Job Store.

Bounded in-memory registry of scan jobs, oldest first.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from .models import ScrapingJob


logger = logging.getLogger(__name__)


class JobStore:
    """
    Keeps at most ``max_jobs`` jobs.

    When full, the oldest terminal job is evicted to make room. Jobs
    still pending or running are never evicted, so the store can run
    over its bound while every retained job is active.
    """

    DEFAULT_MAX_JOBS = 100

    def __init__(self, max_jobs: int = DEFAULT_MAX_JOBS) -> None:
        if max_jobs <= 0:
            raise ValueError("max_jobs must be positive")
        self._max_jobs = max_jobs
        self._jobs: "OrderedDict[str, ScrapingJob]" = OrderedDict()
        self._evicted = 0

    def add(self, job: ScrapingJob) -> None:
        if job.id in self._jobs:
            raise ValueError(f"Duplicate job id {job.id}")
        while len(self._jobs) >= self._max_jobs:
            if not self._evict_oldest_terminal():
                logger.warning(
                    f"[jobs] Store over capacity ({len(self._jobs) + 1}/{self._max_jobs}), "
                    f"all retained jobs active"
                )
                break
        self._jobs[job.id] = job

    def _evict_oldest_terminal(self) -> bool:
        for job_id, job in self._jobs.items():
            if job.status.is_terminal:
                del self._jobs[job_id]
                self._evicted += 1
                logger.debug(f"[jobs] Evicted job={job_id}")
                return True
        return False

    def get(self, job_id: str) -> Optional[ScrapingJob]:
        return self._jobs.get(job_id)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def ids(self) -> List[str]:
        return list(self._jobs)

    def get_stats(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for job in self._jobs.values():
            counts[job.status.value] = counts.get(job.status.value, 0) + 1
        return {
            "size": len(self._jobs),
            "max_jobs": self._max_jobs,
            "evicted": self._evicted,
            **counts,
        }
