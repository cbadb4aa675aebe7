"""
Orchestrator - Models.

============================================================
RESPONSIBILITY
============================================================
Job lifecycle types for the scan orchestrator.

- JobStatus and its allowed transitions
- ScrapingJob record and snapshots

============================================================
STATE MACHINE
============================================================
PENDING → RUNNING → COMPLETED
                  → FAILED
PENDING → FAILED            (run could not start)

COMPLETED and FAILED are terminal.

============================================================
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from core.exceptions import StateTransitionError
from data_sources.models import TokenMetrics


class JobStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


VALID_TRANSITIONS: Dict[JobStatus, Set[JobStatus]] = {
    JobStatus.PENDING: {
        JobStatus.RUNNING,
        JobStatus.FAILED,
    },
    JobStatus.RUNNING: {
        JobStatus.COMPLETED,
        JobStatus.FAILED,
    },
    JobStatus.COMPLETED: set(),  # Terminal - no transitions
    JobStatus.FAILED: set(),  # Terminal - no transitions
}


@dataclass
class ScrapingJob:
    """
    One scan run.

    Mutated only by the JobManager; everything handed to callers is a
    snapshot().
    """
    id: str
    start_time: datetime
    status: JobStatus = JobStatus.PENDING
    error: Optional[str] = None
    total_tokens: int = 0
    processed_tokens: int = 0
    results: Optional[List[TokenMetrics]] = None
    end_time: Optional[datetime] = None

    def can_transition_to(self, target: JobStatus) -> bool:
        return target in VALID_TRANSITIONS.get(self.status, set())

    def transition_to(self, target: JobStatus, at: datetime) -> None:
        """
        Move to ``target``.

        Raises:
            StateTransitionError: target not reachable from the current status
        """
        if not self.can_transition_to(target):
            raise StateTransitionError(
                f"Job {self.id}: invalid transition {self.status.value} -> {target.value}",
                from_state=self.status.value,
                to_state=target.value,
                context={"job_id": self.id},
            )
        self.status = target
        if target.is_terminal:
            self.end_time = at

    def snapshot(self) -> "ScrapingJob":
        """Copy safe to hand out; the results list is copied too."""
        return replace(
            self,
            results=list(self.results) if self.results is not None else None,
        )

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def to_dict(self, include_results: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "status": self.status.value,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "error": self.error,
            "total_tokens": self.total_tokens,
            "processed_tokens": self.processed_tokens,
        }
        if include_results:
            data["results"] = (
                [m.to_dict() for m in self.results] if self.results is not None else None
            )
        return data
