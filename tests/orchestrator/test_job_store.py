"""
Tests for the Job Store and job lifecycle transitions.
"""

from datetime import datetime, timezone

import pytest

from core.exceptions import StateTransitionError
from orchestrator.job_store import JobStore
from orchestrator.models import JobStatus, ScrapingJob


T0 = datetime(2024, 6, 1, tzinfo=timezone.utc)


def job(job_id, status=JobStatus.PENDING):
    j = ScrapingJob(id=job_id, start_time=T0)
    if status in (JobStatus.RUNNING, JobStatus.COMPLETED):
        j.transition_to(JobStatus.RUNNING, T0)
    if status.is_terminal:
        j.transition_to(status, T0)
    return j


# ============================================================
# STORE
# ============================================================

class TestJobStore:

    def test_add_and_get(self):
        store = JobStore(max_jobs=3)
        store.add(job("1"))
        assert store.get("1").id == "1"
        assert store.get("2") is None
        assert "1" in store

    def test_duplicate_id_rejected(self):
        store = JobStore()
        store.add(job("1"))
        with pytest.raises(ValueError):
            store.add(job("1"))

    def test_evicts_oldest_terminal_job(self):
        store = JobStore(max_jobs=3)
        store.add(job("1", JobStatus.RUNNING))
        store.add(job("2", JobStatus.COMPLETED))
        store.add(job("3", JobStatus.FAILED))

        store.add(job("4"))

        assert store.ids() == ["1", "3", "4"]
        assert store.get_stats()["evicted"] == 1

    def test_overflows_when_every_job_active(self):
        store = JobStore(max_jobs=2)
        store.add(job("1", JobStatus.RUNNING))
        store.add(job("2"))

        store.add(job("3"))

        assert len(store) == 3
        assert store.get_stats()["evicted"] == 0

    def test_stats_count_by_status(self):
        store = JobStore()
        store.add(job("1", JobStatus.COMPLETED))
        store.add(job("2", JobStatus.COMPLETED))
        store.add(job("3"))

        stats = store.get_stats()
        assert stats["completed"] == 2
        assert stats["pending"] == 1
        assert stats["size"] == 3

    def test_rejects_non_positive_bound(self):
        with pytest.raises(ValueError):
            JobStore(max_jobs=0)


# ============================================================
# TRANSITIONS
# ============================================================

class TestScrapingJob:

    def test_valid_path_sets_end_time(self):
        end = datetime(2024, 6, 1, 0, 5, tzinfo=timezone.utc)
        j = job("1")
        j.transition_to(JobStatus.RUNNING, T0)
        assert j.end_time is None

        j.transition_to(JobStatus.COMPLETED, end)

        assert j.end_time == end
        assert j.duration_seconds == 300.0

    def test_pending_may_fail_directly(self):
        j = job("1")
        j.transition_to(JobStatus.FAILED, T0)
        assert j.status == JobStatus.FAILED

    @pytest.mark.parametrize("start,target", [
        (JobStatus.PENDING, JobStatus.COMPLETED),
        (JobStatus.COMPLETED, JobStatus.RUNNING),
        (JobStatus.FAILED, JobStatus.COMPLETED),
        (JobStatus.RUNNING, JobStatus.PENDING),
    ])
    def test_invalid_transitions_raise(self, start, target):
        j = job("1", start)
        with pytest.raises(StateTransitionError):
            j.transition_to(target, T0)
        assert j.status == start

    def test_to_dict_without_results(self):
        data = job("1", JobStatus.COMPLETED).to_dict(include_results=False)
        assert data["status"] == "completed"
        assert "results" not in data
