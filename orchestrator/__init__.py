"""
Orchestrator Package - Scan Coordination Layer.

============================================================
PACKAGE OVERVIEW
============================================================
Runs scan jobs: discovery, per-token enrichment and scoring,
ranking, and job lifecycle tracking.

============================================================
ARCHITECTURE
============================================================

    +-----------------------------------------------------+
    |                     JobManager                      |
    |-----------------------------------------------------|
    |  TokenDiscovery          |  candidate token ids     |
    |  BaseMarketDataSource    |  metrics + history       |
    |  SocialMetricsAggregator |  per-platform social     |
    |  VolumePatternAnalyzer   |  patterns + indicators   |
    |  ExplosionScorer         |  ranking score           |
    |  SurgeScorer             |  short-horizon score     |
    |  JobStore                |  bounded job registry    |
    +-----------------------------------------------------+

============================================================
JOB LIFECYCLE
============================================================
pending → running → completed | failed

============================================================
QUICK START
============================================================
Command line usage::

    moonshot-scanner --source synthetic --top 10

Programmatic usage::

    import asyncio
    from orchestrator import ScannerConfig, build_job_manager

    async def main():
        manager = build_job_manager(ScannerConfig.load("scanner.yaml"))
        try:
            job_id = await manager.start()
            job = await manager.wait(job_id)
            for metrics in job.results or []:
                print(metrics.symbol, metrics.explosion_score)
        finally:
            await manager.close()

    asyncio.run(main())

============================================================
EXPORTS
============================================================
"""

# ============================================================
# Models
# ============================================================
from orchestrator.models import (
    JobStatus,
    ScrapingJob,
    VALID_TRANSITIONS,
)

# ============================================================
# Configuration
# ============================================================
from orchestrator.config import (
    JobConfig,
    ScannerConfig,
)

# ============================================================
# Jobs
# ============================================================
from orchestrator.job_store import JobStore
from orchestrator.job_manager import JobManager

# ============================================================
# Core
# ============================================================
from orchestrator.core import (
    # Wiring
    build_job_manager,

    # Logging setup
    setup_logging,
)


__all__ = [
    # Models
    "JobStatus",
    "ScrapingJob",
    "VALID_TRANSITIONS",
    # Configuration
    "JobConfig",
    "ScannerConfig",
    # Jobs
    "JobStore",
    "JobManager",
    # Core
    "build_job_manager",
    "setup_logging",
]
