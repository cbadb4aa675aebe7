"""
Orchestrator - Job Manager.

============================================================
RESPONSIBILITY
============================================================
Runs scan jobs in the background and tracks their lifecycle.

- Registers a pending job and returns its id immediately
- Discovers candidate tokens
- Enriches and scores each token under a concurrency cap
- Ranks results by explosion score, highest first
- Publishes results on the job and in the ResultCache

============================================================
FAILURE POLICY
============================================================
- A token failure is logged with the token id and dropped
- A discovery failure, or anything else escaping the run,
  fails the job with the error message recorded
- Failed jobs are never retried

============================================================
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from core.cache import ResultCache
from core.clock import ClockProtocol, SystemClock
from core.exceptions import TokenPipelineError
from data_processing.volume_patterns import VolumePatternAnalyzer
from data_sources.base import BaseMarketDataSource
from data_sources.discovery import TokenDiscovery
from data_sources.models import MarketOverview, TokenMetrics
from scoring_engine.explosion_score import ExplosionScorer
from scoring_engine.risk_level import classify_risk
from scoring_engine.surge_score import SurgeScorer
from sentiment.aggregator import SocialMetricsAggregator

from .config import JobConfig
from .job_store import JobStore
from .models import JobStatus, ScrapingJob


logger = logging.getLogger(__name__)


class JobManager:
    """
    Owns every ScrapingJob.

    Usage:
        job_id = await manager.start()
        job = await manager.wait(job_id, timeout=600)
        print(job.status, len(job.results or []))
    """

    RESULTS_KEY_PREFIX = "scraping_results_"

    def __init__(
        self,
        source: BaseMarketDataSource,
        discovery: TokenDiscovery,
        aggregator: SocialMetricsAggregator,
        analyzer: Optional[VolumePatternAnalyzer] = None,
        explosion: Optional[ExplosionScorer] = None,
        surge: Optional[SurgeScorer] = None,
        cache: Optional[ResultCache] = None,
        config: Optional[JobConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._config = config or JobConfig()
        self._clock = clock or SystemClock()
        self._source = source
        self._discovery = discovery
        self._aggregator = aggregator
        self._analyzer = analyzer or VolumePatternAnalyzer()
        self._explosion = explosion or ExplosionScorer()
        self._surge = surge or SurgeScorer()
        self._cache = cache or ResultCache(
            default_ttl=self._config.cache_ttl,
            check_period=self._config.cache_check_period,
            clock=self._clock,
        )

        self._store = JobStore(max_jobs=self._config.max_jobs)
        self._tasks: Dict[str, asyncio.Task] = {}
        self._last_job_ms = 0

        self._stats = {
            "jobs_started": 0,
            "jobs_completed": 0,
            "jobs_failed": 0,
            "tokens_processed": 0,
            "tokens_failed": 0,
        }

    @property
    def cache(self) -> ResultCache:
        return self._cache

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    async def start(self) -> str:
        """Register a pending job, schedule its run and return its id."""
        self._cache.start()

        job = ScrapingJob(id=self._next_job_id(), start_time=self._clock.now())
        self._store.add(job)
        self._stats["jobs_started"] += 1

        task = asyncio.create_task(self._run(job), name=f"scan-job-{job.id}")
        self._tasks[job.id] = task
        task.add_done_callback(lambda _t, job_id=job.id: self._tasks.pop(job_id, None))

        logger.info(f"[job={job.id}] Scheduled")
        return job.id

    def status(self, job_id: str) -> Optional[ScrapingJob]:
        """Snapshot of the job, or None if unknown (or evicted)."""
        job = self._store.get(job_id)
        return job.snapshot() if job else None

    async def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[ScrapingJob]:
        """
        Wait until the job reaches a terminal status or ``timeout`` passes.

        Returns the latest snapshot either way.
        """
        task = self._tasks.get(job_id)
        if task is not None and not task.done():
            await asyncio.wait([task], timeout=timeout)
        return self.status(job_id)

    def cached_results(self, job_id: str) -> Optional[List[TokenMetrics]]:
        """Ranked results from the ResultCache while they are live."""
        return self._cache.get(f"{self.RESULTS_KEY_PREFIX}{job_id}")

    def list_jobs(self) -> List[ScrapingJob]:
        return [self._store.get(job_id).snapshot() for job_id in self._store.ids()]

    async def market_overview(self) -> MarketOverview:
        """Whole-market totals from the data source."""
        return await self._source.get_global()

    async def close(self) -> None:
        """Cancel outstanding runs and release resources."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        # Runs cancelled before their first step never reach _run's handler
        for job_id in self._store.ids():
            self._fail(self._store.get(job_id), "Job cancelled")

        await self._cache.close()
        await self._aggregator.close()
        await self._source.close()
        logger.info(f"[jobs] Closed ({len(tasks)} runs cancelled)")

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "active_runs": len(self._tasks),
            "store": self._store.get_stats(),
            "cache": self._cache.get_stats(),
            "source": self._source.get_stats(),
            "social": self._aggregator.get_stats(),
        }

    # ─────────────────────────────────────────────────────────────
    # Run
    # ─────────────────────────────────────────────────────────────

    def _next_job_id(self) -> str:
        now_ms = self._clock.timestamp_ms()
        self._last_job_ms = max(now_ms, self._last_job_ms + 1)
        return str(self._last_job_ms)

    async def _run(self, job: ScrapingJob) -> None:
        job.transition_to(JobStatus.RUNNING, self._clock.now())
        logger.info(f"[job={job.id}] Running")

        try:
            token_ids = sorted(await self._discovery.discover())
            job.total_tokens = len(token_ids)
            logger.info(f"[job={job.id}] Analyzing {job.total_tokens} tokens")

            semaphore = asyncio.Semaphore(self._config.concurrency)
            progress_lock = asyncio.Lock()

            async def bounded(token_id: str) -> Optional[TokenMetrics]:
                async with semaphore:
                    try:
                        return await self.process_token(token_id)
                    except TokenPipelineError as e:
                        self._stats["tokens_failed"] += 1
                        logger.error(
                            f"[job={job.id}] token={e.token_id} failed at {e.stage}: "
                            f"{e.context.get('cause_message', e.message)}"
                        )
                        return None
                    finally:
                        async with progress_lock:
                            job.processed_tokens += 1
                            self._stats["tokens_processed"] += 1

            results = await asyncio.gather(*(bounded(t) for t in token_ids))
            ranked = sorted(
                (m for m in results if m is not None),
                key=lambda m: m.explosion_score or 0.0,
                reverse=True,
            )

            self._cache.set(f"{self.RESULTS_KEY_PREFIX}{job.id}", ranked)
            job.results = ranked
            job.transition_to(JobStatus.COMPLETED, self._clock.now())
            self._stats["jobs_completed"] += 1

            high_potential = sum(1 for m in ranked if (m.explosion_score or 0) > 75)
            logger.info(
                f"[job={job.id}] Completed: {len(ranked)}/{job.total_tokens} tokens scored, "
                f"{high_potential} high potential"
            )

        except asyncio.CancelledError:
            self._fail(job, "Job cancelled")
            raise
        except Exception as e:
            self._fail(job, str(e))
            logger.error(f"[job={job.id}] Failed: {e}", exc_info=True)

    def _fail(self, job: ScrapingJob, message: str) -> None:
        if job.status.is_terminal:
            return
        job.error = message
        job.transition_to(JobStatus.FAILED, self._clock.now())
        self._stats["jobs_failed"] += 1

    async def process_token(self, token_id: str) -> TokenMetrics:
        """
        Enrich and score one token.

        Raises:
            TokenPipelineError: any stage failed
        """
        stage = "metrics"
        try:
            metrics = await self._source.get_token_metrics(token_id)

            stage = "social"
            metrics.social_metrics = await self._aggregator.get_social_metrics(token_id)

            stage = "patterns"
            history = metrics.history
            metrics.volume_patterns = self._analyzer.analyze(
                history.volumes, history.prices, history.timestamps,
            )
            metrics.technical_indicators = self._analyzer.technical_indicators(
                history.volumes, history.prices,
            )

            stage = "scoring"
            metrics.explosion_score = self._explosion.score(metrics)
            metrics.surge_score = self._surge.score(metrics)
            metrics.risk_level = classify_risk(metrics.surge_score).value
        except Exception as e:
            raise TokenPipelineError(token_id, stage, cause=e) from e

        logger.debug(
            f"[scan] token={token_id} explosion={metrics.explosion_score} "
            f"surge={metrics.surge_score}"
        )
        return metrics
