"""
Orchestrator - Core.

============================================================
RESPONSIBILITY
============================================================
Wires the scanner together.

- Sets up process-wide logging
- Builds the shared ResultCache and market data source
- Builds discovery, social aggregation, analysis and scoring
- Hands them to a JobManager

============================================================
ARCHITECTURAL POSITION
============================================================
- No business logic lives here
- Every collaborator is constructed once and injected
- Entry points (CLI, dashboard) only call build_job_manager

============================================================
"""

import json
import logging
import sys
from typing import Optional

from core.cache import ResultCache
from core.clock import ClockProtocol, SystemClock
from data_processing.volume_patterns import VolumePatternAnalyzer
from data_sources.discovery import TokenDiscovery
from data_sources.factory import create_data_source
from scoring_engine.explosion_score import ExplosionScorer
from scoring_engine.surge_score import SurgeScorer
from sentiment.aggregator import SocialMetricsAggregator

from .config import ScannerConfig
from .job_manager import JobManager


# ============================================================
# LOGGING SETUP
# ============================================================

class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        super().__init__()
        self._correlation_id = correlation_id or ""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": self._correlation_id,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    correlation_id: Optional[str] = None,
) -> logging.Logger:
    """
    Set up structured logging.

    Args:
        level: Log level
        log_format: Output format (json or text)
        correlation_id: Correlation ID for tracing

    Returns:
        Configured logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter: logging.Formatter = JsonFormatter(correlation_id)
    else:
        formatter = logging.Formatter(
            f"%(asctime)s | %(levelname)-8s | %(name)s | {correlation_id or ''} | %(message)s"
        )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("orchestrator")


# ============================================================
# WIRING
# ============================================================

def build_job_manager(
    config: Optional[ScannerConfig] = None,
    clock: Optional[ClockProtocol] = None,
) -> JobManager:
    """Construct a JobManager and all of its collaborators from config."""
    config = config or ScannerConfig()
    clock = clock or SystemClock()

    cache = ResultCache(
        default_ttl=config.job.cache_ttl,
        check_period=config.job.cache_check_period,
        clock=clock,
    )
    source = create_data_source(
        config.job.data_source,
        config=config.fetch,
        cache=cache,
        clock=clock,
        seed=config.job.seed,
    )

    return JobManager(
        source=source,
        discovery=TokenDiscovery(source, config.discovery, clock=clock),
        aggregator=SocialMetricsAggregator(config.social, cache=cache, clock=clock),
        analyzer=VolumePatternAnalyzer(config.analyzer),
        explosion=ExplosionScorer(config.explosion),
        surge=SurgeScorer(config.surge),
        cache=cache,
        config=config.job,
        clock=clock,
    )
