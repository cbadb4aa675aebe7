#!/usr/bin/env python
"""
Dashboard API Server Runner.

Usage:
    python run_dashboard.py

Environment:
    DASHBOARD_HOST, DASHBOARD_PORT (or PORT), ENVIRONMENT=development
    SCANNER_CONFIG_FILE and SCANNER_* settings for the scanner itself
"""

import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

from core.exceptions import ConfigurationError
from orchestrator.config import CONFIG_FILE_ENV, ScannerConfig
from orchestrator.core import setup_logging

logger = logging.getLogger(__name__)


def main():
    """Validate the scanner configuration, then serve the dashboard."""
    load_dotenv()

    try:
        config = ScannerConfig.load(os.getenv(CONFIG_FILE_ENV))
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.job.log_level, config.job.log_format)

    host = os.getenv("DASHBOARD_HOST", "0.0.0.0")
    port = int(os.getenv("DASHBOARD_PORT", os.getenv("PORT", "8000")))
    reload = os.getenv("ENVIRONMENT", "production") == "development"

    logger.info(
        f"Starting Dashboard API on {host}:{port} "
        f"(source={config.job.data_source}, concurrency={config.job.concurrency})"
    )

    # The app factory reloads the same layered config in the server process
    try:
        uvicorn.run(
            "dashboard.api:create_app",
            factory=True,
            host=host,
            port=port,
            reload=reload,
            log_level=config.job.log_level.lower(),
            access_log=True,
        )
    except Exception as e:
        logger.error(f"Failed to start dashboard: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
