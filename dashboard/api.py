"""
Dashboard - API.

============================================================
RESPONSIBILITY
============================================================
Provides a REST API over the scan job manager.

- POST /jobs        start a scan, returns the job id
- GET  /jobs        retained jobs, oldest first
- GET  /jobs/{id}   status, progress and ranked results
- GET  /market/global  whole-market totals
- GET  /health      liveness and uptime

The app owns one JobManager; it is closed on shutdown.
============================================================
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.routers import health, jobs, market
from orchestrator.config import CONFIG_FILE_ENV, ScannerConfig
from orchestrator.core import build_job_manager
from orchestrator.job_manager import JobManager

logger = logging.getLogger(__name__)


# ============================================================
# FastAPI Application
# ============================================================

def create_app(
    manager: Optional[JobManager] = None,
    config: Optional[ScannerConfig] = None,
) -> FastAPI:
    """
    Build the dashboard application.

    Args:
        manager: JobManager to serve (built from config when omitted)
        config: Scanner configuration (loaded from file/env when omitted)
    """
    if manager is None:
        manager = build_job_manager(config or ScannerConfig.load(os.getenv(CONFIG_FILE_ENV)))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("[api] Dashboard started")
        yield
        await app.state.manager.close()
        logger.info("[api] Dashboard stopped")

    app = FastAPI(
        title="Moonshot Scanner API",
        description="Start market scans and read ranked token results.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.manager = manager
    app.state.started_at = datetime.now(timezone.utc)

    # CORS (Allow local frontend development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(jobs.router)
    app.include_router(market.router)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "service": "Moonshot Scanner API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app
