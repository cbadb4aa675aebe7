"""
Dashboard API Routers.
"""
from . import health, jobs, market

__all__ = ["health", "jobs", "market"]
