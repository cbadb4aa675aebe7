"""
Dashboard Package.

HTTP surface over the scan job manager.

Modules:
- api: FastAPI application factory
- routers/: health and job endpoints
- schemas: response models
"""

from .api import create_app

__all__ = ["create_app"]
