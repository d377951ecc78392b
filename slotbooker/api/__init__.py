"""
HTTP boundary - FastAPI application and routes.
"""

from .app import build_container, create_app

__all__ = ["build_container", "create_app"]
