"""
FastAPI Backend for PointBridge

Provides the ingestion and extraction endpoints.
"""

from .main import app

__all__ = ["app"]
