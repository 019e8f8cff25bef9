"""
API Routes Package

Contains all route modules for the PointBridge API.
"""

from .extract import router as extract_router
from .ingest import router as ingest_router

__all__ = [
    "extract_router",
    "ingest_router",
]
