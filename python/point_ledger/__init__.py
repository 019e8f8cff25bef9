"""
Point Ledger Module

Idempotent ingestion of extracted point records into per-site tables.
"""

from .engine import (
    ADDED,
    SKIPPED,
    IngestionEngine,
    IngestionResult,
    error_response,
    validate_batch,
)
from .errors import IngestionError, MalformedBatchError
from .signature import SignatureIndex, normalize_value
from .store import BaseStore, MemoryStore, WorkbookStore

__all__ = [
    # Engine
    "ADDED",
    "SKIPPED",
    "IngestionEngine",
    "IngestionResult",
    "error_response",
    "validate_batch",
    # Errors
    "IngestionError",
    "MalformedBatchError",
    # Signatures
    "SignatureIndex",
    "normalize_value",
    # Stores
    "BaseStore",
    "MemoryStore",
    "WorkbookStore",
]
