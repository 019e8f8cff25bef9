"""
Ingestion Engine Module

Merges batches of extracted point records into the per-site store without
creating duplicates across repeated runs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from .errors import MalformedBatchError
from .signature import IMPORTED_AT, SITE_KEY, SignatureIndex, data_keys
from .store import BaseStore

logger = logging.getLogger(__name__)

ADDED = "added"
SKIPPED = "skipped"

SCALAR_TYPES = (str, int, float, bool, type(None))

# Worksheet titles cannot contain these and are capped at 31 characters
INVALID_SITE_CHARS = set('[]:*?/\\')
MAX_SITE_LENGTH = 31


@dataclass
class IngestionResult:
    """Outcome of one ingestion call."""

    outcomes: list[str] = field(default_factory=list)
    added_by_site: dict[str, int] = field(default_factory=dict)

    @property
    def added_count(self) -> int:
        return sum(1 for o in self.outcomes if o == ADDED)

    def to_response(self) -> dict:
        """Wire response; results[i] belongs to the i-th submitted record."""
        return {
            "status": "success",
            "message": f"{self.added_count} items added.",
            "addedCount": self.added_count,
            "results": [{"status": outcome} for outcome in self.outcomes],
        }


def error_response(message: str) -> dict:
    """Wire response for a failed call."""
    return {"status": "error", "message": message}


def validate_batch(batch: Any) -> list[dict]:
    """Check that the batch is an array of flat records with a site.

    Args:
        batch: Decoded request payload

    Returns:
        The batch as a list

    Raises:
        MalformedBatchError: On the first violation found
    """
    if not isinstance(batch, list):
        raise MalformedBatchError("Payload must be an array.")

    # Table names are case-insensitive, so "Ponta" and "ponta" are one table
    seen_sites: dict[str, str] = {}
    for index, record in enumerate(batch):
        if not isinstance(record, dict):
            raise MalformedBatchError("record must be an object", index)

        site = record.get(SITE_KEY)
        if not isinstance(site, str) or not site.strip():
            raise MalformedBatchError("'site' must be a non-empty string", index)
        if len(site) > MAX_SITE_LENGTH or INVALID_SITE_CHARS & set(site):
            raise MalformedBatchError(f"invalid site name {site!r}", index)
        other = seen_sites.setdefault(site.lower(), site)
        if other != site:
            raise MalformedBatchError(f"site {site!r} differs from {other!r} only in case", index)

        for key, value in record.items():
            if not isinstance(value, SCALAR_TYPES):
                raise MalformedBatchError(f"field {key!r} must be a scalar", index)

    return batch


class IngestionEngine:
    """Signature-based idempotent merge of record batches into a store."""

    def __init__(self, store: BaseStore, clock: Callable[[], datetime] = datetime.now):
        """Initialize the engine.

        Args:
            store: Per-site table store
            clock: Source of ImportedAt timestamps
        """
        self.store = store
        self.clock = clock

    def ingest(self, batch: Any) -> IngestionResult:
        """Merge a batch into the store.

        Records are compared against both the stored rows and the records
        accepted earlier in the same batch.

        Args:
            batch: List of flat records, each with a "site" key

        Returns:
            IngestionResult with one outcome per record, in input order

        Raises:
            MalformedBatchError: If the batch is malformed; nothing is written
        """
        records = [self._clean(record) for record in validate_batch(batch)]
        result = IngestionResult()

        if not records:
            return result

        # Partition by site, first-seen order
        partitions: dict[str, list[dict]] = {}
        for record in records:
            partitions.setdefault(record[SITE_KEY], []).append(record)

        for site in partitions:
            conflict = self.store.conflicting_table(site)
            if conflict is not None:
                raise MalformedBatchError(f"site {site!r} collides with existing table {conflict!r}")

        headers: dict[str, list[str]] = {}
        indexes: dict[str, SignatureIndex] = {}
        for site, site_records in partitions.items():
            headers[site] = self._ensure_headers(site, site_records[0])
            existing = self.store.read_rows(site)
            indexes[site] = SignatureIndex(headers[site], existing)
            logger.debug(f"{site}: {len(existing)} stored rows, {len(site_records)} incoming")

        staged: dict[str, list[list[Any]]] = {site: [] for site in partitions}
        imported_at = self.clock()

        for record in records:
            site = record[SITE_KEY]
            index = indexes[site]

            if index.contains(record):
                result.outcomes.append(SKIPPED)
                continue

            index.add(record)
            staged[site].append(self._to_row(record, headers[site], imported_at))
            result.outcomes.append(ADDED)

        for site, rows in staged.items():
            if rows:
                self.store.append_rows(site, rows)
            result.added_by_site[site] = len(rows)
            logger.info(
                f"{site}: {len(rows)} added, {len(partitions[site]) - len(rows)} skipped"
            )

        self.store.flush()
        logger.info(f"Ingested batch of {len(records)}: {result.added_count} added")
        return result

    def _ensure_headers(self, site: str, sample: dict) -> list[str]:
        """Load the site's header set, creating it from the sample record."""
        headers = self.store.get_headers(site)
        if headers:
            return headers

        headers = [*data_keys(sample), IMPORTED_AT]
        self.store.write_headers(site, headers)
        logger.info(f"Created table for {site} with columns {headers}")
        return headers

    @staticmethod
    def _to_row(record: dict, headers: list[str], imported_at: datetime) -> list[Any]:
        """Lay out a record in header order.

        Columns the record lacks are left empty; fields without a column
        are dropped.
        """
        row = []
        for header in headers:
            if header == IMPORTED_AT:
                row.append(imported_at)
            else:
                value = record.get(header)
                row.append("" if value is None else value)
        return row

    def _clean(self, record: dict) -> dict:
        """Record with values as the store will hold them, so signatures agree."""
        return {
            key: value if key == SITE_KEY else self.store.clean_value(value)
            for key, value in record.items()
        }
