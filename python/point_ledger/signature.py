"""
Dedup Signatures

Builds comparable signatures for incoming records and stored rows. A
signature is the JSON list of normalized values over a record's data keys;
it is only used in memory and never persisted.
"""

import json
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence

IMPORTED_AT = "ImportedAt"
SITE_KEY = "site"

_ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def normalize_value(value: Any) -> str:
    """Normalize a cell or record value for comparison.

    Date cells and "YYYY-MM-DD" strings both render as "YYYY/MM/DD", so a
    record posted with either spelling matches what the store holds.
    """
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y/%m/%d")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    if isinstance(value, str):
        if _ISO_DATE_RE.match(value):
            return value.replace('-', '/')
        return value.strip()
    return str(value)


def data_keys(record: Mapping[str, Any]) -> tuple[str, ...]:
    """Keys that take part in the signature, in record order."""
    return tuple(k for k in record if k not in (SITE_KEY, IMPORTED_AT))


def record_signature(record: Mapping[str, Any], keys: Iterable[str]) -> str:
    """Signature of an incoming record over the given keys."""
    return json.dumps([normalize_value(record.get(k)) for k in keys], ensure_ascii=False)


def row_signature(row: Sequence[Any], header_map: Mapping[str, int], keys: Iterable[str]) -> str:
    """Signature of a stored row, mapping keys onto columns by header name.

    Keys without a column, or beyond the row's length, count as empty.
    """
    parts = []
    for key in keys:
        idx = header_map.get(key)
        if idx is None or idx >= len(row):
            parts.append("")
        else:
            parts.append(normalize_value(row[idx]))
    return json.dumps(parts, ensure_ascii=False)


class SignatureIndex:
    """Signatures seen for one site during a single ingestion call.

    Stored rows are projected lazily onto each distinct key set a record
    brings; accepted records are added to every projection so later records
    in the same batch see them.
    """

    def __init__(self, headers: Sequence[str], rows: Sequence[Sequence[Any]]):
        self.header_map = {h: i for i, h in enumerate(headers)}
        self._rows = list(rows)
        self._accepted: list[Mapping[str, Any]] = []
        self._by_keys: dict[tuple[str, ...], set[str]] = {}

    def _signatures_for(self, keys: tuple[str, ...]) -> set[str]:
        signatures = self._by_keys.get(keys)
        if signatures is None:
            signatures = {row_signature(row, self.header_map, keys) for row in self._rows}
            signatures.update(record_signature(r, keys) for r in self._accepted)
            self._by_keys[keys] = signatures
        return signatures

    def contains(self, record: Mapping[str, Any]) -> bool:
        keys = data_keys(record)
        return record_signature(record, keys) in self._signatures_for(keys)

    def add(self, record: Mapping[str, Any]) -> None:
        self._accepted.append(record)
        for keys, signatures in self._by_keys.items():
            signatures.add(record_signature(record, keys))
