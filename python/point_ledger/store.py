"""
Ledger Store Module

Append-only, header-driven tables keyed by site. Row 1 of each table is the
header set; data rows follow in header order.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)


class BaseStore(ABC):
    """Read/append contract the ingestion engine relies on."""

    @abstractmethod
    def get_headers(self, site: str) -> list[str] | None:
        """Return the site's header set.

        Returns:
            Ordered column names, an empty list for a table without a header
            row, or None if the site has no table yet
        """
        pass

    @abstractmethod
    def write_headers(self, site: str, headers: Sequence[str]) -> None:
        """Create the site's table (if needed) with the given header row."""
        pass

    @abstractmethod
    def read_rows(self, site: str) -> list[list[Any]]:
        """Return all data rows (header excluded) in stored order."""
        pass

    @abstractmethod
    def append_rows(self, site: str, rows: Sequence[Sequence[Any]]) -> None:
        """Append rows after the last stored row."""
        pass

    def flush(self) -> None:
        """Persist pending changes. No-op for stores that write through."""
        pass

    def sites(self) -> list[str]:
        return []

    def conflicting_table(self, site: str) -> str | None:
        """Name of an existing table the site would collide with, if any."""
        return None

    def clean_value(self, value: Any) -> Any:
        """Return the value as the store will hold it."""
        return value


class MemoryStore(BaseStore):
    """In-process store, mainly for tests and dry runs."""

    def __init__(self):
        self._tables: dict[str, list[list[Any]]] = {}

    def get_headers(self, site: str) -> list[str] | None:
        table = self._tables.get(site)
        if table is None:
            return None
        return list(table[0]) if table else []

    def write_headers(self, site: str, headers: Sequence[str]) -> None:
        table = self._tables.setdefault(site, [])
        if table:
            table[0] = list(headers)
        else:
            table.append(list(headers))

    def read_rows(self, site: str) -> list[list[Any]]:
        return [list(row) for row in self._tables.get(site, [])[1:]]

    def append_rows(self, site: str, rows: Sequence[Sequence[Any]]) -> None:
        self._tables[site].extend(list(row) for row in rows)

    def sites(self) -> list[str]:
        return list(self._tables)


class WorkbookStore(BaseStore):
    """Excel workbook with one worksheet per site."""

    HEADER_FONT = Font(bold=True)
    TIMESTAMP_FORMAT = "yyyy/mm/dd hh:mm:ss"
    TIMESTAMP_COLUMN = "ImportedAt"

    def __init__(self, path: Path | str):
        """Open or create the workbook.

        Args:
            path: Location of the .xlsx file; created on first flush
        """
        self.path = Path(path)
        if self.path.exists():
            self._wb = load_workbook(self.path)
            logger.info(f"Opened ledger workbook {self.path} ({len(self._wb.sheetnames)} sheets)")
        else:
            self._wb = Workbook()
            # Drop the default "Sheet" so every sheet is a site
            self._wb.remove(self._wb.active)
            logger.info(f"Creating new ledger workbook {self.path}")
        self._dirty = False

    def _sheet(self, site: str) -> Worksheet | None:
        if site in self._wb.sheetnames:
            return self._wb[site]
        return None

    def get_headers(self, site: str) -> list[str] | None:
        ws = self._sheet(site)
        if ws is None:
            return None
        if ws.max_row < 1 or ws.max_column < 1:
            return []

        headers = [cell.value for cell in ws[1]]
        # Trailing empty cells are not columns
        while headers and headers[-1] in (None, ""):
            headers.pop()
        return [str(h) for h in headers]

    def write_headers(self, site: str, headers: Sequence[str]) -> None:
        ws = self._sheet(site)
        if ws is None:
            ws = self._wb.create_sheet(title=site)

        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.HEADER_FONT
        ws.freeze_panes = "A2"
        self._dirty = True

    def read_rows(self, site: str) -> list[list[Any]]:
        ws = self._sheet(site)
        if ws is None or ws.max_row < 2:
            return []
        return [list(row) for row in ws.iter_rows(min_row=2, values_only=True)]

    def append_rows(self, site: str, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return

        ws = self._sheet(site)
        if ws is None:
            raise KeyError(f"No sheet for site {site!r}")

        headers = self.get_headers(site) or []
        ts_col = headers.index(self.TIMESTAMP_COLUMN) + 1 if self.TIMESTAMP_COLUMN in headers else None

        for row in rows:
            ws.append(list(row))
            if ts_col:
                ws.cell(row=ws.max_row, column=ts_col).number_format = self.TIMESTAMP_FORMAT
        self._dirty = True

    def flush(self) -> None:
        if not self._dirty:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._wb.save(self.path)
        self._dirty = False
        logger.debug(f"Saved ledger workbook {self.path}")

    def sites(self) -> list[str]:
        return list(self._wb.sheetnames)

    def conflicting_table(self, site: str) -> str | None:
        # Sheet titles are case-insensitive; "ponta" would become "ponta1"
        for title in self._wb.sheetnames:
            if title != site and title.lower() == site.lower():
                return title
        return None

    def clean_value(self, value: Any) -> Any:
        # Control characters cannot be stored in a worksheet cell
        if isinstance(value, str):
            return ILLEGAL_CHARACTERS_RE.sub("", value)
        return value
