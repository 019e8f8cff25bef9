"""
Base HTML Parser Module

Abstract base class for site-specific point history parsers.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from bs4 import BeautifulSoup, Tag

from ..options import ExtractorOptions
from .rules import FilterRule, evaluate_rules

logger = logging.getLogger(__name__)

# Wire keys whose attribute name differs
_FIELD_ATTRIBUTES = {
    "isCancellation": "is_cancellation",
}


@dataclass
class ParsedTransaction:
    """Represents one point event scraped from a history page."""

    site: str
    date: str
    description: str = ""
    amount: int = 0
    usage_date: str | None = None
    service: str | None = None
    action: str | None = None
    is_cancellation: bool = False
    raw_description: str = ""

    def to_record(self, fields: Iterable[str]) -> dict[str, Any]:
        """Serialize to the flat record sent to the ledger.

        Args:
            fields: Ordered wire keys the site emits (excluding "site")

        Returns:
            Dictionary starting with "site" followed by fields in order
        """
        record: dict[str, Any] = {"site": self.site}
        for key in fields:
            record[key] = getattr(self, _FIELD_ATTRIBUTES.get(key, key))
        return record


@dataclass
class ColumnSpec:
    """Display column for a site's transaction table."""

    label: str
    key: str
    style: str | None = None
    formatter: Callable[[Any], str] | None = None

    def format(self, value: Any) -> str:
        if value is None:
            return ""
        if self.formatter:
            return self.formatter(value)
        return str(value)

    def to_dict(self) -> dict:
        data = {"label": self.label, "key": self.key}
        if self.style:
            data["style"] = self.style
        return data


@dataclass
class ExtractionResult:
    """Result of scanning one document."""

    site: str | None
    applicable: bool = True
    transactions: list[ParsedTransaction] = field(default_factory=list)
    fields: tuple[str, ...] = ()
    columns: list[ColumnSpec] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def not_applicable(cls) -> "ExtractionResult":
        return cls(site=None, applicable=False)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def records(self) -> list[dict[str, Any]]:
        return [t.to_record(self.fields) for t in self.transactions]

    def to_dict(self) -> dict:
        return {
            "applicable": self.applicable,
            "site": self.site,
            "records": self.records,
            "columns": [c.to_dict() for c in self.columns],
            "warnings": list(self.warnings),
        }


class BaseHTMLParser(ABC):
    """Abstract base class for point history page parsers."""

    SITE_ID: str = "unknown"

    # Substrings of the page URL that identify the site
    URL_MARKERS: tuple[str, ...] = ()

    # Wire keys emitted after "site", in header order
    RECORD_FIELDS: tuple[str, ...] = ("date", "description", "amount", "isCancellation")

    # Ordered inclusion table; unmatched transactions fall back to amount > 0
    RULES: tuple[FilterRule, ...] = ()

    def __init__(
        self,
        options: ExtractorOptions | Mapping[str, Any] | None = None,
        year_hint: int | None = None
    ):
        """Initialize the parser.

        Args:
            options: Category toggles (see ExtractorOptions)
            year_hint: Year to use for dates shown without one
        """
        if isinstance(options, ExtractorOptions):
            self.options = options
        else:
            self.options = ExtractorOptions.from_mapping(options)
        self.year_hint = year_hint

    def is_applicable(self, location: str) -> bool:
        """Check whether this parser handles the page at the given URL."""
        if not location:
            return False
        return any(marker in location for marker in self.URL_MARKERS)

    def parse(self, document: BeautifulSoup | Tag | str) -> list[ParsedTransaction]:
        """Parse a document into transactions in document order."""
        return self.parse_document(document).transactions

    def parse_document(self, document: BeautifulSoup | Tag | str) -> ExtractionResult:
        """Parse a document, keeping warnings for skipped items.

        Args:
            document: Parsed tree or raw HTML

        Returns:
            ExtractionResult for this site
        """
        document = self._coerce_document(document)
        result = ExtractionResult(
            site=self.SITE_ID,
            fields=self.RECORD_FIELDS,
            columns=self.get_columns(),
        )
        toggles = self.options.as_dict()

        for index, item in enumerate(self._iter_items(document)):
            try:
                transaction = self._parse_item(item)
            except ValueError as e:
                logger.debug(f"{self.SITE_ID}: skipping item {index}: {e}")
                result.warnings.append(f"Item {index}: {e}")
                continue

            if transaction is None:
                continue

            if not evaluate_rules(self.RULES, transaction, toggles):
                continue

            result.transactions.append(transaction)

        logger.info(f"{self.SITE_ID}: extracted {result.transaction_count} transactions")
        return result

    def get_columns(self) -> list[ColumnSpec]:
        """Describe how to render this site's transactions."""
        return [
            ColumnSpec("デイト", "date"),
            ColumnSpec("ディテール", "description"),
            ColumnSpec("ゲイン", "amount", style="text-align: right;"),
        ]

    def _coerce_document(self, document: BeautifulSoup | Tag | str) -> BeautifulSoup | Tag:
        if isinstance(document, str):
            return BeautifulSoup(document, "html.parser")
        return document

    @abstractmethod
    def _iter_items(self, document: BeautifulSoup | Tag) -> Iterable[Any]:
        """Yield the raw per-transaction elements of the page.

        Yields nothing when the expected structure is absent, e.g. when the
        history has not finished loading.
        """
        pass

    @abstractmethod
    def _parse_item(self, item: Any) -> ParsedTransaction | None:
        """Parse one element into a transaction.

        Returns:
            ParsedTransaction, or None if the element lacks required parts

        Raises:
            ValueError: If the point amount cannot be read
        """
        pass

    @staticmethod
    def _text(element: Tag | None, selector: str) -> str | None:
        """Stripped text of the first match under element, or None."""
        if element is None:
            return None
        found = element.select_one(selector)
        if found is None:
            return None
        return found.get_text().strip()
