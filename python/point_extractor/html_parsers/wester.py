"""
WESTER Point Parser

Parses the JR West ICOCA / WESTER point reference search results.
"""

from typing import Iterator

from bs4 import BeautifulSoup, Tag

from .base import BaseHTMLParser, ColumnSpec, ParsedTransaction
from .normalize import normalize_text, parse_points
from .rules import FilterRule, RuleAction

CANCELLATION_MARKER = "取消"


def _is_cancellation(txn: ParsedTransaction) -> bool:
    return txn.is_cancellation


class WesterParser(BaseHTMLParser):
    """Parser for the WESTER point reference page."""

    SITE_ID = "wester"

    URL_MARKERS = ("pointref_search.do",)

    RECORD_FIELDS = ("date", "service", "description", "amount", "isCancellation")

    # A cancellation reverses an earlier gain and must stay visible
    RULES = (
        FilterRule(
            name="cancellation",
            predicate=_is_cancellation,
            action=RuleAction.INCLUDE,
        ),
    )

    def get_columns(self) -> list[ColumnSpec]:
        return [
            ColumnSpec("デイト", "date"),
            ColumnSpec("サービス", "service"),
            ColumnSpec("ディテール", "description"),
            ColumnSpec("ゲイン", "amount", style="text-align: right;"),
        ]

    def _iter_items(self, document: BeautifulSoup | Tag) -> Iterator[Tag]:
        yield from document.select(".detailTableWrap table")

    def _parse_item(self, table: Tag) -> ParsedTransaction | None:
        # Row 2 holds: date, place, content, points, note, breakdown
        rows = table.find_all("tr")
        if len(rows) < 2:
            return None

        cells = rows[1].find_all("td")
        if len(cells) < 4:
            return None

        date_str = cells[0].get_text().strip()
        place = cells[1].get_text().strip()
        description = cells[2].get_text().strip()

        # "180 P", "-1,200 P"
        amount = parse_points(cells[3].get_text().strip().rstrip("P"))

        return ParsedTransaction(
            site=self.SITE_ID,
            date=date_str,
            service=normalize_text(place),
            description=normalize_text(description),
            amount=amount,
            is_cancellation=amount < 0 and CANCELLATION_MARKER in description,
            raw_description=description,
        )
