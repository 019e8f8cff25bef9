"""
Rakuten Point Parser

Parses the Rakuten Point Club history table.
"""

import copy
import re
from typing import Iterator

from bs4 import BeautifulSoup, Tag

from .base import BaseHTMLParser, ColumnSpec, ParsedTransaction
from .normalize import normalize_text, parse_points
from .rules import FilterRule, RuleAction, action_contains

USAGE_DATE_RE = re.compile(r'\[(\d{4}/\d{2}/\d{2})\]')


def _not_acquisition(txn: ParsedTransaction) -> bool:
    return "獲得" not in (txn.action or "")


class RakutenParser(BaseHTMLParser):
    """Parser for the Rakuten Point history table."""

    SITE_ID = "RakutenPoint"

    URL_MARKERS = ("point.rakuten.co.jp/history",)

    RECORD_FIELDS = ("date", "usage_date", "service", "description", "amount", "action")

    RULES = (
        # "獲得予定" is a pending grant, not a gain yet
        FilterRule(
            name="scheduled",
            predicate=action_contains("予定"),
            action=RuleAction.EXCLUDE,
        ),
        # Usage, charges and withdrawals
        FilterRule(
            name="not_acquisition",
            predicate=_not_acquisition,
            action=RuleAction.EXCLUDE,
        ),
    )

    def get_columns(self) -> list[ColumnSpec]:
        return [
            ColumnSpec("ポステッド", "date"),
            ColumnSpec("トランザク", "usage_date"),
            ColumnSpec("サービス", "service"),
            ColumnSpec("ディテール", "description"),
            ColumnSpec(
                "ゲイン", "amount",
                style="text-align: right;",
                formatter=lambda value: f"{value:,}",
            ),
        ]

    def _iter_items(self, document: BeautifulSoup | Tag) -> Iterator[Tag]:
        for row in document.select("table.history-table tbody tr"):
            # Header or spacer rows
            if row.find("th") is not None:
                continue
            # Only rows flagged as point gains
            if "get" not in (row.get("class") or []):
                continue
            yield row

    def _parse_item(self, row: Tag) -> ParsedTransaction | None:
        action_text = self._text(row, ".action")
        if action_text is None:
            return None

        date_el = row.select_one(".date")
        detail_el = row.select_one(".detail")
        point_text = self._text(row, ".point")
        if date_el is None or detail_el is None or point_text is None:
            return None

        # "2026<br>02/06" -> "2026-02-06"
        grant_date = re.sub(r'\s', '', date_el.get_text("/", strip=True)).replace('/', '-')

        usage_date = grant_date
        usage_el = detail_el.select_one(".date")
        if usage_el is not None:
            match = USAGE_DATE_RE.search(usage_el.get_text())
            if match:
                usage_date = match.group(1).replace('/', '-')

        service = ""
        service_el = row.select_one(".service")
        if service_el is not None:
            service_el = copy.copy(service_el)
            for link in service_el.select(".sub-link"):
                link.decompose()
            service = service_el.get_text().strip()

        # The .data block carries the usage date and rank info
        detail = copy.copy(detail_el)
        for data in detail.select(".data"):
            data.decompose()
        raw_description = detail.get_text().strip()

        return ParsedTransaction(
            site=self.SITE_ID,
            date=grant_date,
            usage_date=usage_date,
            service=normalize_text(service),
            description=normalize_text(raw_description),
            amount=parse_points(point_text),
            action=action_text,
            raw_description=raw_description,
        )
