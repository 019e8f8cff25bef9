"""
V Point Parser

Parses the V Point (formerly T-POINT) history on mypage.tsite.jp / vpoint.jp.
"""

from typing import Iterator

from bs4 import BeautifulSoup, Tag

from .base import BaseHTMLParser, ParsedTransaction
from .normalize import first_line_ymd, normalize_text, parse_points
from .rules import FilterRule, RuleAction, description_contains, include_if


class VPointParser(BaseHTMLParser):
    """Parser for the V Point history list."""

    SITE_ID = "VPoint"

    URL_MARKERS = ("mypage.tsite.jp", "vpoint.jp")

    RULES = (
        # Store-limited points cannot be spent elsewhere
        FilterRule(
            name="store_limited",
            predicate=description_contains("ストア限定"),
            action=RuleAction.EXCLUDE,
        ),
        include_if(
            "point_investment",
            description_contains("Ｖポイント運用", "Vポイント運用"),
            toggle="includeVPointInvestment",
        ),
    )

    def _iter_items(self, document: BeautifulSoup | Tag) -> Iterator[Tag]:
        yield from document.select("ul > li.list__one")

    def _parse_item(self, item: Tag) -> ParsedTransaction | None:
        date_text = self._text(item, ".list__one__date")
        description = self._text(item, ".list__one__contents--name")
        point_text = self._text(item, ".list__one__contents--point")

        if not date_text or not description or not point_text:
            return None

        # "16", "+90", "-50"
        amount = parse_points(point_text)

        return ParsedTransaction(
            site=self.SITE_ID,
            date=first_line_ymd(date_text),
            description=normalize_text(description),
            amount=amount,
            raw_description=description,
        )
