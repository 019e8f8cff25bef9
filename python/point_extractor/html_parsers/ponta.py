"""
Ponta Point Parser

Parses the au PAY point portal history (Ponta points).
"""

from typing import Iterator

from bs4 import BeautifulSoup, Tag

from .base import BaseHTMLParser, ParsedTransaction
from .normalize import month_day_to_date, normalize_text, parse_points
from .rules import description_contains, include_if


class PontaParser(BaseHTMLParser):
    """Parser for the au PAY point portal history page."""

    SITE_ID = "Ponta"

    URL_MARKERS = ("point-portal.auone.jp/point/history",)

    # Full history modal first, recent history block as fallback
    CONTAINER_SELECTORS = [
        ".point-history-slideup-modal__container .point-list__list",
        ".container__recently-history .point-list__list",
    ]

    # Moving points into/out of au PAY point management is an internal
    # transfer, kept only when the user opts in
    RULES = (
        include_if(
            "point_management",
            description_contains("ａｕ　ＰＡＹ　ポイント運用", "au PAY ポイント運用"),
            toggle="includePontaManagement",
        ),
    )

    def _find_container(self, document: BeautifulSoup | Tag) -> Tag | None:
        for selector in self.CONTAINER_SELECTORS:
            container = document.select_one(selector)
            if container is not None:
                return container
        return None

    def _iter_items(self, document: BeautifulSoup | Tag) -> Iterator[tuple[str | None, Tag]]:
        container = self._find_container(document)
        if container is None:
            return

        # Each direct <li> groups the items of one day
        for group in container.find_all("li", recursive=False):
            date_text = self._text(group, ".point-list__date")
            for item in group.select("ul > li.point-list__item"):
                yield date_text, item

    def _parse_item(self, item: tuple[str | None, Tag]) -> ParsedTransaction | None:
        date_text, element = item

        description = self._text(element, ".point-list__detail") or ""
        point_text = self._text(element, ".point-list__point")
        if point_text is None:
            return None

        # "+1P", "-100P", "1,000P"
        amount = parse_points(point_text.rstrip("P"))

        return ParsedTransaction(
            site=self.SITE_ID,
            date=month_day_to_date(date_text, self.year_hint),
            description=normalize_text(description, ideographic_comma=True),
            amount=amount,
            raw_description=description,
        )
