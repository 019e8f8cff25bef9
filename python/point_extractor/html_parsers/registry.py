"""
Parser Registry

Selects the parser for a page by URL and runs it.
"""

import logging
from typing import Any, Mapping

from bs4 import BeautifulSoup, Tag

from ..options import ExtractorOptions
from .base import BaseHTMLParser, ExtractionResult
from .ponta import PontaParser
from .rakuten import RakutenParser
from .vpoint import VPointParser
from .wester import WesterParser

logger = logging.getLogger(__name__)

# Tried in order; the first applicable parser wins
PARSER_PRIORITY: tuple[type[BaseHTMLParser], ...] = (
    WesterParser,
    RakutenParser,
    PontaParser,
    VPointParser,
)


def select_parser(
    location: str,
    options: ExtractorOptions | Mapping[str, Any] | None = None,
    year_hint: int | None = None
) -> BaseHTMLParser | None:
    """Return the first parser applicable to the URL, or None.

    Args:
        location: Page URL
        options: Category toggles passed to the parser
        year_hint: Year for dates shown without one

    Returns:
        Parser instance or None if no site matches
    """
    for parser_cls in PARSER_PRIORITY:
        parser = parser_cls(options=options, year_hint=year_hint)
        if parser.is_applicable(location):
            return parser
    return None


def extract(
    location: str,
    document: BeautifulSoup | Tag | str,
    options: ExtractorOptions | Mapping[str, Any] | None = None,
    year_hint: int | None = None
) -> ExtractionResult:
    """Convenience function to select a parser and scan a document.

    Returns:
        The parser's result, or a not-applicable result when no parser
        handles the URL (distinct from an applicable scan with no records)
    """
    parser = select_parser(location, options, year_hint)
    if parser is None:
        logger.info(f"No applicable parser for {location}")
        return ExtractionResult.not_applicable()

    return parser.parse_document(document)
