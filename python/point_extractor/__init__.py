"""
Point History Extractor Module

Scrapes reward-point history pages into uniform transaction records,
applying per-site normalization and inclusion rules.
"""

from .options import ExtractorOptions
from .html_parsers import (
    ColumnSpec,
    ExtractionResult,
    ParsedTransaction,
    PontaParser,
    RakutenParser,
    VPointParser,
    WesterParser,
    extract,
    select_parser,
)

__all__ = [
    # Options
    "ExtractorOptions",
    # Parsing
    "ColumnSpec",
    "ExtractionResult",
    "ParsedTransaction",
    "PontaParser",
    "RakutenParser",
    "VPointParser",
    "WesterParser",
    "extract",
    "select_parser",
]
