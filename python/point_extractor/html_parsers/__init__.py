"""
Site-specific HTML parsers for point history pages.
"""

from .base import BaseHTMLParser, ColumnSpec, ExtractionResult, ParsedTransaction
from .ponta import PontaParser
from .rakuten import RakutenParser
from .registry import PARSER_PRIORITY, extract, select_parser
from .rules import FilterRule, RuleAction, evaluate_rules
from .vpoint import VPointParser
from .wester import WesterParser

__all__ = [
    "BaseHTMLParser",
    "ColumnSpec",
    "ExtractionResult",
    "ParsedTransaction",
    "FilterRule",
    "RuleAction",
    "evaluate_rules",
    "PontaParser",
    "RakutenParser",
    "VPointParser",
    "WesterParser",
    "PARSER_PRIORITY",
    "extract",
    "select_parser",
]
