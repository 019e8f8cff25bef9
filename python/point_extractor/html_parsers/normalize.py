"""
Text and Date Normalization

Shared helpers used by the site parsers to canonicalize description text,
point amounts and dates scraped from history pages.
"""

import re
from datetime import datetime

# Full-width block U+FF01..U+FF5E maps onto ASCII U+0021..U+007E
_FULLWIDTH_OFFSET = 0xFEE0
_FULLWIDTH_TABLE = {code: code - _FULLWIDTH_OFFSET for code in range(0xFF01, 0xFF5F)}
_FULLWIDTH_TABLE[0x3000] = ord(" ")

_POINTS_RE = re.compile(r'^[+-]?\d+')
_MONTH_DAY_RE = re.compile(r'(\d+)月(\d+)日')
_YMD_SLASH_RE = re.compile(r'(\d{4})/(\d{1,2})/(\d{1,2})')


def fold_fullwidth(text: str) -> str:
    """Fold full-width Latin letters, digits, punctuation and spaces to half-width."""
    return text.translate(_FULLWIDTH_TABLE)


def normalize_text(text: str | None, ideographic_comma: bool = False) -> str:
    """Canonicalize a description.

    Args:
        text: Raw text content
        ideographic_comma: Also rewrite "、" as ", "

    Returns:
        Folded text with collapsed whitespace and consistent bracket spacing
    """
    if not text:
        return ""

    normalized = fold_fullwidth(text)
    if ideographic_comma:
        normalized = normalized.replace("、", ", ")
    normalized = re.sub(r'\s+', ' ', normalized)

    # "Foo(bar )" -> "Foo (bar)"
    normalized = re.sub(r'(\S)\(', r'\1 (', normalized)
    normalized = re.sub(r'\s+\)', ')', normalized)

    return normalized.strip()


def parse_points(text: str | None) -> int:
    """Parse a point amount such as "+1P", "-1,200 P" or "16".

    Raises:
        ValueError: If no integer can be read from the text
    """
    if text is None:
        raise ValueError("Missing point amount")

    cleaned = fold_fullwidth(text).replace(',', '').replace(' ', '').strip()
    match = _POINTS_RE.match(cleaned)
    if not match:
        raise ValueError(f"Cannot parse points: {text!r}")
    return int(match.group(0))


def month_day_to_date(date_str: str | None, year_hint: int | None = None) -> str:
    """Convert "2月8日" to "YYYY/02/08".

    The page omits the year, so the current calendar year is assumed. A record
    dated 12月31日 scraped in early January therefore lands in the wrong year;
    pass year_hint to override.
    """
    if not date_str:
        return ""

    match = _MONTH_DAY_RE.search(date_str)
    if not match:
        return date_str.strip()

    year = year_hint or datetime.now().year
    month = match.group(1).zfill(2)
    day = match.group(2).zfill(2)
    return f"{year}/{month}/{day}"


def first_line_ymd(date_str: str) -> str:
    """Extract a padded "YYYY/MM/DD" from the first line of a date cell."""
    clean = date_str.strip().split('\n')[0].strip()

    match = _YMD_SLASH_RE.search(clean)
    if match:
        year, month, day = match.groups()
        return f"{year}/{month.zfill(2)}/{day.zfill(2)}"

    return clean
