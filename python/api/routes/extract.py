"""
Extraction API Routes

Runs the site parsers over a submitted page.
"""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from point_extractor import extract

from ..settings import get_settings

router = APIRouter(tags=["extract"])


class ExtractRequest(BaseModel):
    """Page to scan."""

    url: str
    html: str
    options: dict[str, bool] | None = None
    year_hint: int | None = None


class ExtractResponse(BaseModel):
    """Scan result; applicable is False when no parser handles the URL."""

    applicable: bool
    site: str | None
    records: list[dict[str, Any]]
    columns: list[dict[str, str]]
    warnings: list[str]


@router.post("/extract", response_model=ExtractResponse)
def extract_records(payload: ExtractRequest) -> ExtractResponse:
    """Extract point records from page HTML.

    Args:
        payload: URL, HTML and optional toggle overrides

    Returns:
        Records in page order with their display columns
    """
    options = get_settings().extractor_options.merged(payload.options)
    result = extract(payload.url, payload.html, options, year_hint=payload.year_hint)
    return ExtractResponse(**result.to_dict())
