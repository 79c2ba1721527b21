# app/schemas/analytics.py
"""Pydantic schemas for scan analytics."""
from typing import Dict, List

from app.schemas.base import CamelModel


class StatEntry(CamelModel):
    name: str
    value: int


class QRAnalyticsResponse(CamelModel):
    """
    Scan summary for one QR code.

    scans_by_date covers the capped 30-day window only, so it does not
    necessarily sum to total_scans. Device and browser stats cover all scans.
    """
    total_scans: int
    recent_scans: int
    scans_by_date: Dict[str, int]
    device_stats: List[StatEntry]
    browser_stats: List[StatEntry]
