# app/services/analytics_service.py
"""
Scan analytics for a single QR code.
Callers are responsible for authorizing access to the code.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from app.models.scan import Scan

RECENT_WINDOW_DAYS = 30
RECENT_SCAN_LIMIT = 100


def _group_counts(db: Session, qr_code_id: int, column) -> List[Dict[str, Any]]:
    count = func.count(Scan.id)
    rows = (
        db.query(column, count)
        .filter(Scan.qr_code_id == qr_code_id)
        .group_by(column)
        .order_by(desc(count), column)
        .all()
    )
    return [{"name": name or "Unknown", "value": value} for name, value in rows]


def get_qr_analytics(db: Session, qr_code_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Summarize scans for ``qr_code_id``.

    Returns a dict with:
    - totalScans: all scans ever recorded
    - recentScans: scans in the last 30 days, capped at 100
    - scansByDate: YYYY-MM-DD -> count over that capped window only
    - deviceStats / browserStats: [{name, value}] over the full history
    """
    now = now or datetime.utcnow()
    since = now - timedelta(days=RECENT_WINDOW_DAYS)

    total_scans = db.query(func.count(Scan.id)).filter(Scan.qr_code_id == qr_code_id).scalar() or 0

    recent = (
        db.query(Scan.scanned_at)
        .filter(Scan.qr_code_id == qr_code_id, Scan.scanned_at >= since)
        .order_by(Scan.scanned_at.desc())
        .limit(RECENT_SCAN_LIMIT)
        .all()
    )

    scans_by_date: Dict[str, int] = {}
    for (scanned_at,) in recent:
        day = scanned_at.date().isoformat()
        scans_by_date[day] = scans_by_date.get(day, 0) + 1

    return {
        "totalScans": total_scans,
        "recentScans": len(recent),
        "scansByDate": scans_by_date,
        "deviceStats": _group_counts(db, qr_code_id, Scan.device),
        "browserStats": _group_counts(db, qr_code_id, Scan.browser),
    }
