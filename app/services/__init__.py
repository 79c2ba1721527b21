# app/services/__init__.py
"""
Service layer.
Business logic lives here; routes only translate errors into HTTP responses.
"""
from app.services.access_service import user_has_dynamic_access
from app.services.analytics_service import get_qr_analytics
from app.services.qr_format import format_qr_data
from app.services.redirect_service import resolve_short_id, ScanMeta, Resolution

__all__ = [
    'user_has_dynamic_access',
    'get_qr_analytics',
    'format_qr_data',
    'resolve_short_id',
    'ScanMeta',
    'Resolution',
]
