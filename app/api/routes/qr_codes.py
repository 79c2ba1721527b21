# app/api/routes/qr_codes.py
"""
QR code API endpoints.
Handles QR code creation, management, analytics and image rendering.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Optional

from app.db.session import get_db
from app.api.deps import Principal, get_current_principal, require_dynamic_access
from app.schemas.qr_code import (
    QRCodeCreate, QRCodeUpdate, QRCodeResponse, QRCodeDetailResponse,
    QRCodeListResponse, QRCodeDeleteResponse, ScanResponse
)
from app.schemas.analytics import QRAnalyticsResponse
from app.services import qr_service
from app.services.analytics_service import get_qr_analytics
from app.services.exceptions import (
    QRCodeNotFoundError, QRDecryptionError, QRValidationError, DynamicAccessRequiredError
)
from app.services.qr_image import make_qr_png

router = APIRouter()
log = logging.getLogger("qrforge.api.qr")


def _translate(e: Exception) -> HTTPException:
    """Map service errors onto HTTP errors"""
    if isinstance(e, QRCodeNotFoundError):
        return HTTPException(404, "QR code not found")
    if isinstance(e, QRValidationError):
        return HTTPException(400, str(e))
    if isinstance(e, DynamicAccessRequiredError):
        return HTTPException(402, "Dynamic access required")
    if isinstance(e, QRDecryptionError):
        return HTTPException(500, "Error processing QR code")
    return HTTPException(500, "Failed to process QR code")


# ────────────────────────────────────────────
# QR Code Management
# ────────────────────────────────────────────

@router.post("", response_model=QRCodeResponse, status_code=201)
def create_qr_code(
    data: QRCodeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """
    Create a QR code.

    **Static codes** encode the formatted payload directly.
    **Dynamic codes** (``targetUrl`` set) encode a short URL that redirects to
    the target and can be edited later. They require an active subscription.

    **Types:** url, text, wifi, email, phone, sms. Type-specific fields go in
    ``additionalData`` (security/password, subject/body, message).
    """
    try:
        qr_code = qr_service.create_qr_code(db, principal.user_id, data)
        return qr_service.to_response(qr_code)
    except (QRValidationError, DynamicAccessRequiredError) as e:
        raise _translate(e)
    except Exception as e:
        db.rollback()
        log.error(f"❌ Failed to create QR code: {e}")
        raise HTTPException(500, "Failed to create QR code")


@router.get("", response_model=QRCodeListResponse)
def list_qr_codes(
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """List the caller's QR codes, newest first."""
    try:
        total, items = qr_service.list_qr_codes(db, principal.user_id, search=search, limit=limit)
        return QRCodeListResponse(
            total=total,
            items=[qr_service.to_response(qr) for qr in items]
        )
    except QRDecryptionError as e:
        raise _translate(e)
    except Exception as e:
        log.error(f"❌ Failed to fetch QR codes: {e}")
        raise HTTPException(500, "Failed to fetch QR codes")


@router.get("/{qr_code_id}", response_model=QRCodeDetailResponse)
def get_qr_code(
    qr_code_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Get one QR code with its 10 most recent scans."""
    try:
        qr_code = qr_service.get_owned_qr_code(db, principal.user_id, qr_code_id)
        scans = qr_service.get_recent_scans(db, qr_code.id)
        return QRCodeDetailResponse(
            **qr_service.to_response(qr_code),
            recent_scans=[ScanResponse.model_validate(scan) for scan in scans]
        )
    except (QRCodeNotFoundError, QRDecryptionError) as e:
        raise _translate(e)
    except Exception as e:
        log.error(f"❌ Failed to fetch QR code {qr_code_id}: {e}")
        raise HTTPException(500, "Failed to fetch QR code")


@router.put("/{qr_code_id}", response_model=QRCodeResponse)
def update_qr_code(
    qr_code_id: int,
    data: QRCodeUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """
    Update a QR code.

    For dynamic codes, changing ``targetUrl`` takes effect on the next scan;
    the printed symbol stays the same.
    """
    try:
        qr_code = qr_service.update_qr_code(db, principal.user_id, qr_code_id, data)
        return qr_service.to_response(qr_code)
    except (QRCodeNotFoundError, QRValidationError, DynamicAccessRequiredError, QRDecryptionError) as e:
        db.rollback()
        raise _translate(e)
    except Exception as e:
        db.rollback()
        log.error(f"❌ Failed to update QR code {qr_code_id}: {e}")
        raise HTTPException(500, "Failed to update QR code")


@router.delete("/{qr_code_id}", response_model=QRCodeDeleteResponse)
def delete_qr_code(
    qr_code_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Delete a QR code together with its scans. The code stops resolving."""
    try:
        qr_service.delete_qr_code(db, principal.user_id, qr_code_id)
        return QRCodeDeleteResponse(id=qr_code_id)
    except QRCodeNotFoundError as e:
        raise _translate(e)
    except Exception as e:
        db.rollback()
        log.error(f"❌ Failed to delete QR code {qr_code_id}: {e}")
        raise HTTPException(500, "Failed to delete QR code")


# ────────────────────────────────────────────
# Analytics & Image
# ────────────────────────────────────────────

@router.get("/{qr_code_id}/analytics", response_model=QRAnalyticsResponse)
def get_analytics(
    qr_code_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_dynamic_access)
):
    """
    Scan analytics for a QR code.

    ``scansByDate`` covers the last 30 days (at most 100 scans); device and
    browser breakdowns cover the full history.
    """
    try:
        qr_code = qr_service.get_owned_qr_code(db, principal.user_id, qr_code_id)
        return get_qr_analytics(db, qr_code.id)
    except QRCodeNotFoundError as e:
        raise _translate(e)
    except Exception as e:
        log.error(f"❌ Failed to fetch analytics for {qr_code_id}: {e}")
        raise HTTPException(500, "Failed to fetch analytics")


@router.get("/{qr_code_id}/image")
def get_qr_image(
    qr_code_id: int,
    size: Optional[int] = Query(None, ge=64, le=2048),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Render the code as PNG: the short URL for dynamic codes, the content otherwise."""
    try:
        qr_code = qr_service.get_owned_qr_code(db, principal.user_id, qr_code_id)
        view = qr_service.to_response(qr_code)
        payload = view["short_url"] if view["is_dynamic"] else view["content"]
        png = make_qr_png(
            payload,
            size=size or qr_code.size,
            error_correction=qr_code.error_correction,
            foreground_color=qr_code.foreground_color,
            background_color=qr_code.background_color,
        )
        return Response(content=png, media_type="image/png")
    except (QRCodeNotFoundError, QRDecryptionError) as e:
        raise _translate(e)
    except Exception as e:
        log.error(f"❌ Failed to render QR code {qr_code_id}: {e}")
        raise HTTPException(500, "Failed to render QR code")
