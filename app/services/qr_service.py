# app/services/qr_service.py
"""
QR code use cases scoped to an explicit owner.

Every function takes the caller's user id; ownership is expressed through
UserToCode links, so a code the caller is not linked to behaves as missing.
"""
from __future__ import annotations
import logging
import secrets
import string
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.encryption import encrypt_qr_data
from app.models.qr_code import QRCode, UserToCode
from app.models.scan import Scan
from app.schemas.qr_code import QRCodeCreate, QRCodeUpdate
from app.services.access_service import user_has_dynamic_access
from app.services.exceptions import (
    QRCodeNotFoundError, QRValidationError, DynamicAccessRequiredError
)
from app.services.qr_format import format_qr_data
from app.services.redirect_service import read_field

log = logging.getLogger("qrforge.qr_service")

SHORT_ID_ALPHABET = string.ascii_lowercase + string.digits
SHORT_ID_LENGTH = 6
SHORT_ID_MAX_ATTEMPTS = 10
PRESENTATION_FIELDS = (
    "foreground_color", "background_color", "dots_style", "corner_style",
    "size", "logo", "error_correction",
)


# ────────────────────────────────────────────
# Helpers
# ────────────────────────────────────────────

def generate_short_id(db: Session) -> str:
    """Random base36 id, retried on collision"""
    for _ in range(SHORT_ID_MAX_ATTEMPTS):
        short_id = "".join(secrets.choice(SHORT_ID_ALPHABET) for _ in range(SHORT_ID_LENGTH))
        exists = db.query(QRCode.id).filter(QRCode.short_id == short_id).first()
        if not exists:
            return short_id
    raise RuntimeError("Unable to generate unique short code")


def validate_url(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise QRValidationError("Invalid URL format")
    return url


def build_short_url(short_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL}/qr/{short_id}"


def require_dynamic_access(db: Session, user_id: str) -> None:
    if not user_has_dynamic_access(db, user_id):
        raise DynamicAccessRequiredError("Dynamic access required")


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _store_payload(qr_code: QRCode, content: str, target_url: Optional[str]) -> None:
    """Encrypt both fields; legacy plaintext records are upgraded here."""
    qr_code.content = encrypt_qr_data(content)
    qr_code.target_url = encrypt_qr_data(target_url) if target_url is not None else None
    qr_code.is_encrypted = True


def to_response(qr_code: QRCode) -> Dict[str, Any]:
    """Owner view of a code with decrypted payload fields"""
    target_url = read_field(qr_code, qr_code.target_url)
    return {
        "id": qr_code.id,
        "short_id": qr_code.short_id,
        "short_url": build_short_url(qr_code.short_id),
        "title": qr_code.title,
        "type": qr_code.type,
        "content": read_field(qr_code, qr_code.content),
        "target_url": target_url,
        "is_dynamic": qr_code.is_dynamic,
        "is_active": qr_code.is_active,
        "foreground_color": qr_code.foreground_color,
        "background_color": qr_code.background_color,
        "dots_style": qr_code.dots_style,
        "corner_style": qr_code.corner_style,
        "size": qr_code.size,
        "logo": qr_code.logo,
        "error_correction": qr_code.error_correction,
        "scan_count": qr_code.scan_count,
        "created_at": qr_code.created_at,
        "updated_at": qr_code.updated_at,
    }


# ────────────────────────────────────────────
# Queries
# ────────────────────────────────────────────

def _owned_query(db: Session, user_id: str):
    return db.query(QRCode).join(UserToCode, UserToCode.qr_code_id == QRCode.id).filter(
        UserToCode.user_id == user_id
    )


def get_owned_qr_code(db: Session, user_id: str, qr_code_id: int) -> QRCode:
    qr_code = _owned_query(db, user_id).filter(QRCode.id == qr_code_id).first()
    if not qr_code:
        raise QRCodeNotFoundError(qr_code_id)
    return qr_code


def list_qr_codes(
    db: Session,
    user_id: str,
    search: Optional[str] = None,
    limit: int = 50
) -> Tuple[int, List[QRCode]]:
    """Caller's codes, newest first. Search matches titles only (payloads are encrypted)."""
    query = _owned_query(db, user_id)
    if search:
        query = query.filter(QRCode.title.ilike(f"%{search}%"))
    total = query.count()
    items = query.order_by(QRCode.created_at.desc(), QRCode.id.desc()).limit(limit).all()
    return total, items


def get_recent_scans(db: Session, qr_code_id: int, limit: int = 10) -> List[Scan]:
    return (
        db.query(Scan)
        .filter(Scan.qr_code_id == qr_code_id)
        .order_by(Scan.scanned_at.desc())
        .limit(limit)
        .all()
    )


# ────────────────────────────────────────────
# Commands
# ────────────────────────────────────────────

def create_qr_code(db: Session, user_id: str, data: QRCodeCreate) -> QRCode:
    """
    Create a code owned by ``user_id``.

    Raises:
        QRValidationError: missing data or malformed target URL
        DynamicAccessRequiredError: target_url given without an active subscription
    """
    if not data.data or not data.data.strip():
        raise QRValidationError("data is required")

    target_url = data.target_url or None
    if target_url is not None:
        validate_url(target_url)
        require_dynamic_access(db, user_id)

    content = format_qr_data(data.type, data.data, data.additional_data)

    qr_code = QRCode(
        short_id=generate_short_id(db),
        title=data.title,
        type=data.type.value,
        is_active=True,
        scan_count=0,
        **{field: _enum_value(getattr(data, field)) for field in PRESENTATION_FIELDS},
    )
    _store_payload(qr_code, content, target_url)

    db.add(qr_code)
    db.flush()
    db.add(UserToCode(user_id=user_id, qr_code_id=qr_code.id))
    db.commit()
    db.refresh(qr_code)

    log.info(f"✅ QR code {qr_code.short_id} created for {user_id} (dynamic={target_url is not None})")
    return qr_code


def update_qr_code(db: Session, user_id: str, qr_code_id: int, data: QRCodeUpdate) -> QRCode:
    """
    Apply a partial update.

    Editing a dynamic code, or making a static one dynamic, requires access.
    """
    qr_code = get_owned_qr_code(db, user_id, qr_code_id)
    fields = data.model_fields_set

    current_target = read_field(qr_code, qr_code.target_url)
    content = read_field(qr_code, qr_code.content)

    target_url = current_target
    if "target_url" in fields:
        target_url = data.target_url or None
        if target_url is not None:
            validate_url(target_url)

    if current_target is not None or target_url is not None:
        require_dynamic_access(db, user_id)

    if data.data is not None:
        if not data.data.strip():
            raise QRValidationError("data is required")
        qr_type = data.type or qr_code.type
        content = format_qr_data(qr_type, data.data, data.additional_data)
        qr_code.type = _enum_value(qr_type)
    elif data.type is not None and data.type.value != qr_code.type:
        raise QRValidationError("data is required when changing type")

    if "title" in fields:
        qr_code.title = data.title
    if data.is_active is not None:
        qr_code.is_active = data.is_active
    for field in PRESENTATION_FIELDS:
        value = getattr(data, field)
        if value is not None:
            setattr(qr_code, field, _enum_value(value))

    _store_payload(qr_code, content, target_url)
    db.commit()
    db.refresh(qr_code)

    log.info(f"✅ QR code {qr_code.short_id} updated by {user_id}")
    return qr_code


def delete_qr_code(db: Session, user_id: str, qr_code_id: int) -> None:
    qr_code = get_owned_qr_code(db, user_id, qr_code_id)
    db.delete(qr_code)
    db.commit()
    log.info(f"🗑️ QR code {qr_code_id} deleted by {user_id}")
