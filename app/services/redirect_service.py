# app/services/redirect_service.py
"""
Resolves a short identifier to a redirect target or inline content,
recording a scan along the way.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from app.core.encryption import EncryptionError, decrypt_qr_data
from app.models.qr_code import QRCode
from app.models.scan import Scan
from app.services.exceptions import QRCodeNotFoundError, QRDecryptionError
from app.services.user_agent import classify_user_agent

log = logging.getLogger("qrforge.redirect")

REDIRECT = "redirect"
CONTENT = "content"


@dataclass
class ScanMeta:
    """Request metadata captured for a scan"""
    user_agent: str = ""
    ip_address: Optional[str] = None

    @classmethod
    def from_headers(cls, headers) -> "ScanMeta":
        """Forwarded-for (first hop) wins over X-Real-IP"""
        forwarded = headers.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip() or None
        else:
            ip_address = headers.get("x-real-ip") or None
        return cls(user_agent=headers.get("user-agent") or "", ip_address=ip_address)


@dataclass
class Resolution:
    kind: str  # REDIRECT or CONTENT
    value: str
    short_id: str
    title: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.kind == REDIRECT


def _decrypt_field(short_id: str, value: Optional[str], is_encrypted: bool) -> Optional[str]:
    if value is None or not is_encrypted:
        return value
    try:
        return decrypt_qr_data(value)
    except EncryptionError as e:
        log.error(f"❌ Failed to decrypt QR code {short_id}: {e}")
        raise QRDecryptionError("Error processing QR code")


def read_field(qr_code: QRCode, value: Optional[str]) -> Optional[str]:
    """Return a stored field as plaintext, decrypting only encrypted records."""
    return _decrypt_field(qr_code.short_id, value, qr_code.is_encrypted)


def record_scan(db: Session, qr_code: QRCode, meta: ScanMeta) -> bool:
    """
    Insert a scan row and bump the counter.

    Best-effort: failures are rolled back and only logged. Must run before
    any other pending writes in the session.
    """
    info = classify_user_agent(meta.user_agent)
    qr_code_id, short_id = qr_code.id, qr_code.short_id
    try:
        db.add(Scan(
            qr_code_id=qr_code_id,
            user_agent=meta.user_agent,
            ip_address=meta.ip_address,
            device=info.device,
            browser=info.browser,
            os=info.os,
            country="Unknown",
            city="Unknown",
        ))
        # Single UPDATE so concurrent scans never lose increments
        db.query(QRCode).filter(QRCode.id == qr_code_id).update(
            {QRCode.scan_count: QRCode.scan_count + 1},
            synchronize_session=False
        )
        db.commit()
        return True
    except Exception as e:
        log.error(f"❌ Error logging scan for {short_id}: {e}")
        db.rollback()
        return False


def resolve_short_id(db: Session, short_id: str, meta: ScanMeta) -> Resolution:
    """
    Resolve ``short_id``.

    Everything the answer needs is read before the scan is recorded; the
    scan commit or rollback expires ``qr_code``.

    Raises:
        QRCodeNotFoundError: unknown or inactive code (no scan recorded)
        QRDecryptionError: the destination or content could not be decrypted
    """
    qr_code = db.query(QRCode).filter(QRCode.short_id == short_id).first()
    if not qr_code or not qr_code.is_active:
        raise QRCodeNotFoundError(short_id)

    title = qr_code.title
    target_url = qr_code.target_url
    content = qr_code.content
    is_encrypted = qr_code.is_encrypted

    record_scan(db, qr_code, meta)

    if target_url is not None:
        return Resolution(REDIRECT, _decrypt_field(short_id, target_url, is_encrypted), short_id, title)

    return Resolution(CONTENT, _decrypt_field(short_id, content, is_encrypted), short_id, title)
