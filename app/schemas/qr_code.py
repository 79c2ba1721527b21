# app/schemas/qr_code.py
"""
Pydantic schemas for the QR code API.
"""
from pydantic import Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from app.schemas.base import CamelModel


# ────────────────────────────────────────────
# Enums
# ────────────────────────────────────────────

class QRType(str, Enum):
    """Payload kinds a QR code can carry"""
    URL = "url"
    TEXT = "text"
    WIFI = "wifi"
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"


class ErrorCorrection(str, Enum):
    """QR error correction levels"""
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"


# ────────────────────────────────────────────
# QR Code Create/Update Schemas
# ────────────────────────────────────────────

class AdditionalData(CamelModel):
    """Type-specific auxiliary fields"""
    security: Optional[str] = None   # wifi
    password: Optional[str] = None   # wifi
    subject: Optional[str] = None    # email
    body: Optional[str] = None       # email
    message: Optional[str] = None    # sms


class QRCodeCreate(CamelModel):
    """Create a QR code. Supplying target_url makes it dynamic."""
    title: Optional[str] = Field(default=None, max_length=255)
    type: QRType = QRType.URL
    data: str = Field(default="", max_length=4000, description="Raw payload before formatting")
    target_url: Optional[str] = Field(default=None, description="Redirect destination for dynamic codes")
    additional_data: Optional[AdditionalData] = None

    foreground_color: str = Field(default="#000000", max_length=20)
    background_color: str = Field(default="#ffffff", max_length=20)
    dots_style: str = Field(default="square", max_length=30)
    corner_style: str = Field(default="square", max_length=30)
    size: int = Field(default=256, ge=64, le=2048)
    logo: Optional[str] = None
    error_correction: ErrorCorrection = ErrorCorrection.M

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Spring menu",
                "type": "url",
                "data": "example.com/menu",
                "targetUrl": "https://example.com/menu/spring",
                "foregroundColor": "#000000",
                "backgroundColor": "#ffffff",
                "errorCorrection": "M"
            }
        }


class QRCodeUpdate(CamelModel):
    """Partial update; send targetUrl null to turn a dynamic code static"""
    title: Optional[str] = Field(default=None, max_length=255)
    type: Optional[QRType] = None
    data: Optional[str] = Field(default=None, max_length=4000)
    target_url: Optional[str] = None
    additional_data: Optional[AdditionalData] = None
    is_active: Optional[bool] = None

    foreground_color: Optional[str] = Field(default=None, max_length=20)
    background_color: Optional[str] = Field(default=None, max_length=20)
    dots_style: Optional[str] = Field(default=None, max_length=30)
    corner_style: Optional[str] = Field(default=None, max_length=30)
    size: Optional[int] = Field(default=None, ge=64, le=2048)
    logo: Optional[str] = None
    error_correction: Optional[ErrorCorrection] = None


# ────────────────────────────────────────────
# Response Schemas
# ────────────────────────────────────────────

class ScanResponse(CamelModel):
    """Single scan event"""
    id: int
    scanned_at: datetime
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None


class QRCodeResponse(CamelModel):
    """QR code as seen by its owner (decrypted)"""
    id: int
    short_id: str
    short_url: str
    title: Optional[str] = None
    type: str
    content: str
    target_url: Optional[str] = None
    is_dynamic: bool
    is_active: bool
    foreground_color: str
    background_color: str
    dots_style: str
    corner_style: str
    size: int
    logo: Optional[str] = None
    error_correction: str
    scan_count: int
    created_at: datetime
    updated_at: datetime


class QRCodeDetailResponse(QRCodeResponse):
    """QR code with its most recent scans"""
    recent_scans: List[ScanResponse] = []


class QRCodeListResponse(CamelModel):
    """List of the caller's QR codes"""
    total: int
    items: List[QRCodeResponse]


class QRCodeDeleteResponse(CamelModel):
    """Response after deleting QR code"""
    ok: bool = True
    message: str = "QR code deleted successfully"
    id: int
