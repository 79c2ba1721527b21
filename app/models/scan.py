# app/models/scan.py
"""
Scan events recorded each time a short identifier is resolved.
Rows are insert-only.
"""
from datetime import datetime
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class Scan(BaseModel):
    """One resolution of a QR code"""
    __tablename__ = "qr_scans"

    qr_code_id = Column(Integer, ForeignKey("qr_codes.id", ondelete="CASCADE"), index=True, nullable=False)
    scanned_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    user_agent = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)

    # Classified from the user agent at insert time, never recomputed
    device = Column(String(20), nullable=True)   # Mobile|Desktop
    browser = Column(String(20), nullable=True)  # Chrome|Firefox|Safari|Other
    os = Column(String(20), nullable=True)

    # Geolocation is not resolved
    country = Column(String(100), nullable=True, default="Unknown")
    city = Column(String(100), nullable=True, default="Unknown")

    qr_code = relationship("QRCode", back_populates="scans")

    def __repr__(self):
        return f"<Scan {self.qr_code_id} @ {self.scanned_at}>"
