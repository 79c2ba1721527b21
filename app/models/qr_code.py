# app/models/qr_code.py
"""
QR code models.
A code with a target_url is dynamic (redirects); without one it displays its content.
"""
from sqlalchemy import Column, String, Text, Integer, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class QRCode(BaseModel):
    """Store QR codes and their presentation settings"""
    __tablename__ = "qr_codes"

    # Identification
    short_id = Column(String(32), unique=True, index=True, nullable=False)
    title = Column(String(255), nullable=True)
    type = Column(String(20), nullable=False, default="url")  # url|text|wifi|email|phone|sms

    # Payload (ciphertext envelopes when is_encrypted is set)
    content = Column(Text, nullable=False)
    target_url = Column(Text, nullable=True)
    is_encrypted = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)

    # Presentation (opaque to the resolver)
    foreground_color = Column(String(20), default="#000000", nullable=False)
    background_color = Column(String(20), default="#ffffff", nullable=False)
    dots_style = Column(String(30), default="square", nullable=False)
    corner_style = Column(String(30), default="square", nullable=False)
    size = Column(Integer, default=256, nullable=False)
    logo = Column(Text, nullable=True)
    error_correction = Column(String(1), default="M", nullable=False)

    scan_count = Column(Integer, default=0, nullable=False)

    scans = relationship("Scan", back_populates="qr_code", cascade="all, delete-orphan")
    owners = relationship("UserToCode", back_populates="qr_code", cascade="all, delete-orphan")

    @property
    def is_dynamic(self) -> bool:
        return self.target_url is not None

    def __repr__(self):
        return f"<QRCode {self.short_id} ({self.type})>"


class UserToCode(BaseModel):
    """Many-to-many link between users and the QR codes they manage"""
    __tablename__ = "user_qr_codes"
    __table_args__ = (
        UniqueConstraint("user_id", "qr_code_id", name="uq_user_qr_code"),
    )

    user_id = Column(String(255), index=True, nullable=False)
    qr_code_id = Column(Integer, ForeignKey("qr_codes.id", ondelete="CASCADE"), index=True, nullable=False)

    qr_code = relationship("QRCode", back_populates="owners")

    def __repr__(self):
        return f"<UserToCode {self.user_id} -> {self.qr_code_id}>"
