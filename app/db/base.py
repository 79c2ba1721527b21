"""Import all models for Alembic"""
from app.models.base import Base

from app.models.qr_code import QRCode, UserToCode
from app.models.scan import Scan
from app.models.billing import DynamicAccess, Transaction
from app.models.user import UserProfile

__all__ = ["Base"]
