# app/models/billing.py
"""
Billing models written by the Polar webhook handler.
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime
from app.models.base import BaseModel


class DynamicAccess(BaseModel):
    """Subscription state per user; gates dynamic QR features"""
    __tablename__ = "dynamic_access"

    user_id = Column(String(255), unique=True, index=True, nullable=False)
    status = Column(String(50), nullable=False)  # only "active" grants access
    subscription_id = Column(String(255), nullable=True)
    current_period_end = Column(DateTime, nullable=True)
    cancel_at_period_end = Column(Boolean, default=False, nullable=False)
    provider = Column(String(50), default="polar", nullable=False)

    def __repr__(self):
        return f"<DynamicAccess {self.user_id} - {self.status}>"


class Transaction(BaseModel):
    """One paid invoice"""
    __tablename__ = "transactions"

    user_id = Column(String(255), index=True, nullable=False)
    invoice_id = Column(String(255), unique=True, index=True, nullable=False)
    amount = Column(Integer, default=0, nullable=False)  # minor units
    status = Column(String(50), default="paid", nullable=False)
    payment_date = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Transaction {self.invoice_id} - {self.amount}>"
