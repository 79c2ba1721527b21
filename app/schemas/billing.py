# app/schemas/billing.py
"""
Pydantic schemas for access checks, checkout, payments and user details.
"""
from typing import Optional, List, Any, Dict
from pydantic import Field
from datetime import datetime

from app.schemas.base import CamelModel


class AccessCheckResponse(CamelModel):
    allowed: bool


class CheckoutResponse(CamelModel):
    url: str


class CancelSubscriptionResponse(CamelModel):
    message: str = "Subscription cancellation initiated"
    result: Optional[Dict[str, Any]] = None


class DynamicAccessResponse(CamelModel):
    """Caller's subscription record"""
    user_id: str
    status: str
    subscription_id: Optional[str] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool
    provider: str


class UserProfileResponse(CamelModel):
    user_id: str
    number_of_qr: int = Field(alias="numberOfQR")


class UserDetailsResponse(CamelModel):
    success: bool = True
    message: str = "User fetched successfully"
    data: Optional[DynamicAccessResponse] = None
    profile: Optional[UserProfileResponse] = None


class UserDetailsUpdate(CamelModel):
    number_of_qr: Optional[int] = Field(default=None, alias="numberOfQR")


class TransactionResponse(CamelModel):
    id: int
    user_id: str
    invoice_id: str
    amount: int
    status: str
    payment_date: datetime


class PaymentsResponse(CamelModel):
    success: bool = True
    message: str = "Payment fetched successfully"
    data: List[TransactionResponse]


class WebhookAck(CamelModel):
    received: bool = True
