# app/api/routes/billing.py
"""
Billing endpoints: access checks, Polar checkout, cancellation,
payment history and user details.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.db.session import get_db
from app.api.deps import Principal, get_current_principal
from app.core.logging_config import get_billing_logger
from app.models.billing import Transaction
from app.models.user import UserProfile
from app.schemas.billing import (
    AccessCheckResponse, CheckoutResponse, CancelSubscriptionResponse,
    PaymentsResponse, TransactionResponse, UserDetailsResponse,
    UserDetailsUpdate, DynamicAccessResponse, UserProfileResponse
)
from app.services.access_service import get_dynamic_access, user_has_dynamic_access
from app.services.exceptions import PolarAPIError
from app.services.polar_client import PolarClient, get_polar_client

router = APIRouter()
billing_log = get_billing_logger()


# ────────────────────────────────────────────
# Access
# ────────────────────────────────────────────

@router.get("/access-check", response_model=AccessCheckResponse)
def access_check(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
):
    """Whether ``userId`` currently holds an active subscription."""
    if not user_id:
        raise HTTPException(400, "Missing userId")
    try:
        return AccessCheckResponse(allowed=user_has_dynamic_access(db, user_id))
    except Exception as e:
        billing_log.error(f"❌ Access check failed: {e}")
        raise HTTPException(500, "Internal server error")


# ────────────────────────────────────────────
# Polar
# ────────────────────────────────────────────

@router.post("/polar/checkout", response_model=CheckoutResponse)
def create_checkout(
    principal: Principal = Depends(get_current_principal),
    polar: PolarClient = Depends(get_polar_client)
):
    """Create a Polar checkout session for the caller and return its URL."""
    try:
        return CheckoutResponse(url=polar.create_checkout(principal.user_id))
    except PolarAPIError:
        raise HTTPException(500, "Failed to create checkout session")


@router.post("/cancelSubscription", response_model=CancelSubscriptionResponse)
def cancel_subscription(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    polar: PolarClient = Depends(get_polar_client)
):
    """
    Cancel the caller's subscription at the end of the current period.
    Access stays active until Polar reports a new status.
    """
    access = get_dynamic_access(db, principal.user_id)
    if not access or not access.subscription_id:
        raise HTTPException(404, "No subscription found")

    try:
        result = polar.cancel_subscription(access.subscription_id)
        access.cancel_at_period_end = True
        db.commit()
        return CancelSubscriptionResponse(result=result)
    except PolarAPIError:
        db.rollback()
        raise HTTPException(500, "Failed to cancel subscription")
    except Exception as e:
        db.rollback()
        billing_log.error(f"❌ Cancel subscription error: {e}")
        raise HTTPException(500, "Internal server error")


# ────────────────────────────────────────────
# Payments & User details
# ────────────────────────────────────────────

@router.get("/payments", response_model=PaymentsResponse)
def list_payments(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Caller's recorded transactions, newest first."""
    transactions = db.query(Transaction).filter(
        Transaction.user_id == principal.user_id
    ).order_by(Transaction.payment_date.desc()).all()

    return PaymentsResponse(
        data=[TransactionResponse.model_validate(t) for t in transactions]
    )


@router.get("/userDetails", response_model=UserDetailsResponse)
def get_user_details(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Caller's subscription record (null when none) and profile."""
    access = get_dynamic_access(db, principal.user_id)
    profile = db.query(UserProfile).filter(UserProfile.user_id == principal.user_id).first()

    return UserDetailsResponse(
        data=DynamicAccessResponse.model_validate(access) if access else None,
        profile=UserProfileResponse.model_validate(profile) if profile else None
    )


@router.put("/userDetails", response_model=UserDetailsResponse)
def update_user_details(
    data: UserDetailsUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal)
):
    """Update the caller's QR quota counter."""
    if data.number_of_qr is None:
        raise HTTPException(400, "numberOfQR is required")

    try:
        profile = db.query(UserProfile).filter(UserProfile.user_id == principal.user_id).first()
        if not profile:
            profile = UserProfile(user_id=principal.user_id)
            db.add(profile)
        profile.number_of_qr = data.number_of_qr
        db.commit()
        db.refresh(profile)
    except Exception as e:
        db.rollback()
        billing_log.error(f"❌ Failed to update user details: {e}")
        raise HTTPException(500, "Failed to update user details")

    access = get_dynamic_access(db, principal.user_id)
    return UserDetailsResponse(
        message="User updated successfully",
        data=DynamicAccessResponse.model_validate(access) if access else None,
        profile=UserProfileResponse.model_validate(profile)
    )
