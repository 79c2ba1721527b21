# app/services/access_service.py
"""Dynamic-access gate backed by the subscription table."""
from typing import Optional

from sqlalchemy.orm import Session

from app.models.billing import DynamicAccess

ACTIVE_STATUS = "active"


def get_dynamic_access(db: Session, user_id: Optional[str]) -> Optional[DynamicAccess]:
    if not user_id:
        return None
    return db.query(DynamicAccess).filter(DynamicAccess.user_id == user_id).first()


def user_has_dynamic_access(db: Session, user_id: Optional[str]) -> bool:
    """
    True only when the user's subscription status is exactly "active".
    cancel_at_period_end and current_period_end do not affect the answer.
    """
    access = get_dynamic_access(db, user_id)
    if access is None:
        return False
    return access.status == ACTIVE_STATUS
