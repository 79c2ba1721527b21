# app/api/deps.py
"""
API dependencies for authentication and access checks.
The resolved Principal is passed explicitly into every service call.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.jwt_auth import JWTAuth
from app.db.session import get_db
from app.services.access_service import user_has_dynamic_access

# Security scheme (auto_error off so we can return our own 401)
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller"""
    user_id: str
    auth_type: str = "jwt"


# ────────────────────────────────────────────
# Authentication
# ────────────────────────────────────────────

def get_optional_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Principal]:
    """
    Resolve the caller if possible.

    Priority:
    1. JWT Bearer token
    2. X-User-Id header (only when ALLOW_DEV_AUTH is enabled)
    """
    if credentials and credentials.credentials:
        payload = JWTAuth.decode_token(credentials.credentials)
        user_id = JWTAuth.get_user_id(payload)
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has no subject"
            )
        return Principal(user_id=user_id, auth_type="jwt")

    if settings.ALLOW_DEV_AUTH:
        user_id = request.headers.get("x-user-id")
        if user_id:
            return Principal(user_id=user_id, auth_type="development")

    return None


def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal)
) -> Principal:
    """Dependency to require an authenticated caller"""
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )
    return principal


# ────────────────────────────────────────────
# Paid access
# ────────────────────────────────────────────

def require_dynamic_access(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
) -> Principal:
    """Dependency for routes that need an active subscription"""
    if not user_has_dynamic_access(db, principal.user_id):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Dynamic access required"
        )
    return principal
