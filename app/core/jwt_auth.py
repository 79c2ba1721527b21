# app/core/jwt_auth.py
"""
JWT Authentication for API access.
Validates bearer tokens issued by the identity provider.
"""
import jwt
from typing import Optional, Dict, Any
from fastapi import HTTPException

from app.core.config import settings


class JWTAuth:
    """JWT Authentication handler"""

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode and validate JWT token.

        Args:
            token: JWT token string

        Returns:
            Decoded token payload

        Raises:
            HTTPException: If token is invalid or expired
        """
        try:
            # PyJWT checks "exp" itself
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=401,
                detail="Token has expired"
            )
        except jwt.InvalidTokenError:
            raise HTTPException(
                status_code=401,
                detail="Invalid token"
            )

    @staticmethod
    def get_user_id(payload: Dict[str, Any]) -> Optional[str]:
        """
        Extract user_id from JWT payload.

        Args:
            payload: Decoded JWT payload

        Returns:
            User ID or None
        """
        user_id = (
            payload.get('user_id') or
            payload.get('sub') or
            payload.get('id')
        )
        return str(user_id) if user_id else None

    @staticmethod
    def create_token(user_id: str, **claims: Any) -> str:
        """Issue a token for ``user_id`` (used by scripts and tests)."""
        payload = {"sub": user_id, **claims}
        return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
