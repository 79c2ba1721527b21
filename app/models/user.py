# app/models/user.py
"""
Per-user profile fields.
Identity lives with the auth provider; rows are keyed by its user id.
"""
from sqlalchemy import Column, Integer, String
from app.models.base import BaseModel


class UserProfile(BaseModel):
    """Profile settings editable by the user"""
    __tablename__ = "user_profiles"

    user_id = Column(String(255), unique=True, index=True, nullable=False)
    number_of_qr = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<UserProfile {self.user_id}>"
