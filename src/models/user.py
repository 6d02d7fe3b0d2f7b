"""User profile database model.

This module defines the profile (user) database model using SQLAlchemy.
"""

from sqlalchemy import Column, DateTime, String

from .base import Base, new_id, utcnow


class UserModel(Base):
    """User profile database model."""

    __tablename__ = "profiles"

    user_id = Column(String, primary_key=True, index=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
