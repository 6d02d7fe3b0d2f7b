"""Email invitation database model.

A row stays pending while ``accepted_at`` is null.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String

from .base import Base, new_id, utcnow


class ProjectInvitationModel(Base):
    __tablename__ = "project_invitations"

    id = Column(String, primary_key=True, index=True, default=new_id)
    project_id = Column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    email = Column(String, index=True, nullable=False)
    role = Column(String, nullable=False, default="member")
    invited_by = Column(String, nullable=False)
    token = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
