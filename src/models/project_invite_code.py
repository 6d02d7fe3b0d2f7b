from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from .base import Base, new_id, utcnow


class ProjectInviteCodeModel(Base):
    __tablename__ = "project_invite_codes"

    id = Column(String, primary_key=True, index=True, default=new_id)
    project_id = Column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    code = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False, default="member")
    created_by = Column(String, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    uses_left = Column(Integer, nullable=True)  # None means unlimited
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
