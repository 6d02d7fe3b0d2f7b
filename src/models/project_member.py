from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint

from .base import Base, new_id, utcnow


class ProjectMemberModel(Base):
    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
    )

    id = Column(String, primary_key=True, index=True, default=new_id)
    project_id = Column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(
        String, ForeignKey("profiles.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    role = Column(String, nullable=False, default="member")  # owner/admin/member/viewer
    invited_by = Column(String, nullable=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
