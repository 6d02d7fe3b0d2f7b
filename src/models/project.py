from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text

from .base import Base, new_id, utcnow


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, index=True, default=new_id)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(String, ForeignKey("profiles.user_id"), index=True, nullable=False)
    settings = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
