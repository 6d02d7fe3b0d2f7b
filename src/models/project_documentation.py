from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text

from .base import Base, new_id, utcnow


class ProjectDocumentationModel(Base):
    __tablename__ = "project_documentation"

    id = Column(String, primary_key=True, index=True, default=new_id)
    project_id = Column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
    )
    pr_template = Column(Text, nullable=True)
    code_nomenclature = Column(Text, nullable=True)
    gitflow_docs = Column(Text, nullable=True)
    additional_docs = Column(Text, nullable=True)
    file_attachments = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
