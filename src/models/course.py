"""Course content database models.

A topic is one ordered module of a project's onboarding course; its summary
and quiz hang off it by ``topic_id``.
"""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from .base import Base, new_id, utcnow


class CourseTopicModel(Base):
    __tablename__ = "course_topics"

    id = Column(String, primary_key=True, index=True, default=new_id)
    project_id = Column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class CourseSummaryModel(Base):
    __tablename__ = "course_summaries"

    id = Column(String, primary_key=True, index=True, default=new_id)
    topic_id = Column(
        String, ForeignKey("course_topics.id", ondelete="CASCADE"), index=True, nullable=False
    )
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class CourseQuizModel(Base):
    __tablename__ = "course_quizzes"

    id = Column(String, primary_key=True, index=True, default=new_id)
    topic_id = Column(
        String, ForeignKey("course_topics.id", ondelete="CASCADE"), index=True, nullable=False
    )
    title = Column(String, nullable=False)
    questions = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
