"""Course content persistence.

Stores generated modules as topic, summary and quiz rows and reads them
back in order.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from core.exceptions import (
    QuizNotFoundError,
    SummaryNotFoundError,
    TopicNotFoundError,
    ValidationError,
)
from models.course import CourseQuizModel, CourseSummaryModel, CourseTopicModel
from schemas.course import CourseModule, QuizQuestion
from utils.transaction import transaction

logger = logging.getLogger(__name__)

COURSE_STATE_NONE = "none"
COURSE_STATE_GENERATING = "generating"
COURSE_STATE_POPULATED = "populated"


def _questions_to_json(questions: Sequence[QuizQuestion]) -> List[Dict[str, Any]]:
    return [q.model_dump(by_alias=True, exclude_none=True) for q in questions]


class CourseManager:
    """Manages course topics, summaries and quizzes using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _add_modules(self, project_id: str, modules: Sequence[CourseModule]) -> None:
        for index, module in enumerate(modules):
            topic = CourseTopicModel(
                project_id=project_id,
                title=module.title,
                description=f"Module {index + 1} of the onboarding course",
                order_index=index,
            )
            self.db.add(topic)
            self.db.flush()
            self.db.add(CourseSummaryModel(topic_id=topic.id, content=module.summary))
            self.db.add(
                CourseQuizModel(
                    topic_id=topic.id,
                    title=module.quiz.title,
                    questions=_questions_to_json(module.quiz.questions),
                )
            )

    def _delete_modules(self, project_id: str) -> None:
        topic_ids = [
            topic_id
            for (topic_id,) in self.db.query(CourseTopicModel.id).filter(
                CourseTopicModel.project_id == project_id
            )
        ]
        if not topic_ids:
            return
        self.db.query(CourseQuizModel).filter(
            CourseQuizModel.topic_id.in_(topic_ids)
        ).delete(synchronize_session=False)
        self.db.query(CourseSummaryModel).filter(
            CourseSummaryModel.topic_id.in_(topic_ids)
        ).delete(synchronize_session=False)
        self.db.query(CourseTopicModel).filter(
            CourseTopicModel.id.in_(topic_ids)
        ).delete(synchronize_session=False)

    def persist_modules(self, project_id: str, modules: Sequence[CourseModule]) -> None:
        """Insert every module as topic, summary and quiz, all or nothing.

        Topics get ``order_index`` equal to the module's position.

        Raises:
            ValidationError: If project_id is missing.
            StoreError: If any insert fails; nothing is kept in that case.
        """
        if not project_id:
            raise ValidationError("project_id is required")
        with transaction(self.db, "persist course modules"):
            self._add_modules(project_id, modules)
        logger.info("Persisted %d course modules for project %s", len(modules), project_id)

    def regenerate(self, project_id: str, modules: Sequence[CourseModule]) -> None:
        """Replace a project's modules in a single transaction."""
        if not project_id:
            raise ValidationError("project_id is required")
        with transaction(self.db, "replace course modules"):
            self._delete_modules(project_id)
            self.db.flush()
            self._add_modules(project_id, modules)
        logger.info("Replaced course with %d modules for project %s", len(modules), project_id)

    def delete_all(self, project_id: str) -> None:
        if not project_id:
            return
        with transaction(self.db, "delete course modules"):
            self._delete_modules(project_id)
        logger.info("Deleted course modules for project %s", project_id)

    def has_modules(self, project_id: str) -> bool:
        return (
            self.db.query(CourseTopicModel.id)
            .filter(CourseTopicModel.project_id == project_id)
            .first()
            is not None
        )

    def fetch_modules(self, project_id: str) -> List[Dict[str, Any]]:
        """Load a project's modules ordered by ``order_index``.

        Summaries and quizzes are matched to topics by ``topic_id``; a topic
        without one gets None in its place.

        Returns:
            List of ``{"topic", "summary", "quiz"}`` dicts.
        """
        if not project_id:
            return []
        topics = (
            self.db.query(CourseTopicModel)
            .filter(CourseTopicModel.project_id == project_id)
            .order_by(CourseTopicModel.order_index.asc())
            .all()
        )
        if not topics:
            return []
        topic_ids = [t.id for t in topics]
        summaries = {
            s.topic_id: s
            for s in self.db.query(CourseSummaryModel).filter(
                CourseSummaryModel.topic_id.in_(topic_ids)
            )
        }
        quizzes = {
            q.topic_id: q
            for q in self.db.query(CourseQuizModel).filter(
                CourseQuizModel.topic_id.in_(topic_ids)
            )
        }
        return [
            {
                "topic": topic,
                "summary": summaries.get(topic.id),
                "quiz": quizzes.get(topic.id),
            }
            for topic in topics
        ]

    def get_topic(self, topic_id: str) -> CourseTopicModel:
        topic = self.db.query(CourseTopicModel).filter(CourseTopicModel.id == topic_id).first()
        if topic is None:
            raise TopicNotFoundError(f"Course topic '{topic_id}' not found")
        return topic

    def get_summary(self, summary_id: str) -> CourseSummaryModel:
        summary = (
            self.db.query(CourseSummaryModel)
            .filter(CourseSummaryModel.id == summary_id)
            .first()
        )
        if summary is None:
            raise SummaryNotFoundError(f"Course summary '{summary_id}' not found")
        return summary

    def get_quiz(self, quiz_id: str) -> CourseQuizModel:
        quiz = self.db.query(CourseQuizModel).filter(CourseQuizModel.id == quiz_id).first()
        if quiz is None:
            raise QuizNotFoundError(f"Course quiz '{quiz_id}' not found")
        return quiz

    def project_id_for_summary(self, summary_id: str) -> str:
        return self.get_topic(self.get_summary(summary_id).topic_id).project_id

    def project_id_for_quiz(self, quiz_id: str) -> str:
        return self.get_topic(self.get_quiz(quiz_id).topic_id).project_id

    def update_topic(
        self,
        topic_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> CourseTopicModel:
        topic = self.get_topic(topic_id)
        with transaction(self.db, "update course topic"):
            if title is not None:
                topic.title = title
            if description is not None:
                topic.description = description
        self.db.refresh(topic)
        logger.info("Updated course topic %s", topic_id)
        return topic

    def update_summary(self, summary_id: str, content: str) -> CourseSummaryModel:
        summary = self.get_summary(summary_id)
        with transaction(self.db, "update course summary"):
            summary.content = content
        self.db.refresh(summary)
        logger.info("Updated course summary %s", summary_id)
        return summary

    def update_quiz(
        self,
        quiz_id: str,
        title: Optional[str] = None,
        questions: Optional[Sequence[QuizQuestion]] = None,
    ) -> CourseQuizModel:
        quiz = self.get_quiz(quiz_id)
        with transaction(self.db, "update course quiz"):
            if title is not None:
                quiz.title = title
            if questions is not None:
                quiz.questions = _questions_to_json(questions)
        self.db.refresh(quiz)
        logger.info("Updated course quiz %s", quiz_id)
        return quiz
