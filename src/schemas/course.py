"""Course content schemas.

``CourseModule`` and friends describe what the generator must return;
the ``*Record`` models mirror the persisted rows.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuizQuestion(BaseModel):
    """A single multiple-choice question."""

    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1, description="The question text")
    options: List[str] = Field(description="Answer options")
    correct_answer: int = Field(
        alias="correctAnswer", description="Zero-based index into options"
    )
    explanation: Optional[str] = Field(
        default=None, description="Why the correct option is correct"
    )


class Quiz(BaseModel):
    title: str = Field(min_length=1)
    questions: List[QuizQuestion]


class CourseModule(BaseModel):
    """One generated module: a summary and its quiz."""

    title: str = Field(min_length=1, description="Module title")
    summary: str = Field(min_length=1, description="Markdown summary of the module")
    quiz: Quiz


class GeneratedCourse(BaseModel):
    modules: List[CourseModule] = Field(min_length=1)


class CourseTopicRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    title: str
    description: Optional[str] = None
    order_index: int
    created_at: datetime
    updated_at: datetime


class CourseSummaryRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    topic_id: str
    content: str
    created_at: datetime
    updated_at: datetime


class CourseQuizRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    topic_id: str
    title: str
    questions: List[QuizQuestion] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class CourseModuleRecord(BaseModel):
    topic: CourseTopicRecord
    summary: Optional[CourseSummaryRecord] = None
    quiz: Optional[CourseQuizRecord] = None


class CourseResponse(BaseModel):
    state: str = Field(description="none, generating or populated")
    modules: List[CourseModuleRecord]


class GenerateCourseRequest(BaseModel):
    regenerate: bool = False


class UpdateTopicRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class UpdateSummaryRequest(BaseModel):
    content: str = Field(min_length=1)


class UpdateQuizRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    questions: Optional[List[QuizQuestion]] = None
