"""Course content routes.

Members read a project's course; admins generate, edit and delete it.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from api.errors import http_error
from api.routes.auth import get_current_user
from core.dependencies import (
    CourseGeneratorDep,
    CourseManagerDep,
    ProjectManagerDep,
    RequestGuardDep,
)
from core.exceptions import LLMError, OnboardingError
from generators.CourseGenerator import placeholder_modules
from schemas.course import (
    CourseModuleRecord,
    CourseQuizRecord,
    CourseResponse,
    CourseSummaryRecord,
    CourseTopicRecord,
    GenerateCourseRequest,
    UpdateQuizRequest,
    UpdateSummaryRequest,
    UpdateTopicRequest,
)
from schemas.user import User
from utils.course_manager import (
    COURSE_STATE_GENERATING,
    COURSE_STATE_NONE,
    COURSE_STATE_POPULATED,
    CourseManager,
)
from utils.project_manager import ProjectManager
from utils.request_guard import RequestGuard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects/{project_id}/course", tags=["Course"])


def _generation_key(project_id: str) -> tuple:
    return (project_id, "course")


def _course_response(
    project_id: str, courses: CourseManager, guard: RequestGuard
) -> CourseResponse:
    modules = courses.fetch_modules(project_id)
    if guard.is_held(_generation_key(project_id)):
        state = COURSE_STATE_GENERATING
    elif modules:
        state = COURSE_STATE_POPULATED
    else:
        state = COURSE_STATE_NONE
    return CourseResponse(
        state=state,
        modules=[
            CourseModuleRecord(
                topic=CourseTopicRecord.model_validate(m["topic"]),
                summary=CourseSummaryRecord.model_validate(m["summary"]) if m["summary"] else None,
                quiz=CourseQuizRecord.model_validate(m["quiz"]) if m["quiz"] else None,
            )
            for m in modules
        ],
    )


def _require(projects: ProjectManager, project_id: str, user_id: str, admin: bool) -> None:
    projects.get_project(project_id)
    if admin:
        projects.require_admin(
            project_id, user_id, "Unauthorized: Only project admins can manage the course"
        )
    else:
        projects.require_member(project_id, user_id)


@router.get("", response_model=CourseResponse, summary="Get course modules")
def get_course(
    project_id: str,
    projects: ProjectManagerDep,
    courses: CourseManagerDep,
    guard: RequestGuardDep,
    current_user: User = Depends(get_current_user),
) -> CourseResponse:
    try:
        _require(projects, project_id, current_user.user_id, admin=False)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return _course_response(project_id, courses, guard)


@router.post("/generate", response_model=CourseResponse, summary="Generate the course")
async def generate_course(
    project_id: str,
    projects: ProjectManagerDep,
    courses: CourseManagerDep,
    guard: RequestGuardDep,
    generator: CourseGeneratorDep,
    req: Optional[GenerateCourseRequest] = Body(default=None),
    current_user: User = Depends(get_current_user),
) -> CourseResponse:
    """Generate modules with the LLM and store them.

    If the LLM cannot be reached the fixed placeholder modules are stored
    instead. A reply that cannot be parsed is reported as 502 and nothing
    is stored.

    Raises:
        HTTPException: 409 if the course already has modules and
            ``regenerate`` is not set, or if a generation is already running.
    """
    regenerate = bool(req and req.regenerate)
    try:
        _require(projects, project_id, current_user.user_id, admin=True)
        if courses.has_modules(project_id) and not regenerate:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Course modules already exist; set regenerate to replace them",
            )
        project = projects.get_project(project_id)
        doc = projects.get_documentation(project_id)
        documentation = {
            "pr_template": doc.pr_template if doc else None,
            "code_nomenclature": doc.code_nomenclature if doc else None,
            "gitflow_docs": doc.gitflow_docs if doc else None,
            "additional_docs": doc.additional_docs if doc else None,
        }

        with guard.hold(_generation_key(project_id)):
            modules = None
            if generator is not None:
                try:
                    course = await generator.generate(
                        project.name, project.description, documentation
                    )
                    modules = course.modules
                except LLMError as e:
                    logger.warning(
                        "Course generation failed for project %s, using placeholder modules: %s",
                        project_id,
                        e,
                    )
            if modules is None:
                modules = placeholder_modules(project.name)

            if regenerate:
                courses.regenerate(project_id, modules)
            else:
                courses.persist_modules(project_id, modules)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return _course_response(project_id, courses, guard)


@router.delete("", summary="Delete all course modules")
def delete_course(
    project_id: str,
    projects: ProjectManagerDep,
    courses: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> dict:
    try:
        _require(projects, project_id, current_user.user_id, admin=True)
        courses.delete_all(project_id)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return {"success": True}


@router.patch(
    "/topics/{topic_id}", response_model=CourseTopicRecord, summary="Update a topic"
)
def update_topic(
    project_id: str,
    topic_id: str,
    req: UpdateTopicRequest,
    projects: ProjectManagerDep,
    courses: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseTopicRecord:
    try:
        _require(
            projects, courses.get_topic(topic_id).project_id, current_user.user_id, admin=True
        )
        topic = courses.update_topic(topic_id, title=req.title, description=req.description)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return CourseTopicRecord.model_validate(topic)


@router.patch(
    "/summaries/{summary_id}",
    response_model=CourseSummaryRecord,
    summary="Update a summary",
)
def update_summary(
    project_id: str,
    summary_id: str,
    req: UpdateSummaryRequest,
    projects: ProjectManagerDep,
    courses: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseSummaryRecord:
    try:
        _require(
            projects,
            courses.project_id_for_summary(summary_id),
            current_user.user_id,
            admin=True,
        )
        summary = courses.update_summary(summary_id, req.content)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return CourseSummaryRecord.model_validate(summary)


@router.patch(
    "/quizzes/{quiz_id}", response_model=CourseQuizRecord, summary="Update a quiz"
)
def update_quiz(
    project_id: str,
    quiz_id: str,
    req: UpdateQuizRequest,
    projects: ProjectManagerDep,
    courses: CourseManagerDep,
    current_user: User = Depends(get_current_user),
) -> CourseQuizRecord:
    try:
        _require(
            projects, courses.project_id_for_quiz(quiz_id), current_user.user_id, admin=True
        )
        quiz = courses.update_quiz(quiz_id, title=req.title, questions=req.questions)
    except OnboardingError as exc:
        raise http_error(exc) from exc
    return CourseQuizRecord.model_validate(quiz)
