"""Project management utilities.

Project CRUD, project documentation and the store-backed role checks that
every other manager builds its authorization on.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from core import permissions
from core.exceptions import AuthorizationError, ProjectNotFoundError, ValidationError
from models.course import CourseQuizModel, CourseSummaryModel, CourseTopicModel
from models.project import ProjectModel
from models.project_documentation import ProjectDocumentationModel
from models.project_invitation import ProjectInvitationModel
from models.project_invite_code import ProjectInviteCodeModel
from models.project_member import ProjectMemberModel
from utils.transaction import transaction

logger = logging.getLogger(__name__)

DOCUMENTATION_FIELDS = (
    "pr_template",
    "code_nomenclature",
    "gitflow_docs",
    "additional_docs",
)

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Project name must be at most {MAX_NAME_LENGTH} characters")
    return name


def _clean_description(description: Optional[str]) -> Optional[str]:
    if description is None:
        return None
    description = description.strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Project description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )
    return description or None


class ProjectManager:
    """Manages projects, their documentation and role lookups."""

    def __init__(self, db: Session, max_documentation_length: int = 20000):
        self.db = db
        self.max_documentation_length = max_documentation_length

    # --- Role lookups ---

    def get_user_role_in_project(self, project_id: str, user_id: str) -> Optional[str]:
        """Return the user's role in the project, or None if not a member.

        The project owner is recognised by ``owner_id`` even if the owner's
        membership row is missing.
        """
        if not project_id or not user_id:
            return None
        project = self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()
        if project is None:
            return None
        if project.owner_id == user_id:
            return permissions.OWNER
        membership = (
            self.db.query(ProjectMemberModel)
            .filter(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == user_id,
            )
            .first()
        )
        return membership.role if membership else None

    def is_project_owner(self, project_id: str, user_id: str) -> bool:
        return self.get_user_role_in_project(project_id, user_id) == permissions.OWNER

    def is_project_admin(self, project_id: str, user_id: str) -> bool:
        return permissions.is_admin_role(self.get_user_role_in_project(project_id, user_id))

    def is_project_member(self, project_id: str, user_id: str) -> bool:
        return self.get_user_role_in_project(project_id, user_id) is not None

    def require_admin(self, project_id: str, user_id: str, message: str) -> None:
        if not self.is_project_admin(project_id, user_id):
            raise AuthorizationError(message)

    def require_member(self, project_id: str, user_id: str) -> None:
        if not self.is_project_member(project_id, user_id):
            raise AuthorizationError("Unauthorized: You are not a member of this project")

    # --- Projects ---

    def create_project(
        self, owner_id: str, name: str, description: Optional[str] = None
    ) -> ProjectModel:
        """Create a project and the owner's membership row in one transaction.

        Args:
            owner_id: User ID of the creator, who becomes the immutable owner.
            name: Project name, 1 to 100 characters.
            description: Optional description, at most 500 characters.

        Returns:
            The created ProjectModel.

        Raises:
            ValidationError: If name or description is out of bounds.
        """
        project = ProjectModel(
            name=_clean_name(name),
            description=_clean_description(description),
            owner_id=owner_id,
            settings={},
        )
        with transaction(self.db, "create project"):
            self.db.add(project)
            self.db.flush()
            self.db.add(
                ProjectMemberModel(
                    project_id=project.id,
                    user_id=owner_id,
                    role=permissions.OWNER,
                )
            )
        self.db.refresh(project)
        logger.info("Created project %s (%s) for owner %s", project.id, project.name, owner_id)
        return project

    def get_project(self, project_id: str) -> ProjectModel:
        project = self.db.query(ProjectModel).filter(ProjectModel.id == project_id).first()
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def list_projects_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        """List projects the user belongs to, newest first.

        Returns:
            Dicts of ``{"project": ProjectModel, "role": str}``.
        """
        rows = (
            self.db.query(ProjectModel, ProjectMemberModel.role)
            .outerjoin(
                ProjectMemberModel,
                (ProjectMemberModel.project_id == ProjectModel.id)
                & (ProjectMemberModel.user_id == user_id),
            )
            .filter(
                (ProjectModel.owner_id == user_id)
                | (ProjectMemberModel.user_id == user_id)
            )
            .order_by(ProjectModel.created_at.desc())
            .all()
        )
        results = []
        for project, role in rows:
            if project.owner_id == user_id:
                role = permissions.OWNER
            results.append({"project": project, "role": role})
        return results

    def update_project(
        self,
        project_id: str,
        actor_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ProjectModel:
        project = self.get_project(project_id)
        self.require_admin(
            project_id, actor_id, "Unauthorized: Only project admins can update the project"
        )
        with transaction(self.db, "update project"):
            if name is not None:
                project.name = _clean_name(name)
            if description is not None:
                project.description = _clean_description(description)
        self.db.refresh(project)
        logger.info("Updated project %s", project_id)
        return project

    def delete_project(self, project_id: str, actor_id: str) -> None:
        """Delete a project and everything that belongs to it.

        Only the project owner can delete the project.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            AuthorizationError: If the actor is not the owner.
        """
        project = self.get_project(project_id)
        if project.owner_id != actor_id:
            raise AuthorizationError("Unauthorized: Only the project owner can delete the project")

        topic_ids = [
            topic_id
            for (topic_id,) in self.db.query(CourseTopicModel.id).filter(
                CourseTopicModel.project_id == project_id
            )
        ]
        with transaction(self.db, "delete project"):
            # Children before parents
            if topic_ids:
                self.db.query(CourseQuizModel).filter(
                    CourseQuizModel.topic_id.in_(topic_ids)
                ).delete(synchronize_session=False)
                self.db.query(CourseSummaryModel).filter(
                    CourseSummaryModel.topic_id.in_(topic_ids)
                ).delete(synchronize_session=False)
            self.db.query(CourseTopicModel).filter(
                CourseTopicModel.project_id == project_id
            ).delete(synchronize_session=False)
            self.db.query(ProjectDocumentationModel).filter(
                ProjectDocumentationModel.project_id == project_id
            ).delete(synchronize_session=False)
            self.db.query(ProjectInviteCodeModel).filter(
                ProjectInviteCodeModel.project_id == project_id
            ).delete(synchronize_session=False)
            self.db.query(ProjectInvitationModel).filter(
                ProjectInvitationModel.project_id == project_id
            ).delete(synchronize_session=False)
            self.db.query(ProjectMemberModel).filter(
                ProjectMemberModel.project_id == project_id
            ).delete(synchronize_session=False)
            self.db.delete(project)
        logger.info("Deleted project: %s", project_id)

    # --- Documentation ---

    def get_documentation(self, project_id: str) -> Optional[ProjectDocumentationModel]:
        if not project_id:
            return None
        return (
            self.db.query(ProjectDocumentationModel)
            .filter(ProjectDocumentationModel.project_id == project_id)
            .first()
        )

    def save_documentation(
        self, project_id: str, actor_id: str, fields: Dict[str, Any]
    ) -> ProjectDocumentationModel:
        """Create or update the project's documentation.

        Args:
            project_id: Target project.
            actor_id: Acting user; must be a project admin.
            fields: Any of the documentation text fields and
                ``file_attachments``. Keys that are absent are left untouched.

        Returns:
            The saved ProjectDocumentationModel.

        Raises:
            ProjectNotFoundError: If the project does not exist.
            AuthorizationError: If the actor is not a project admin.
            ValidationError: If a text field exceeds the configured limit.
        """
        self.get_project(project_id)
        self.require_admin(
            project_id,
            actor_id,
            "Unauthorized: Only project admins can edit documentation",
        )
        for field in DOCUMENTATION_FIELDS:
            value = fields.get(field)
            if value is not None and len(value) > self.max_documentation_length:
                raise ValidationError(
                    f"{field} must be at most {self.max_documentation_length} characters"
                )

        doc = self.get_documentation(project_id)
        with transaction(self.db, "save documentation"):
            if doc is None:
                doc = ProjectDocumentationModel(project_id=project_id, file_attachments=[])
                self.db.add(doc)
            for field in DOCUMENTATION_FIELDS:
                if field in fields and fields[field] is not None:
                    setattr(doc, field, fields[field])
            if fields.get("file_attachments") is not None:
                doc.file_attachments = list(fields["file_attachments"])
        self.db.refresh(doc)
        logger.info("Saved documentation for project %s", project_id)
        return doc
