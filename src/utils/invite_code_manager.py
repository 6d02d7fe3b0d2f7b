"""Invite code utilities.

Invite codes are short shareable strings (``ABCD-EF12-3456``) that let any
authenticated user join a project with a preset role, subject to an expiry
time and an optional use count.
"""

import logging
import secrets
import string
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from config import INVITE_CODE_DEFAULT_EXPIRY_DAYS, INVITE_CODE_MAX_EXPIRY_DAYS
from core import permissions
from core.exceptions import (
    AlreadyMemberError,
    InviteCodeNotFoundError,
    ValidationError,
)
from models.base import utcnow
from models.project_invite_code import ProjectInviteCodeModel
from models.project_member import ProjectMemberModel
from utils.project_manager import ProjectManager
from utils.transaction import transaction

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_GROUPS = 3
CODE_GROUP_LENGTH = 4


def generate_invite_code() -> str:
    """Return a fresh random code such as ``K3ZQ-8M1A-PX0T``."""
    return "-".join(
        "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_GROUP_LENGTH))
        for _ in range(CODE_GROUPS)
    )


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def _check_expiry_days(expires_in_days: int) -> None:
    if expires_in_days < 1 or expires_in_days > INVITE_CODE_MAX_EXPIRY_DAYS:
        raise ValidationError(
            f"expires_in_days must be between 1 and {INVITE_CODE_MAX_EXPIRY_DAYS}"
        )


class InviteCodeManager:
    """Issues, lists, redeems and revokes project invite codes."""

    def __init__(self, db: Session):
        self.db = db
        self.projects = ProjectManager(db)

    def generate_code(
        self,
        project_id: str,
        actor_id: str,
        role: str = permissions.MEMBER,
        expires_in_days: int = INVITE_CODE_DEFAULT_EXPIRY_DAYS,
        uses_left: Optional[int] = None,
    ) -> ProjectInviteCodeModel:
        """Issue a new invite code for a project.

        Args:
            project_id: Target project.
            actor_id: Acting user; must be an owner or admin of the project.
            role: Role granted on redemption (admin, member or viewer).
            expires_in_days: Lifetime of the code, 1 to 365 days.
            uses_left: Number of redemptions allowed; None for unlimited.

        Returns:
            The persisted ProjectInviteCodeModel.

        Raises:
            ValidationError: If an argument is out of range.
            AuthorizationError: If the actor is not a project admin.
            StoreError: If the insert fails, including a code collision.
        """
        if not project_id:
            raise ValidationError("project_id parameter is required")
        if not permissions.is_assignable_role(role):
            raise ValidationError(f"Invalid role: {role}")
        _check_expiry_days(expires_in_days)
        if uses_left is not None and uses_left < 1:
            raise ValidationError("uses_left must be at least 1")

        self.projects.require_admin(
            project_id,
            actor_id,
            "Unauthorized: Only project admins can generate invite codes",
        )

        model = ProjectInviteCodeModel(
            project_id=project_id,
            code=generate_invite_code(),
            role=role,
            created_by=actor_id,
            expires_at=utcnow() + timedelta(days=expires_in_days),
            uses_left=uses_left,
        )
        with transaction(self.db, "generate invite code"):
            self.db.add(model)
        self.db.refresh(model)
        logger.info(
            "Generated invite code %s for project %s (role=%s, uses_left=%s)",
            model.code,
            project_id,
            role,
            uses_left,
        )
        return model

    def list_codes(self, project_id: str, actor_id: str) -> List[ProjectInviteCodeModel]:
        """List a project's unexpired invite codes, newest first.

        Raises:
            ValidationError: If project_id is missing.
            AuthorizationError: If the actor is not a project admin.
        """
        if not project_id:
            raise ValidationError("project_id parameter is required")
        self.projects.require_admin(
            project_id,
            actor_id,
            "Unauthorized: Only project admins can view invite codes",
        )
        return self.active_codes(project_id)

    def active_codes(self, project_id: str) -> List[ProjectInviteCodeModel]:
        return (
            self.db.query(ProjectInviteCodeModel)
            .filter(
                ProjectInviteCodeModel.project_id == project_id,
                ProjectInviteCodeModel.expires_at > utcnow(),
            )
            .order_by(ProjectInviteCodeModel.created_at.desc())
            .all()
        )

    def redeem_code(self, code: str, actor_id: str) -> Dict[str, Any]:
        """Join a project with an invite code.

        The membership insert and the use-count adjustment commit together.
        A code whose last use is consumed is deleted.

        Args:
            code: The code as typed by the user; case and surrounding
                whitespace are ignored.
            actor_id: User joining the project.

        Returns:
            ``{"member": ProjectMemberModel, "project_name": str}``.

        Raises:
            ValidationError: If no code was given.
            InviteCodeNotFoundError: If the code is unknown, expired or used up.
            AlreadyMemberError: If the actor already belongs to the project.
        """
        code = normalize_code(code)
        if not code:
            raise ValidationError("Invite code is required")

        invite = (
            self.db.query(ProjectInviteCodeModel)
            .filter(
                ProjectInviteCodeModel.code == code,
                ProjectInviteCodeModel.expires_at > utcnow(),
            )
            .first()
        )
        if invite is None:
            raise InviteCodeNotFoundError()

        project = self.projects.get_project(invite.project_id)
        if self.projects.is_project_member(project.id, actor_id):
            raise AlreadyMemberError()

        project_name = project.name
        invite_id = invite.id
        limited = invite.uses_left is not None
        member = ProjectMemberModel(
            project_id=project.id,
            user_id=actor_id,
            role=invite.role,
            invited_by=invite.created_by,
        )
        with transaction(self.db, "redeem invite code", on_conflict=AlreadyMemberError):
            self.db.add(member)
            self.db.flush()
            if limited:
                result = self.db.execute(
                    update(ProjectInviteCodeModel)
                    .where(
                        ProjectInviteCodeModel.id == invite_id,
                        ProjectInviteCodeModel.uses_left > 0,
                    )
                    .values(uses_left=ProjectInviteCodeModel.uses_left - 1)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    # Another redemption took the last use first
                    raise InviteCodeNotFoundError()
                self.db.execute(
                    delete(ProjectInviteCodeModel).where(
                        ProjectInviteCodeModel.id == invite_id,
                        ProjectInviteCodeModel.uses_left <= 0,
                    ).execution_options(synchronize_session=False)
                )
        self.db.refresh(member)
        logger.info(
            "User %s joined project %s with invite code %s as %s",
            actor_id,
            member.project_id,
            code,
            member.role,
        )
        return {"member": member, "project_name": project_name}

    def revoke_code(self, code_id: str, actor_id: str) -> None:
        """Delete an invite code.

        Raises:
            ValidationError: If code_id is missing.
            InviteCodeNotFoundError: If no code has that ID.
            AuthorizationError: If the actor is not an admin of its project.
        """
        if not code_id:
            raise ValidationError("code_id parameter is required")
        model = self._get_by_id(code_id)
        self.projects.require_admin(
            model.project_id,
            actor_id,
            "Unauthorized: Only project admins can delete invite codes",
        )
        with transaction(self.db, "delete invite code"):
            self.db.delete(model)
        logger.info("Deleted invite code %s", code_id)

    def update_code_expiry(
        self, code_id: str, actor_id: str, expires_in_days: int
    ) -> ProjectInviteCodeModel:
        """Move an invite code's expiry to ``now + expires_in_days``.

        Raises:
            ValidationError: If expires_in_days is out of range.
            InviteCodeNotFoundError: If no code has that ID.
            AuthorizationError: If the actor is not an admin of its project.
        """
        _check_expiry_days(expires_in_days)
        model = self._get_by_id(code_id)
        self.projects.require_admin(
            model.project_id,
            actor_id,
            "Unauthorized: Only project admins can update invite codes",
        )
        with transaction(self.db, "update invite code"):
            model.expires_at = utcnow() + timedelta(days=expires_in_days)
        self.db.refresh(model)
        logger.info(
            "Updated expiration date for invite code %s, new expires_at: %s",
            code_id,
            model.expires_at,
        )
        return model

    def _get_by_id(self, code_id: str) -> ProjectInviteCodeModel:
        model = (
            self.db.query(ProjectInviteCodeModel)
            .filter(ProjectInviteCodeModel.id == code_id)
            .first()
        )
        if model is None:
            raise InviteCodeNotFoundError("Invite code not found")
        return model
