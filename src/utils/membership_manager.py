"""Membership management utilities.

Email invitations, role changes, member removal and the combined
members/invitations/invite-codes view of a project.
"""

import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from config import INVITATION_EXPIRY_DAYS
from core import permissions
from core.exceptions import (
    AlreadyExistsError,
    AlreadyMemberError,
    AuthorizationError,
    InvitationNotFoundError,
    MemberNotFoundError,
    ValidationError,
)
from models.base import utcnow
from models.project_invitation import ProjectInvitationModel
from models.project_member import ProjectMemberModel
from models.user import UserModel
from utils.invite_code_manager import InviteCodeManager
from utils.project_manager import ProjectManager
from utils.transaction import transaction

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> str:
    email = (email or "").strip().lower()
    if "@" not in email:
        raise ValidationError(f"Invalid email address: {email!r}")
    return email


class MembershipManager:
    """Manages project members and email invitations."""

    def __init__(self, db: Session):
        self.db = db
        self.projects = ProjectManager(db)
        self.invite_codes = InviteCodeManager(db)

    def list_project(self, project_id: str, actor_id: str) -> Dict[str, List[Any]]:
        """Load members, pending invitations and active invite codes.

        Invite codes are only visible to admins; other members get an empty
        list for them.

        Args:
            project_id: Target project. A falsy value returns empty lists
                without querying.
            actor_id: Acting user; must be a project member.

        Returns:
            ``{"members": [...], "invitations": [...], "invite_codes": [...]}``
            where each member is a dict joined with profile display fields.

        Raises:
            AuthorizationError: If the actor is not a project member.
        """
        empty = {"members": [], "invitations": [], "invite_codes": []}
        if not project_id:
            return empty
        self.projects.require_member(project_id, actor_id)

        query = (
            self.db.query(ProjectMemberModel, UserModel)
            .outerjoin(UserModel, UserModel.user_id == ProjectMemberModel.user_id)
            .filter(ProjectMemberModel.project_id == project_id)
            .order_by(ProjectMemberModel.joined_at.asc())
        )
        members = []
        for membership, user in query.all():
            members.append(
                {
                    "id": membership.id,
                    "project_id": membership.project_id,
                    "user_id": membership.user_id,
                    "role": membership.role,
                    "invited_by": membership.invited_by,
                    "joined_at": membership.joined_at,
                    "email": user.email if user else None,
                    "full_name": user.full_name if user else None,
                    "avatar_url": user.avatar_url if user else None,
                }
            )

        invite_codes = []
        if self.projects.is_project_admin(project_id, actor_id):
            invite_codes = self.invite_codes.active_codes(project_id)

        return {
            "members": members,
            "invitations": self._pending_invitations(project_id),
            "invite_codes": invite_codes,
        }

    def _pending_invitations(self, project_id: str) -> List[ProjectInvitationModel]:
        return (
            self.db.query(ProjectInvitationModel)
            .filter(
                ProjectInvitationModel.project_id == project_id,
                ProjectInvitationModel.accepted_at.is_(None),
                ProjectInvitationModel.expires_at > utcnow(),
            )
            .order_by(ProjectInvitationModel.created_at.desc())
            .all()
        )

    def invite_by_email(
        self,
        project_id: str,
        actor_id: str,
        email: str,
        role: str = permissions.MEMBER,
    ) -> Optional[ProjectInvitationModel]:
        """Record a pending email invitation.

        No email is sent; the invitation token is returned to the caller.

        Raises:
            ValidationError: If the email or role is invalid.
            AuthorizationError: If the actor is not a project admin or may not
                grant the role.
            AlreadyMemberError: If a member already has that email.
            AlreadyExistsError: If a pending invitation for that email exists.
        """
        if not project_id:
            return None
        email = _normalize_email(email)
        if not permissions.is_assignable_role(role):
            raise ValidationError(f"Invalid role: {role}")

        actor_role = self.projects.get_user_role_in_project(project_id, actor_id)
        if not permissions.is_admin_role(actor_role):
            raise AuthorizationError(
                "Unauthorized: Only project admins can invite members"
            )
        if not permissions.can_assign_role(actor_role, role):
            raise AuthorizationError(f"Unauthorized: You cannot invite with role {role}")

        existing_member = (
            self.db.query(ProjectMemberModel)
            .join(UserModel, UserModel.user_id == ProjectMemberModel.user_id)
            .filter(
                ProjectMemberModel.project_id == project_id,
                UserModel.email == email,
            )
            .first()
        )
        if existing_member:
            raise AlreadyMemberError("This user is already a member of this project")
        pending = [
            inv for inv in self._pending_invitations(project_id) if inv.email == email
        ]
        if pending:
            raise AlreadyExistsError(f"An invitation for {email} is already pending")

        invitation = ProjectInvitationModel(
            project_id=project_id,
            email=email,
            role=role,
            invited_by=actor_id,
            token=secrets.token_urlsafe(32),
            expires_at=utcnow() + timedelta(days=INVITATION_EXPIRY_DAYS),
        )
        with transaction(self.db, "create invitation"):
            self.db.add(invitation)
        self.db.refresh(invitation)
        logger.info(
            "Invited %s to project %s as %s (email delivery is not configured)",
            email,
            project_id,
            role,
        )
        return invitation

    def accept_invitation(self, token: str, actor_id: str) -> ProjectMemberModel:
        """Turn a pending invitation addressed to the actor into a membership.

        Raises:
            InvitationNotFoundError: If the token is unknown, expired, already
                used or addressed to another email.
            AlreadyMemberError: If the actor already belongs to the project.
        """
        if not token:
            raise InvitationNotFoundError()
        invitation = (
            self.db.query(ProjectInvitationModel)
            .filter(
                ProjectInvitationModel.token == token,
                ProjectInvitationModel.accepted_at.is_(None),
                ProjectInvitationModel.expires_at > utcnow(),
            )
            .first()
        )
        user = self.db.query(UserModel).filter(UserModel.user_id == actor_id).first()
        if invitation is None or user is None or user.email != invitation.email:
            raise InvitationNotFoundError()
        if self.projects.is_project_member(invitation.project_id, actor_id):
            raise AlreadyMemberError()

        member = ProjectMemberModel(
            project_id=invitation.project_id,
            user_id=actor_id,
            role=invitation.role,
            invited_by=invitation.invited_by,
        )
        with transaction(self.db, "accept invitation", on_conflict=AlreadyMemberError):
            self.db.add(member)
            invitation.accepted_at = utcnow()
        self.db.refresh(member)
        logger.info(
            "User %s accepted invitation to project %s as %s",
            actor_id,
            member.project_id,
            member.role,
        )
        return member

    def cancel_invitation(self, invitation_id: str, actor_id: str) -> None:
        invitation = (
            self.db.query(ProjectInvitationModel)
            .filter(
                ProjectInvitationModel.id == invitation_id,
                ProjectInvitationModel.accepted_at.is_(None),
            )
            .first()
        )
        if invitation is None:
            raise InvitationNotFoundError("Invitation not found")
        self.projects.require_admin(
            invitation.project_id,
            actor_id,
            "Unauthorized: Only project admins can cancel invitations",
        )
        with transaction(self.db, "cancel invitation"):
            self.db.delete(invitation)
        logger.info("Cancelled invitation %s", invitation_id)

    def _get_member(self, member_id: str) -> ProjectMemberModel:
        member = (
            self.db.query(ProjectMemberModel)
            .filter(ProjectMemberModel.id == member_id)
            .first()
        )
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    def _target_role(self, member: ProjectMemberModel) -> str:
        project = self.projects.get_project(member.project_id)
        if project.owner_id == member.user_id:
            return permissions.OWNER
        return member.role

    def change_role(
        self, member_id: str, actor_id: str, new_role: str
    ) -> ProjectMemberModel:
        """Change a member's role.

        Authorization is decided here regardless of what the caller checked:
        the owner may change anyone but the owner, an admin may change
        members and viewers, and nobody can grant ``owner``.

        Raises:
            MemberNotFoundError: If the membership does not exist.
            ValidationError: If new_role is not an assignable role.
            AuthorizationError: If the actor may not make this change.
        """
        member = self._get_member(member_id)
        if not permissions.is_assignable_role(new_role):
            raise ValidationError(f"Invalid role: {new_role}")

        actor_role = self.projects.get_user_role_in_project(member.project_id, actor_id)
        target_role = self._target_role(member)
        if not permissions.can_manage_member(actor_role, target_role):
            raise AuthorizationError("Unauthorized: You cannot change this member's role")
        if not permissions.can_assign_role(actor_role, new_role):
            raise AuthorizationError(f"Unauthorized: You cannot assign role {new_role}")

        with transaction(self.db, "change member role"):
            member.role = new_role
        self.db.refresh(member)
        logger.info(
            "Changed role of member %s in project %s to %s",
            member_id,
            member.project_id,
            new_role,
        )
        return member

    def remove_member(self, member_id: str, actor_id: str) -> None:
        """Remove a member from a project. The owner can never be removed."""
        member = self._get_member(member_id)
        actor_role = self.projects.get_user_role_in_project(member.project_id, actor_id)
        if not permissions.can_manage_member(actor_role, self._target_role(member)):
            raise AuthorizationError("Unauthorized: You cannot remove this member")

        project_id = member.project_id
        with transaction(self.db, "remove member"):
            self.db.delete(member)
        logger.info("Removed member %s from project %s", member_id, project_id)

    def leave_project(self, project_id: str, actor_id: str) -> bool:
        """Delete the actor's own membership.

        Returns:
            True if a membership was deleted, False if there was none.

        Raises:
            AuthorizationError: If the actor owns the project.
        """
        if not project_id:
            return False
        if self.projects.is_project_owner(project_id, actor_id):
            raise AuthorizationError("Project owner cannot leave the project")

        membership = (
            self.db.query(ProjectMemberModel)
            .filter(
                ProjectMemberModel.project_id == project_id,
                ProjectMemberModel.user_id == actor_id,
            )
            .first()
        )
        if membership is None:
            return False
        with transaction(self.db, "leave project"):
            self.db.delete(membership)
        logger.info("User %s left project %s", actor_id, project_id)
        return True
