import unittest
from datetime import timedelta

from helpers import DatabaseTestCase

from core.exceptions import (
    AlreadyExistsError,
    AlreadyMemberError,
    AuthorizationError,
    InvitationNotFoundError,
    MemberNotFoundError,
    ValidationError,
)
from models import ProjectInvitationModel, ProjectMemberModel
from models.base import utcnow
from utils.invite_code_manager import InviteCodeManager
from utils.membership_manager import MembershipManager
from utils.project_manager import ProjectManager


class TestMembershipManager(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner@example.com", "Owner")
        self.admin = self.create_user("admin@example.com", "Admin")
        self.other_admin = self.create_user("admin2@example.com", "Second Admin")
        self.member = self.create_user("member@example.com", "Member")
        self.outsider = self.create_user("outsider@example.com", "Outsider")
        self.project = ProjectManager(self.db).create_project(self.owner.user_id, "Payments")
        self.owner_row = (
            self.db.query(ProjectMemberModel)
            .filter(ProjectMemberModel.user_id == self.owner.user_id)
            .first()
        )
        self.admin_row = self.add_member(self.project.id, self.admin, "admin")
        self.other_admin_row = self.add_member(self.project.id, self.other_admin, "admin")
        self.member_row = self.add_member(self.project.id, self.member, "member")
        self.manager = MembershipManager(self.db)

    def test_falsy_project_id_is_a_no_op(self):
        self.assertEqual(
            self.manager.list_project("", self.owner.user_id),
            {"members": [], "invitations": [], "invite_codes": []},
        )
        self.assertIsNone(self.manager.invite_by_email(None, self.owner.user_id, "x@example.com"))
        self.assertFalse(self.manager.leave_project("", self.member.user_id))
        self.assertEqual(self.db.query(ProjectInvitationModel).count(), 0)

    def test_invite_then_cancel(self):
        invitation = self.manager.invite_by_email(
            self.project.id, self.admin.user_id, "New@Example.com", "viewer"
        )
        self.assertEqual(invitation.email, "new@example.com")
        self.assertEqual(invitation.role, "viewer")
        self.assertIsNone(invitation.accepted_at)

        pending = self.manager.list_project(self.project.id, self.admin.user_id)["invitations"]
        self.assertEqual([i.email for i in pending], ["new@example.com"])

        self.manager.cancel_invitation(invitation.id, self.admin.user_id)

        pending = self.manager.list_project(self.project.id, self.admin.user_id)["invitations"]
        self.assertEqual(pending, [])

    def test_invitation_expires_in_seven_days(self):
        invitation = self.manager.invite_by_email(
            self.project.id, self.owner.user_id, "new@example.com"
        )
        expires_at = invitation.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=utcnow().tzinfo)
        remaining = expires_at - utcnow()
        self.assertGreater(remaining, timedelta(days=6, hours=23))
        self.assertLessEqual(remaining, timedelta(days=7))

    def test_member_cannot_invite(self):
        with self.assertRaises(AuthorizationError):
            self.manager.invite_by_email(self.project.id, self.member.user_id, "new@example.com")
        self.assertEqual(self.db.query(ProjectInvitationModel).count(), 0)

    def test_invite_rejects_duplicates(self):
        self.manager.invite_by_email(self.project.id, self.owner.user_id, "new@example.com")
        with self.assertRaises(AlreadyExistsError):
            self.manager.invite_by_email(self.project.id, self.owner.user_id, "new@example.com")
        with self.assertRaises(AlreadyMemberError):
            self.manager.invite_by_email(
                self.project.id, self.owner.user_id, "member@example.com"
            )

    def test_invite_validates_email_and_role(self):
        with self.assertRaises(ValidationError):
            self.manager.invite_by_email(self.project.id, self.owner.user_id, "not-an-email")
        with self.assertRaises(ValidationError):
            self.manager.invite_by_email(
                self.project.id, self.owner.user_id, "new@example.com", "owner"
            )

    def test_accept_invitation_creates_membership(self):
        invitation = self.manager.invite_by_email(
            self.project.id, self.admin.user_id, "outsider@example.com", "viewer"
        )

        member = self.manager.accept_invitation(invitation.token, self.outsider.user_id)

        self.assertEqual(member.role, "viewer")
        self.assertEqual(member.invited_by, self.admin.user_id)
        data = self.manager.list_project(self.project.id, self.owner.user_id)
        self.assertEqual(data["invitations"], [])
        self.assertIn(self.outsider.user_id, [m["user_id"] for m in data["members"]])

        with self.assertRaises(InvitationNotFoundError):
            self.manager.accept_invitation(invitation.token, self.outsider.user_id)

    def test_accept_invitation_for_another_email_fails(self):
        invitation = self.manager.invite_by_email(
            self.project.id, self.owner.user_id, "someone@example.com"
        )
        with self.assertRaises(InvitationNotFoundError):
            self.manager.accept_invitation(invitation.token, self.outsider.user_id)

    def test_accept_expired_invitation_fails(self):
        invitation = self.manager.invite_by_email(
            self.project.id, self.owner.user_id, "outsider@example.com"
        )
        invitation.expires_at = utcnow() - timedelta(seconds=1)
        self.db.commit()
        with self.assertRaises(InvitationNotFoundError):
            self.manager.accept_invitation(invitation.token, self.outsider.user_id)

    def test_owner_can_promote_member(self):
        updated = self.manager.change_role(self.member_row.id, self.owner.user_id, "admin")
        self.assertEqual(updated.role, "admin")

    def test_admin_can_change_member_but_not_admin(self):
        updated = self.manager.change_role(self.member_row.id, self.admin.user_id, "viewer")
        self.assertEqual(updated.role, "viewer")

        with self.assertRaises(AuthorizationError):
            self.manager.change_role(self.other_admin_row.id, self.admin.user_id, "member")
        self.db.refresh(self.other_admin_row)
        self.assertEqual(self.other_admin_row.role, "admin")

    def test_nobody_changes_the_owner(self):
        with self.assertRaises(AuthorizationError):
            self.manager.change_role(self.owner_row.id, self.admin.user_id, "member")
        with self.assertRaises(AuthorizationError):
            self.manager.change_role(self.owner_row.id, self.owner.user_id, "admin")

    def test_owner_role_cannot_be_granted(self):
        with self.assertRaises(ValidationError):
            self.manager.change_role(self.member_row.id, self.owner.user_id, "owner")

    def test_member_cannot_change_roles(self):
        with self.assertRaises(AuthorizationError):
            self.manager.change_role(self.admin_row.id, self.member.user_id, "member")

    def test_change_role_unknown_member(self):
        with self.assertRaises(MemberNotFoundError):
            self.manager.change_role("missing", self.owner.user_id, "member")

    def test_remove_member(self):
        self.manager.remove_member(self.member_row.id, self.admin.user_id)
        self.assertFalse(ProjectManager(self.db).is_project_member(
            self.project.id, self.member.user_id
        ))

    def test_owner_cannot_be_removed(self):
        with self.assertRaises(AuthorizationError):
            self.manager.remove_member(self.owner_row.id, self.admin.user_id)
        with self.assertRaises(AuthorizationError):
            self.manager.remove_member(self.owner_row.id, self.owner.user_id)

    def test_leave_project(self):
        self.assertTrue(self.manager.leave_project(self.project.id, self.member.user_id))
        self.assertFalse(self.manager.leave_project(self.project.id, self.member.user_id))

    def test_owner_cannot_leave(self):
        with self.assertRaises(AuthorizationError):
            self.manager.leave_project(self.project.id, self.owner.user_id)

    def test_list_project_requires_membership(self):
        with self.assertRaises(AuthorizationError):
            self.manager.list_project(self.project.id, self.outsider.user_id)

    def test_list_project_joins_profiles(self):
        data = self.manager.list_project(self.project.id, self.member.user_id)

        by_user = {m["user_id"]: m for m in data["members"]}
        self.assertEqual(by_user[self.owner.user_id]["role"], "owner")
        self.assertEqual(by_user[self.admin.user_id]["email"], "admin@example.com")
        self.assertEqual(by_user[self.member.user_id]["full_name"], "Member")

    def test_invite_codes_visible_to_admins_only(self):
        InviteCodeManager(self.db).generate_code(self.project.id, self.owner.user_id)

        as_admin = self.manager.list_project(self.project.id, self.admin.user_id)
        as_member = self.manager.list_project(self.project.id, self.member.user_id)

        self.assertEqual(len(as_admin["invite_codes"]), 1)
        self.assertEqual(as_member["invite_codes"], [])


if __name__ == "__main__":
    unittest.main()
