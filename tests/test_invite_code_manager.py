import re
import unittest
from datetime import timedelta
from unittest.mock import patch

from helpers import DatabaseTestCase, as_utc

from core.exceptions import (
    AlreadyMemberError,
    AuthorizationError,
    InviteCodeNotFoundError,
    ValidationError,
)
from models import ProjectInviteCodeModel, ProjectMemberModel
from models.base import utcnow
from utils.invite_code_manager import InviteCodeManager, generate_invite_code
from utils.project_manager import ProjectManager

CODE_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")


class TestInviteCodeManager(DatabaseTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner@example.com", "Owner")
        self.admin = self.create_user("admin@example.com", "Admin")
        self.member = self.create_user("member@example.com", "Member")
        self.joiner = self.create_user("joiner@example.com", "Joiner")
        self.other = self.create_user("other@example.com", "Other")
        self.project = ProjectManager(self.db).create_project(
            self.owner.user_id, "Payments", "Payment system"
        )
        self.add_member(self.project.id, self.admin, "admin")
        self.add_member(self.project.id, self.member, "member")
        self.manager = InviteCodeManager(self.db)

    def _membership(self, user):
        return (
            self.db.query(ProjectMemberModel)
            .filter(
                ProjectMemberModel.project_id == self.project.id,
                ProjectMemberModel.user_id == user.user_id,
            )
            .first()
        )

    def _code_count(self):
        return self.db.query(ProjectInviteCodeModel).count()

    def test_generate_invite_code_format(self):
        for _ in range(20):
            self.assertRegex(generate_invite_code(), CODE_PATTERN)

    def test_generate_code_defaults(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id)

        self.assertRegex(model.code, CODE_PATTERN)
        self.assertEqual(model.role, "member")
        self.assertIsNone(model.uses_left)
        self.assertEqual(model.created_by, self.owner.user_id)
        remaining = as_utc(model.expires_at) - utcnow()
        self.assertGreater(remaining, timedelta(days=29))
        self.assertLessEqual(remaining, timedelta(days=30))

    def test_admin_can_generate_code(self):
        model = self.manager.generate_code(
            self.project.id, self.admin.user_id, role="viewer", expires_in_days=7, uses_left=5
        )
        self.assertEqual(model.role, "viewer")
        self.assertEqual(model.uses_left, 5)

    def test_non_admin_cannot_generate_code(self):
        with self.assertRaises(AuthorizationError) as ctx:
            self.manager.generate_code(self.project.id, self.member.user_id)
        self.assertEqual(
            str(ctx.exception),
            "Unauthorized: Only project admins can generate invite codes",
        )
        self.assertEqual(self._code_count(), 0)

    def test_outsider_cannot_generate_code(self):
        with self.assertRaises(AuthorizationError):
            self.manager.generate_code(self.project.id, self.other.user_id)
        self.assertEqual(self._code_count(), 0)

    def test_generate_code_validates_arguments(self):
        with self.assertRaises(ValidationError):
            self.manager.generate_code(self.project.id, self.owner.user_id, expires_in_days=0)
        with self.assertRaises(ValidationError):
            self.manager.generate_code(self.project.id, self.owner.user_id, expires_in_days=366)
        with self.assertRaises(ValidationError):
            self.manager.generate_code(self.project.id, self.owner.user_id, uses_left=0)
        with self.assertRaises(ValidationError):
            self.manager.generate_code(self.project.id, self.owner.user_id, role="owner")
        with self.assertRaises(ValidationError) as ctx:
            self.manager.generate_code(None, self.owner.user_id)
        self.assertEqual(str(ctx.exception), "project_id parameter is required")
        self.assertEqual(self._code_count(), 0)

    def test_single_use_code_is_deleted_after_redemption(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id, uses_left=1)
        code = model.code

        result = self.manager.redeem_code(code, self.joiner.user_id)

        self.assertEqual(result["project_name"], "Payments")
        self.assertEqual(result["member"].role, "member")
        self.assertEqual(self._code_count(), 0)

        with self.assertRaises(InviteCodeNotFoundError) as ctx:
            self.manager.redeem_code(code, self.other.user_id)
        self.assertEqual(str(ctx.exception), "Invalid or expired invite code")
        self.assertIsNone(self._membership(self.other))

    def test_limited_code_decrements_uses(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id, uses_left=3)
        code_id = model.id

        self.manager.redeem_code(model.code, self.joiner.user_id)

        remaining = (
            self.db.query(ProjectInviteCodeModel)
            .filter(ProjectInviteCodeModel.id == code_id)
            .first()
        )
        self.assertEqual(remaining.uses_left, 2)

    def test_unlimited_code_never_decrements(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id)
        code_id = model.id

        self.manager.redeem_code(model.code, self.joiner.user_id)
        self.manager.redeem_code(model.code, self.other.user_id)

        stored = (
            self.db.query(ProjectInviteCodeModel)
            .filter(ProjectInviteCodeModel.id == code_id)
            .first()
        )
        self.assertIsNotNone(stored)
        self.assertIsNone(stored.uses_left)
        self.assertIsNotNone(self._membership(self.joiner))
        self.assertIsNotNone(self._membership(self.other))

    def test_last_use_taken_by_concurrent_redemption(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id, uses_left=1)
        code = model.code
        other_session = self.Session()
        self.addCleanup(other_session.close)

        def redeem_elsewhere_first(project_id, user_id):
            InviteCodeManager(other_session).redeem_code(code, self.other.user_id)
            return False

        with patch.object(
            self.manager.projects, "is_project_member", side_effect=redeem_elsewhere_first
        ):
            with self.assertRaises(InviteCodeNotFoundError):
                self.manager.redeem_code(code, self.joiner.user_id)

        self.assertIsNone(self._membership(self.joiner))
        self.assertIsNotNone(self._membership(self.other))
        self.assertEqual(self._code_count(), 0)

    def test_redeem_ignores_case_and_whitespace(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id)

        result = self.manager.redeem_code(f"  {model.code.lower()} ", self.joiner.user_id)

        self.assertEqual(result["member"].user_id, self.joiner.user_id)

    def test_expired_code_is_rejected(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id)
        model.expires_at = utcnow() - timedelta(minutes=1)
        self.db.commit()

        with self.assertRaises(InviteCodeNotFoundError):
            self.manager.redeem_code(model.code, self.joiner.user_id)
        self.assertIsNone(self._membership(self.joiner))

    def test_unknown_code_is_rejected(self):
        with self.assertRaises(InviteCodeNotFoundError):
            self.manager.redeem_code("AAAA-BBBB-CCCC", self.joiner.user_id)
        with self.assertRaises(ValidationError):
            self.manager.redeem_code("   ", self.joiner.user_id)

    def test_existing_member_cannot_redeem(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id, uses_left=2)
        code_id = model.id

        with self.assertRaises(AlreadyMemberError) as ctx:
            self.manager.redeem_code(model.code, self.member.user_id)
        self.assertEqual(str(ctx.exception), "You are already a member of this project")

        stored = (
            self.db.query(ProjectInviteCodeModel)
            .filter(ProjectInviteCodeModel.id == code_id)
            .first()
        )
        self.assertEqual(stored.uses_left, 2)

    def test_viewer_code_grants_viewer_role(self):
        model = self.manager.generate_code(
            self.project.id, self.admin.user_id, role="viewer", uses_left=1
        )

        result = self.manager.redeem_code(model.code, self.joiner.user_id)

        member = result["member"]
        self.assertEqual(member.role, "viewer")
        self.assertEqual(member.invited_by, self.admin.user_id)
        self.assertEqual(member.project_id, self.project.id)
        self.assertEqual(self._code_count(), 0)

    def test_list_codes_returns_active_codes_newest_first(self):
        older = self.manager.generate_code(self.project.id, self.owner.user_id)
        newer = self.manager.generate_code(self.project.id, self.owner.user_id)
        expired = self.manager.generate_code(self.project.id, self.owner.user_id)
        older.created_at = utcnow() - timedelta(hours=2)
        newer.created_at = utcnow() - timedelta(hours=1)
        expired.expires_at = utcnow() - timedelta(days=1)
        self.db.commit()

        codes = self.manager.list_codes(self.project.id, self.admin.user_id)

        self.assertEqual([c.id for c in codes], [newer.id, older.id])

    def test_list_codes_requires_admin(self):
        with self.assertRaises(AuthorizationError):
            self.manager.list_codes(self.project.id, self.member.user_id)
        with self.assertRaises(ValidationError):
            self.manager.list_codes("", self.owner.user_id)

    def test_revoke_code(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id)

        with self.assertRaises(AuthorizationError):
            self.manager.revoke_code(model.id, self.member.user_id)
        self.assertEqual(self._code_count(), 1)

        self.manager.revoke_code(model.id, self.admin.user_id)
        self.assertEqual(self._code_count(), 0)

    def test_revoke_unknown_code(self):
        with self.assertRaises(InviteCodeNotFoundError) as ctx:
            self.manager.revoke_code("missing", self.owner.user_id)
        self.assertEqual(str(ctx.exception), "Invite code not found")
        with self.assertRaises(ValidationError) as ctx:
            self.manager.revoke_code(None, self.owner.user_id)
        self.assertEqual(str(ctx.exception), "code_id parameter is required")

    def test_update_code_expiry(self):
        model = self.manager.generate_code(self.project.id, self.owner.user_id)

        updated = self.manager.update_code_expiry(model.id, self.admin.user_id, 90)

        remaining = as_utc(updated.expires_at) - utcnow()
        self.assertGreater(remaining, timedelta(days=89))
        with self.assertRaises(ValidationError):
            self.manager.update_code_expiry(model.id, self.admin.user_id, 400)
        with self.assertRaises(AuthorizationError):
            self.manager.update_code_expiry(model.id, self.member.user_id, 10)


if __name__ == "__main__":
    unittest.main()
