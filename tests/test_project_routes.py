import unittest

from helpers import ApiTestCase

from models import ProjectInvitationModel, ProjectMemberModel
from utils.project_manager import ProjectManager


class TestProjectRoutes(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.owner = self.create_user("owner@example.com", "Owner")
        self.admin = self.create_user("admin@example.com", "Admin")
        self.member = self.create_user("member@example.com", "Member")
        self.outsider = self.create_user("outsider@example.com", "Outsider")
        self.project = ProjectManager(self.db).create_project(
            self.owner.user_id, "Payments", "Payment system"
        )
        self.admin_row = self.add_member(self.project.id, self.admin, "admin")
        self.member_row = self.add_member(self.project.id, self.member, "member")

    def url(self, suffix=""):
        return f"/api/projects/{self.project.id}{suffix}"

    def test_create_and_list_projects(self):
        response = self.client.post(
            "/api/projects",
            json={"name": "Search", "description": "Search service"},
            headers=self.auth(self.member),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], "owner")

        response = self.client.get("/api/projects", headers=self.auth(self.member))
        roles = {p["name"]: p["role"] for p in response.json()}
        self.assertEqual(roles, {"Search": "owner", "Payments": "member"})

    def test_create_project_validation(self):
        response = self.client.post(
            "/api/projects", json={"name": ""}, headers=self.auth(self.owner)
        )
        self.assertEqual(response.status_code, 422)

    def test_get_project(self):
        response = self.client.get(self.url(), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "admin")

        response = self.client.get(self.url(), headers=self.auth(self.outsider))
        self.assertEqual(response.status_code, 403)

        response = self.client.get("/api/projects/missing", headers=self.auth(self.owner))
        self.assertEqual(response.status_code, 404)

    def test_update_and_delete_project(self):
        response = self.client.patch(
            self.url(), json={"name": "Payments v2"}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Payments v2")

        response = self.client.delete(self.url(), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(self.url(), headers=self.auth(self.owner))
        self.assertEqual(response.status_code, 200)
        response = self.client.get(self.url(), headers=self.auth(self.owner))
        self.assertEqual(response.status_code, 404)

    def test_documentation(self):
        response = self.client.get(self.url("/documentation"), headers=self.auth(self.member))
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

        response = self.client.put(
            self.url("/documentation"),
            json={"pr_template": "## Summary", "gitflow_docs": "feature branches"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 200)

        response = self.client.get(self.url("/documentation"), headers=self.auth(self.member))
        self.assertEqual(response.json()["pr_template"], "## Summary")

        response = self.client.put(
            self.url("/documentation"),
            json={"pr_template": "nope"},
            headers=self.auth(self.member),
        )
        self.assertEqual(response.status_code, 403)

    def test_members_listing(self):
        response = self.client.get(self.url("/members"), headers=self.auth(self.member))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body["members"]), 3)
        self.assertEqual(body["invite_codes"], [])

        response = self.client.get(self.url("/members"), headers=self.auth(self.outsider))
        self.assertEqual(response.status_code, 403)

    def test_invite_accept_flow(self):
        response = self.client.post(
            self.url("/invitations"),
            json={"email": "outsider@example.com", "role": "viewer"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 201)
        token = response.json()["token"]

        response = self.client.post(
            self.url("/invitations"),
            json={"email": "outsider@example.com"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 409)

        response = self.client.post(
            "/api/projects/invitations/accept",
            json={"token": token},
            headers=self.auth(self.outsider),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "viewer")

        response = self.client.get(self.url(), headers=self.auth(self.outsider))
        self.assertEqual(response.status_code, 200)

    def test_cancel_invitation(self):
        response = self.client.post(
            self.url("/invitations"),
            json={"email": "new@example.com"},
            headers=self.auth(self.owner),
        )
        invitation_id = response.json()["id"]

        response = self.client.delete(
            self.url(f"/invitations/{invitation_id}"), headers=self.auth(self.member)
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(
            self.url(f"/invitations/{invitation_id}"), headers=self.auth(self.owner)
        )
        self.assertEqual(response.status_code, 200)
        self.db.expire_all()
        self.assertEqual(self.db.query(ProjectInvitationModel).count(), 0)

    def test_change_role_and_remove_member(self):
        response = self.client.patch(
            self.url(f"/members/{self.member_row.id}"),
            json={"role": "viewer"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "viewer")

        response = self.client.patch(
            self.url(f"/members/{self.admin_row.id}"),
            json={"role": "member"},
            headers=self.auth(self.member),
        )
        self.assertEqual(response.status_code, 403)

        response = self.client.delete(
            self.url(f"/members/{self.member_row.id}"), headers=self.auth(self.owner)
        )
        self.assertEqual(response.status_code, 200)
        self.db.expire_all()
        self.assertIsNone(
            self.db.query(ProjectMemberModel)
            .filter(ProjectMemberModel.id == self.member_row.id)
            .first()
        )

        response = self.client.delete(
            self.url("/members/missing"), headers=self.auth(self.owner)
        )
        self.assertEqual(response.status_code, 404)

    def test_leave_project(self):
        response = self.client.delete(self.url("/leave"), headers=self.auth(self.member))
        self.assertEqual(response.json(), {"success": True})

        response = self.client.delete(self.url("/leave"), headers=self.auth(self.owner))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"], "Project owner cannot leave the project")


if __name__ == "__main__":
    unittest.main()
