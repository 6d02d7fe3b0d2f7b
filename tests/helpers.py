"""Shared fixtures for the test suite.

Every test case gets its own in-memory SQLite database.
"""

import os
import sys
import unittest

# Add src to path
sys.path.append(
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
)
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from models import Base, ProjectMemberModel, UserModel
from schemas.course import CourseModule, Quiz, QuizQuestion


def as_utc(value):
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value


def make_module(title: str, n_questions: int = 3) -> CourseModule:
    return CourseModule(
        title=title,
        summary=f"# {title}\n\nSummary for {title}.",
        quiz=Quiz(
            title=f"Assessment: {title}",
            questions=[
                QuizQuestion(
                    question=f"{title} question {i}",
                    options=["A", "B", "C", "D"],
                    correct_answer=i % 4,
                    explanation="Because.",
                )
                for i in range(n_questions)
            ],
        ),
    )


class DatabaseTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False)
        self.db = self.Session()
        # Registered first so it runs after any cleanups a test adds itself.
        self.addCleanup(self._dispose_database)

    def _dispose_database(self):
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def tearDown(self):
        self.db.close()

    def create_user(self, email: str, full_name: str = None) -> UserModel:
        user = UserModel(email=email, full_name=full_name, password_hash="not-a-real-hash")
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def add_member(self, project_id: str, user: UserModel, role: str) -> ProjectMemberModel:
        member = ProjectMemberModel(project_id=project_id, user_id=user.user_id, role=role)
        self.db.add(member)
        self.db.commit()
        self.db.refresh(member)
        return member


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient wired to the test database."""

    def setUp(self):
        super().setUp()
        from fastapi.testclient import TestClient

        from app import app
        from core.database import get_db
        from utils.request_guard import RequestGuard, get_request_guard

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        self.guard = RequestGuard()
        self.app = app
        self.app.dependency_overrides[get_db] = override_get_db
        self.app.dependency_overrides[get_request_guard] = lambda: self.guard
        self.client = TestClient(self.app)

    def tearDown(self):
        self.app.dependency_overrides.clear()
        super().tearDown()

    def auth(self, user: UserModel) -> dict:
        from api.routes.auth import create_access_token

        token = create_access_token({"sub": user.user_id})
        return {"Authorization": f"Bearer {token}"}
