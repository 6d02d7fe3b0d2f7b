"""User management utilities.

This module provides profile storage, password hashing and credential
checks for the authentication routes.
"""

import logging
from typing import Optional

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import AlreadyExistsError, NotFoundError
from models.user import UserModel

logger = logging.getLogger(__name__)

# Bcrypt rounds for password hashing (higher = more secure but slower)
BCRYPT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class UserNotFoundError(NotFoundError):
    """Exception raised when a user is not found."""

    pass


class UserAlreadyExistsError(AlreadyExistsError):
    """Exception raised when trying to create a user that already exists."""

    pass


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > _BCRYPT_MAX_BYTES:
        logger.warning(
            "Password exceeds %s bytes (%s bytes), truncating",
            _BCRYPT_MAX_BYTES,
            len(password_bytes),
        )
        password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]
    return password_bytes


class UserManager:
    """Manages user profile persistence and operations using SQLAlchemy."""

    def __init__(self, db: Session, rounds: int = BCRYPT_ROUNDS):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
            rounds: Bcrypt cost factor.
        """
        self.db = db
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        try:
            return bcrypt.checkpw(
                _password_bytes(plain_password), hashed_password.encode("utf-8")
            )
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def create_user(
        self,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> UserModel:
        """Create a new user profile.

        Args:
            email: Login email; stored lower-cased.
            password: Plain text password.
            full_name: Optional display name.
            avatar_url: Optional avatar URL.

        Returns:
            Created UserModel.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
        """
        email = email.strip().lower()
        if self.get_user_by_email(email):
            raise UserAlreadyExistsError(f"User '{email}' already exists")

        model = UserModel(
            email=email,
            password_hash=self.hash_password(password),
            full_name=full_name,
            avatar_url=avatar_url,
        )
        # Two concurrent registrations can both pass the check above; the
        # unique constraint on email catches the loser.
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(f"User '{email}' already exists") from e

        logger.info("Created user: %s", email)
        return model

    def authenticate(self, email: str, password: str) -> Optional[UserModel]:
        """Return the user if the credentials match, None otherwise."""
        user = self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            return None
        return user

    def get_user_by_email(self, email: str) -> Optional[UserModel]:
        return (
            self.db.query(UserModel)
            .filter(UserModel.email == email.strip().lower())
            .first()
        )

    def get_user_by_id(self, user_id: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.user_id == user_id).first()

    def get_user(self, user_id: str) -> UserModel:
        """Get a user by ID.

        Raises:
            UserNotFoundError: If no such user exists.
        """
        user = self.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User '{user_id}' not found")
        return user
