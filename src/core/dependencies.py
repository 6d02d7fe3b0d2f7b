"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes,
following Google Python Style Guide and FastAPI best practices.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from config import MAX_DOCUMENTATION_LENGTH, get_default_llm
from core.database import get_db
from core.exceptions import ConfigurationError
from generators.CourseGenerator import CourseGenerator
from utils import course_manager
from utils import invite_code_manager
from utils import membership_manager
from utils import project_manager
from utils import request_guard
from utils import user_manager

logger = logging.getLogger(__name__)


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_project_manager(db: Session = Depends(get_db)) -> project_manager.ProjectManager:
    """Get ProjectManager instance with request-scoped DB session."""
    return project_manager.ProjectManager(
        db, max_documentation_length=MAX_DOCUMENTATION_LENGTH
    )


def get_invite_code_manager(
    db: Session = Depends(get_db),
) -> invite_code_manager.InviteCodeManager:
    """Get InviteCodeManager instance with request-scoped DB session."""
    return invite_code_manager.InviteCodeManager(db)


def get_membership_manager(
    db: Session = Depends(get_db),
) -> membership_manager.MembershipManager:
    """Get MembershipManager instance with request-scoped DB session."""
    return membership_manager.MembershipManager(db)


def get_course_manager(db: Session = Depends(get_db)) -> course_manager.CourseManager:
    """Get CourseManager instance with request-scoped DB session."""
    return course_manager.CourseManager(db)


def get_course_generator() -> Optional[CourseGenerator]:
    """Get a CourseGenerator bound to the configured LLM provider.

    Returns:
        CourseGenerator instance, or None if no LLM provider is configured.
    """
    try:
        return CourseGenerator(get_default_llm())
    except ConfigurationError as e:
        logger.warning("Course generation unavailable: %s", e)
        return None


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
ProjectManagerDep = Annotated[
    project_manager.ProjectManager, Depends(get_project_manager)
]
InviteCodeManagerDep = Annotated[
    invite_code_manager.InviteCodeManager, Depends(get_invite_code_manager)
]
MembershipManagerDep = Annotated[
    membership_manager.MembershipManager, Depends(get_membership_manager)
]
CourseManagerDep = Annotated[
    course_manager.CourseManager, Depends(get_course_manager)
]
CourseGeneratorDep = Annotated[Optional[CourseGenerator], Depends(get_course_generator)]
RequestGuardDep = Annotated[
    request_guard.RequestGuard, Depends(request_guard.get_request_guard)
]
