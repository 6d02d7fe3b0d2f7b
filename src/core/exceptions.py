"""Custom exception classes for the onboarding projects service.

This module defines application-specific exceptions following Google Python
Style Guide. Managers raise these; the HTTP layer maps them to responses.
"""


class OnboardingError(Exception):
    """Base exception for all onboarding service errors."""

    pass


class AuthorizationError(OnboardingError):
    """Raised when the acting user lacks the role an operation requires."""

    pass


class ValidationError(OnboardingError):
    """Raised when data validation fails."""

    pass


class NotFoundError(OnboardingError):
    """Raised when a lookup yields nothing."""

    pass


class ProjectNotFoundError(NotFoundError):
    """Raised when a requested project cannot be found."""

    def __init__(self, project_id: str):
        """Initialize the exception.

        Args:
            project_id: The ID of the project that was not found.
        """
        self.project_id = project_id
        super().__init__(f"Project '{project_id}' not found")


class MemberNotFoundError(NotFoundError):
    """Raised when a project membership cannot be found."""

    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Member '{member_id}' not found")


class InvitationNotFoundError(NotFoundError):
    """Raised when a pending email invitation cannot be found or has expired."""

    def __init__(self, message: str = "Invalid or expired invitation"):
        super().__init__(message)


class InviteCodeNotFoundError(NotFoundError):
    """Raised when an invite code is unknown, expired or used up."""

    def __init__(self, message: str = "Invalid or expired invite code"):
        super().__init__(message)


class TopicNotFoundError(NotFoundError):
    """Raised when a course topic cannot be found."""

    pass


class SummaryNotFoundError(NotFoundError):
    """Raised when a course summary cannot be found."""

    pass


class QuizNotFoundError(NotFoundError):
    """Raised when a course quiz cannot be found."""

    pass


class AlreadyExistsError(OnboardingError):
    """Raised when creating a row that would duplicate an existing one."""

    pass


class AlreadyMemberError(AlreadyExistsError):
    """Raised when a user is already a member of the target project."""

    def __init__(self, message: str = "You are already a member of this project"):
        super().__init__(message)


class DuplicateRequestError(OnboardingError):
    """Raised when the same action is submitted again before it resolves."""

    pass


class CourseFormatError(OnboardingError):
    """Raised when generator output is unparseable or schema-mismatched."""

    pass


class LLMError(OnboardingError):
    """Raised when there is an error communicating with the LLM."""

    pass


class StoreError(OnboardingError):
    """Raised when the persistence layer rejects an operation."""

    pass


class ConfigurationError(OnboardingError):
    """Raised when there is a configuration error."""

    pass
