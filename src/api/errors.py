"""Translation of domain errors into HTTP errors for the REST routes."""

from fastapi import HTTPException, status

from core.exceptions import (
    AlreadyExistsError,
    AuthorizationError,
    CourseFormatError,
    DuplicateRequestError,
    LLMError,
    NotFoundError,
    OnboardingError,
    ValidationError,
)

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyExistsError, status.HTTP_409_CONFLICT),
    (DuplicateRequestError, status.HTTP_409_CONFLICT),
    (CourseFormatError, status.HTTP_502_BAD_GATEWAY),
    (LLMError, status.HTTP_502_BAD_GATEWAY),
)


def http_error(exc: OnboardingError) -> HTTPException:
    """Build the HTTPException for a domain error; unknown kinds become 500."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(exc),
    )
