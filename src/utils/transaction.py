"""Unit-of-work helper shared by the managers."""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StoreError

logger = logging.getLogger(__name__)


@contextmanager
def transaction(
    db: Session,
    action: str,
    on_conflict: Optional[Callable[[], Exception]] = None,
) -> Iterator[Session]:
    """Run the block and commit, or roll back everything it wrote.

    Args:
        db: Request-scoped session.
        action: Short description used in logs and error messages.
        on_conflict: Builds the exception raised when the commit violates a
            unique constraint. Defaults to StoreError.

    Yields:
        The same session.

    Raises:
        StoreError: If the database rejects the write.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if on_conflict is not None:
            raise on_conflict() from e
        logger.error("Integrity error while trying to %s: %s", action, e)
        raise StoreError(f"Failed to {action}: constraint violation") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error while trying to %s: %s", action, e)
        raise StoreError(f"Failed to {action}") from e
    except Exception:
        db.rollback()
        raise
