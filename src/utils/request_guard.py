"""In-flight request tracking.

Rejects a second submission of the same action while the first one is
still running, e.g. a double click on "generate invite code".
"""

import logging
import threading
from contextlib import contextmanager
from typing import Hashable, Iterator, Optional, Set

from core.exceptions import DuplicateRequestError

logger = logging.getLogger(__name__)


class RequestGuard:
    """Thread-safe set of keys for actions that are currently in flight."""

    def __init__(self):
        self._in_flight: Set[Hashable] = set()
        self._lock = threading.Lock()

    def acquire(self, key: Hashable) -> None:
        with self._lock:
            if key in self._in_flight:
                logger.warning("Duplicate request rejected: %s", key)
                raise DuplicateRequestError("This request is already being processed")
            self._in_flight.add(key)

    def release(self, key: Hashable) -> None:
        with self._lock:
            self._in_flight.discard(key)

    def is_held(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._in_flight

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        """Hold ``key`` for the duration of the block.

        Raises:
            DuplicateRequestError: If the key is already held.
        """
        self.acquire(key)
        try:
            yield
        finally:
            self.release(key)


_guard_instance: Optional[RequestGuard] = None


def get_request_guard() -> RequestGuard:
    """Get the process-wide RequestGuard instance."""
    global _guard_instance
    if _guard_instance is None:
        _guard_instance = RequestGuard()
    return _guard_instance
