from __future__ import annotations

import time
from typing import Callable, TypeVar

import structlog

from ..core.exceptions import PersistenceError

T = TypeVar("T")

log = structlog.get_logger(__name__)


def with_retries(operation: Callable[[], T], *, attempts: int = 3, delay: float = 0.2, label: str = "operation") -> T:
    """Run operation, retrying PersistenceError up to `attempts` times in total.

    Domain errors other than PersistenceError propagate immediately.
    """

    attempts = max(int(attempts), 1)
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except PersistenceError as exc:
            if attempt == attempts:
                log.error("persistence_retries_exhausted", operation=label, attempts=attempts, error=str(exc))
                raise
            log.warning("persistence_retry", operation=label, attempt=attempt, error=str(exc))
            if delay:
                time.sleep(delay * attempt)
    raise AssertionError("unreachable")
