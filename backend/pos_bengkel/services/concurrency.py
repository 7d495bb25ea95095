# Overview: Retry wrapper for units of work that lose a lock race.

from __future__ import annotations

import time

from sqlalchemy.exc import OperationalError

from ..errors import InternalError


def _is_lock_failure(exc: InternalError) -> bool:
    return isinstance(exc.__cause__, OperationalError)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB unit of work with retry on lock/timeout failures.

    `func` must open and close its own transaction (atomic()), so every attempt
    starts from a clean session. Domain errors are never retried.
    """
    for attempt in range(attempts):
        try:
            return func()
        except InternalError as exc:
            if not _is_lock_failure(exc) or attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))
